"""
Request bodies, decoded from JSON or form posts.

Fields are deliberately loose (``Any``): presence checks and coercion happen
in the repositories so that a missing field yields our own 400 body instead
of a framework validation error. ``model_fields_set`` tells an absent key
apart from an explicit null.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class LooseBody(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LoginRequest(LooseBody):
    username: Any = None
    password: Any = None


class NewsCreate(LooseBody):
    title: Any = None
    content: Any = None
    short: Any = None
    expires_at: Any = None
    is_pinned: Any = None
    image_path: Any = None


class NewsOverwrite(LooseBody):
    title: Any = None
    content: Any = None
    short: Any = None
    expires_at: Any = None


class NewsEdit(LooseBody):
    id: Any = None
    naslov: Any = None
    short: Any = None
    opis: Any = None
    expires_at: Any = None
    is_pinned: Any = None
    image_path: Any = None

