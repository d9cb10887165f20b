from dataclasses import dataclass
from json import JSONDecodeError
from typing import Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import AuthError, ValidationError
from app.repositories import NewsRepository, ScheduleRepository, UserRepository
from app.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_body(request: Request) -> Any:
    """Decode a JSON or form-encoded body. Form values always arrive as strings."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: form.get(key) for key in form.keys()}
    raw = await request.body()
    if not raw:
        return {}
    try:
        return await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Neispravan zahtjev.")


def body_of(model: type[BaseModel]):
    """Dependency that reads the request body into ``model``; non-object bodies are a 400."""

    async def dependency(request: Request) -> BaseModel:
        data = await read_body(request)
        if not isinstance(data, dict):
            raise ValidationError("Neispravan zahtjev.")
        return model.model_validate(data)

    return dependency


@dataclass(frozen=True)
class TokenUser:
    id: int
    username: str
    is_admin: bool


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_news_repository(db: AsyncSession = Depends(get_db)) -> NewsRepository:
    return NewsRepository(db)


def get_schedule_repository(db: AsyncSession = Depends(get_db)) -> ScheduleRepository:
    return ScheduleRepository(db)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenUser:
    """Identity taken from the signed token alone; the store is not consulted."""
    if credentials is None:
        raise AuthError("Nedostaje token.")
    payload = decode_access_token(credentials.credentials)
    return TokenUser(
        id=payload["id"],
        username=payload["username"],
        is_admin=bool(payload.get("isAdmin")),
    )

