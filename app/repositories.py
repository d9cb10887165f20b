"""
Data access for users, news and the weekly schedule.

Each repository is built around the request's ``AsyncSession`` and commits
its own writes. Errors from the store propagate to the caller, except for
``ScheduleRepository.replace`` which reports success as a flag.
"""

import math
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.coercion import (
    KEEP,
    as_utc,
    parse_expiry_on_create,
    parse_expiry_on_edit,
    parse_id,
    parse_optional_expiry,
    parse_pinned_on_create,
    parse_pinned_on_edit,
)
from app.errors import NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models import SCHEDULE_FIELDS, News, ScheduleRow, User, row_to_dict
from app.schemas import NewsCreate, NewsEdit, NewsOverwrite

logger = get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 6


def _require_text(message: str, *values: Any) -> None:
    for value in values:
        if not value or not isinstance(value, str):
            raise ValidationError(message)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_username(self, username: str) -> User | None:
        result = await self.session.execute(select(User).filter(User.username == username))
        return result.scalar_one_or_none()

    async def set_password(self, user: User, password_hash: str) -> None:
        await self.session.execute(
            update(User).where(User.id == user.id).values(password=password_hash)
        )
        await self.session.commit()


class NewsRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, data: NewsCreate) -> News:
        _require_text(
            "Svi podaci moraju biti popunjeni.",
            data.title, data.content, data.short, data.image_path,
        )
        news = News(
            title=data.title,
            content=data.content,
            short=data.short,
            expires_at=parse_expiry_on_create(data.expires_at),
            image_path=data.image_path,
            ispinned=parse_pinned_on_create(data.is_pinned),
            created_at=datetime.now(UTC),
        )
        self.session.add(news)
        await self.session.commit()
        logger.info("news_added", news_id=news.id, pinned=news.ispinned)
        return news

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(News))
        return result.scalar() or 0

    async def list_page(
        self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, now: datetime | None = None
    ) -> tuple[list[dict], int]:
        """
        Fetch one page of news, pinned first then newest first.

        Returns:
            Tuple of (annotated items, total page count)
        """
        offset = (page - 1) * limit
        query = (
            select(News)
            .order_by(News.ispinned.desc(), News.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        rows = result.scalars().all()

        total = await self.count()
        total_pages = math.ceil(total / limit)

        now = now or datetime.now(UTC)
        return [annotate_expiry(row_to_dict(row), now) for row in rows], total_pages

    async def delete(self, news_id: int) -> None:
        result = await self.session.execute(delete(News).where(News.id == news_id))
        await self.session.commit()
        logger.info("news_deleted", news_id=news_id, found=bool(result.rowcount))

    async def overwrite(self, news_id: int, data: NewsOverwrite) -> None:
        """Replace title, content, short and expiry; an absent expiry is stored as NULL."""
        await self.session.execute(
            update(News)
            .where(News.id == news_id)
            .values(
                title=data.title,
                content=data.content,
                short=data.short,
                expires_at=parse_optional_expiry(data.expires_at),
            )
        )
        await self.session.commit()

    async def edit(self, data: NewsEdit) -> News:
        """
        Partial update. Fields missing from the request keep their stored value:

        - image_path: a non-empty value replaces the stored one
        - is_pinned: replaced whenever the key is present
        - expires_at: see ``parse_expiry_on_edit`` for clear/keep/replace
        """
        if not data.id:
            raise ValidationError("Polja su obavezna.")
        _require_text("Polja su obavezna.", data.naslov, data.short, data.opis)
        news_id = parse_id(data.id)

        news = await self.session.get(News, news_id)
        if news is None:
            raise NotFoundError("Ne postoji.")

        supplied = data.model_fields_set

        news.title = data.naslov
        news.short = data.short
        news.content = data.opis
        if data.image_path:
            news.image_path = data.image_path
        if "is_pinned" in supplied:
            news.ispinned = parse_pinned_on_edit(data.is_pinned)
        if "expires_at" in supplied:
            expires_at = parse_expiry_on_edit(data.expires_at)
            if expires_at is not KEEP:
                news.expires_at = expires_at

        await self.session.commit()
        logger.info("news_edited", news_id=news_id)
        return news


def annotate_expiry(item: dict, now: datetime) -> dict:
    """Add ``isExpired`` and ``expires_in`` (milliseconds left) computed against ``now``."""
    expires_at = item.get("expires_at")
    if expires_at is None:
        item["isExpired"] = False
        item["expires_in"] = None
        return item
    remaining = as_utc(expires_at) - now
    item["isExpired"] = remaining.total_seconds() < 0
    item["expires_in"] = int(remaining.total_seconds() * 1000)
    return item


class ScheduleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace(self, rows: Any) -> bool:
        """
        Replace the whole schedule in one transaction.

        Readers never see a half-emptied table: the delete and all inserts
        are committed together or rolled back together. Failures are logged
        and reported as ``False``.
        """
        try:
            await self.session.execute(delete(ScheduleRow))
            for row in rows or []:
                self.session.add(ScheduleRow(**{name: _cell(row.get(name)) for name in SCHEDULE_FIELDS}))
            await self.session.commit()
        except Exception as e:
            logger.error("schedule_replace_failed", error=str(e), exc_info=True)
            await self.session.rollback()
            return False
        logger.info("schedule_replaced", rows=len(rows or []))
        return True

    async def list_rows(self) -> list[dict]:
        result = await self.session.execute(select(ScheduleRow))
        return [row_to_dict(row) for row in result.scalars().all()]


def _cell(value: Any) -> str | None:
    if not value:
        return None
    return str(value)
