from types import SimpleNamespace

from sqlalchemy import text

from app.config import Settings
from app.database import Database, get_db


async def test_database_session_per_request():
    database = Database(Settings(DATABASE_URL="sqlite+aiosqlite://", SECRET_KEY="x"))
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(db=database)))
    try:
        sessions = get_db(request)
        session = await anext(sessions)
        assert (await session.execute(text("SELECT 1"))).scalar() == 1
        await sessions.aclose()
    finally:
        await database.dispose()


def test_cors_origins_from_comma_separated_string():
    settings = Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        SECRET_KEY="x",
        CORS_ORIGINS="https://skola.hr, http://localhost:5173",
    )
    assert settings.CORS_ORIGINS == ["https://skola.hr", "http://localhost:5173"]
