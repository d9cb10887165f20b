import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.auth import login as authenticate
from app.coercion import parse_positive_int
from app.config import settings
from app.database import Database
from app.errors import ValidationError, register_exception_handlers, store_errors
from app.logging_config import bind_request_context, clear_request_context, configure_logging, get_logger
from app.repositories import DEFAULT_LIMIT, DEFAULT_PAGE, NewsRepository, ScheduleRepository, UserRepository
from app.schemas import LoginRequest, NewsCreate, NewsEdit, NewsOverwrite
from dependencies import (
    TokenUser,
    body_of,
    get_current_user,
    get_news_repository,
    get_schedule_repository,
    get_user_repository,
    read_body,
)

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the connection pool at startup and dispose of it at shutdown."""
    app.state.db = Database(settings)
    logger.info("database_ready", environment=settings.ENVIRONMENT)
    try:
        yield
    finally:
        await app.state.db.dispose()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    bind_request_context(request_id, method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


# -------------------- auth --------------------

@app.post("/login")
async def login(
    body: LoginRequest = Depends(body_of(LoginRequest)),
    users: UserRepository = Depends(get_user_repository),
):
    with store_errors("Greška na serveru.", catch=Exception):
        return await authenticate(users, body.username, body.password)


@app.get("/me")
async def read_current_user(current_user: TokenUser = Depends(get_current_user)):
    return {"id": current_user.id, "username": current_user.username, "isAdmin": current_user.is_admin}


# -------------------- news --------------------

@app.post("/add-news")
async def add_news(
    body: NewsCreate = Depends(body_of(NewsCreate)),
    news: NewsRepository = Depends(get_news_repository),
):
    with store_errors("Greška pri dodavanju novosti."):
        await news.add(body)
    return {"status": "success", "message": "Novost dodana!"}


@app.get("/get-news-count")
async def get_news_count(news: NewsRepository = Depends(get_news_repository)):
    with store_errors():
        count = await news.count()
    return {"count": count}


@app.get("/get-news")
async def get_news(
    page: str | None = None,
    limit: str | None = None,
    news: NewsRepository = Depends(get_news_repository),
):
    with store_errors():
        novosti, total_pages = await news.list_page(
            parse_positive_int(page, DEFAULT_PAGE),
            parse_positive_int(limit, DEFAULT_LIMIT),
        )
    return {"novosti": novosti, "totalPages": total_pages}


@app.delete("/delete-news/{news_id}")
async def delete_news(news_id: int, news: NewsRepository = Depends(get_news_repository)):
    with store_errors():
        await news.delete(news_id)
    return {"status": "success", "message": "Novost obrisana."}


@app.post("/update-news/{news_id}")
async def update_news(
    news_id: int,
    body: NewsOverwrite = Depends(body_of(NewsOverwrite)),
    news: NewsRepository = Depends(get_news_repository),
):
    with store_errors():
        await news.overwrite(news_id, body)
    return {"message": "Novost izmijenjena."}


@app.post("/edit-news")
async def edit_news(
    body: NewsEdit = Depends(body_of(NewsEdit)),
    news: NewsRepository = Depends(get_news_repository),
):
    with store_errors():
        await news.edit(body)
    return {"status": "success", "message": "Izmijenjeno."}


# -------------------- schedule --------------------

@app.post("/updateRaspored")
async def update_raspored(
    request: Request, schedule: ScheduleRepository = Depends(get_schedule_repository)
):
    try:
        data = await read_body(request)
    except ValidationError:
        logger.info("schedule_body_rejected")
        return {"success": False}
    # bodies that are not objects carry no rows
    rows = data.get("rows") if isinstance(data, dict) else None
    return {"success": await schedule.replace(rows)}


@app.get("/getRaspored")
async def get_raspored(schedule: ScheduleRepository = Depends(get_schedule_repository)):
    try:
        rows = await schedule.list_rows()
    except Exception as e:
        logger.error("schedule_read_failed", error=str(e), exc_info=True)
        return {"success": False}
    return {"rows": rows}


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
