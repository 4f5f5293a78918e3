import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from board.cache import cache
from board.config import settings
from board.exceptions import ArticleNotFoundError, CommentNotFoundError, CommentTreeError
from board.middleware import RequestContextMiddleware
from board.routers import articles, comments, hashtags, metrics, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        await cache.connect()
    except Exception as exc:
        logger.warning("Cache unavailable, serving from the database only: %s", exc)
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Project Board API",
    description="Message board with hashtags and threaded comments",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(articles.router)
app.include_router(comments.router)
app.include_router(hashtags.router)
app.include_router(users.router)
app.include_router(metrics.router)


# Domain exception handlers
@app.exception_handler(ArticleNotFoundError)
async def article_not_found(request: Request, exc: ArticleNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Article not found"})


@app.exception_handler(CommentNotFoundError)
async def comment_not_found(request: Request, exc: CommentNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Comment not found"})


@app.exception_handler(CommentTreeError)
async def malformed_comment_tree(request: Request, exc: CommentTreeError):
    logger.error("Malformed comment thread: %s", exc)
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
