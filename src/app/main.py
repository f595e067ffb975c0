from contextlib import asynccontextmanager
import os
import socket

from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import uvicorn

from src.app.api.endpoints import health, urls
from src.app.api.deps import get_db
from src.app.core.config import settings, logger
from src.app.core.exceptions import ShortenerError
from src.app.db.session import init_db
from src.app.services.url_service import resolve_and_count


def log_startup() -> None:
    hostname = os.getenv("HOSTNAME") or socket.gethostname()

    logger.info(f"URL shortener running on port {settings.PORT}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Hostname: {hostname}")
    logger.info(f"Health check: http://{settings.HOST}:{settings.PORT}/health")

    if settings.ENVIRONMENT == "development":
        logger.info(f"Local access: http://localhost:{settings.PORT}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db()
    except SQLAlchemyError as e:
        # Keep serving so /health can report the outage
        logger.error(f"Could not initialise database schema: {e}")
    log_startup()
    yield


app = FastAPI(
    title="URL Shortener API",
    description="""
    Shorten long URLs into 6-character codes and redirect visitors back.

    ## Features
    * Shorten URLs (the same URL always maps to the same code)
    * List, inspect, update and delete short links
    * Count clicks on every redirect

    ## Documentation
    * Swagger UI: [/docs](/docs)
    * ReDoc: [/redoc](/redoc)
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(ShortenerError)
async def shortener_error_handler(request: Request, exc: ShortenerError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": message}
    )


# Exact paths go first so /api and /health never reach the short code route
app.include_router(health.router, tags=["health"])
app.include_router(urls.router, prefix="/api", tags=["urls"])


@app.get("/api", tags=["root"])
async def api_index():
    return {
        "message": "Welcome to URL Shortener API",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "endpoints": {
            "shorten": "POST /api/shorten",
            "list": "GET /api/urls",
            "detail": "GET /api/urls/{shortCode}",
            "update": "PUT /api/urls/{shortCode}",
            "delete": "DELETE /api/urls/{shortCode}",
            "redirect": "GET /{shortCode}",
            "health": "GET /health",
        },
    }


@app.get("/{short_code}", tags=["redirect"])
def redirect_to_url(short_code: str, db: Session = Depends(get_db)):
    long_url = resolve_and_count(db, short_code)
    return RedirectResponse(long_url, status_code=status.HTTP_302_FOUND)


def run() -> None:
    uvicorn.run("src.app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
