import logging

import uvicorn
from starlette.middleware.base import BaseHTTPMiddleware

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.core.redis_client import init_redis, close_redis
from app.api.v1.api import api_router
from app.api.v1.endpoints.public_links import public_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Note: Database tables are managed by Alembic migrations
    logger.info("Starting Shared Notes API")
    await init_redis()
    yield
    logger.info("Shutting down Shared Notes API")
    await close_redis()


PROXY_HTTPS_HEADERS = {
    "x-forwarded-proto": "https",
    "x-forwarded-ssl": "on",
    "x-forwarded-scheme": "https",
    "x-forwarded-port": "443",
}
REDIRECT_STATUSES = (301, 302, 303, 307, 308)


def forwarded_as_https(request: Request) -> bool:
    return any(request.headers.get(name) == value for name, value in PROXY_HTTPS_HEADERS.items())


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Keep the https scheme behind a TLS-terminating proxy, redirects included"""
    async def dispatch(self, request: Request, call_next):
        is_https = forwarded_as_https(request)
        if is_https:
            request.scope["scheme"] = "https"

        response = await call_next(request)

        location = response.headers.get("location")
        if is_https and location and response.status_code in REDIRECT_STATUSES:
            if location.startswith("http://"):
                response.headers["location"] = "https://" + location[len("http://"):]
            elif location.startswith("/") and request.headers.get("host"):
                response.headers["location"] = f"https://{request.headers['host']}{location}"
        return response


app = FastAPI(
    title="Shared Notes API",
    description="Notes that stay private, are shared with named users, or are published through unguessable links",
    version="1.0.0",
    lifespan=lifespan
)

# Add HTTPS redirect middleware FIRST (always active to handle proxy scenarios)
app.add_middleware(HTTPSRedirectMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trusted host middleware for production
if not settings.DEBUG:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )

register_exception_handlers(app)

# Include API routers
app.include_router(api_router, prefix="/api/v1")
app.include_router(public_router, prefix=settings.PUBLIC_LINK_PREFIX, tags=["public"])


@app.get("/")
async def root():
    return {"message": "Shared Notes API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        proxy_headers=True,  # Enable proxy headers support
        forwarded_allow_ips="*"  # Allow forwarded headers from any IP
    )
