import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tenant_api.core.settings import settings
from tenant_api.core.store import PrismaMembershipStore
from tenant_api.domains.auth.routes import router as auth_router
from tenant_api.domains.organizations.routes import router as organizations_router
from tenant_api.domains.outlines.routes import router as outlines_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Generated client, only importable after `prisma generate`
    from prisma import Prisma

    # Startup
    db = Prisma()
    await db.connect()
    app.state.db = db
    app.state.store = PrismaMembershipStore(db)
    logger.info("Database connected")
    yield
    # Shutdown
    await db.disconnect()
    logger.info("Database disconnected")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Tenant API",
        description="Multi-tenant organizations and outlines API",
        version="0.1.0",
        lifespan=lifespan,
    )

    origins = list(settings.CORS_ORIGINS)
    if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
        origins.append(settings.FRONTEND_URL)

    # Session cookies need credentialed CORS, so origins are explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(organizations_router, prefix="/api/v1")
    app.include_router(outlines_router, prefix="/api/v1")

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"message": "Tenant API is running"}

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()
