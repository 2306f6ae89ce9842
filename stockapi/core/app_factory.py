from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.credential_service import CredentialService
from ..application.services.product_service import ProductService
from ..application.services.token_service import TokenService
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.problems import register_exception_handlers
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import products as products_router

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Product Stock API", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(auth_router.router)
    app.include_router(products_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        if "*" in settings.cors_allow_origins:
            logger.warning("CORS allows every origin. Set CORS_ALLOW_ORIGINS in production.")
        persistence = SQLitePersistence(settings.database_path)
        credential_service = CredentialService(persistence, rounds=settings.bcrypt_rounds)
        credential_service.ensure_default_user(
            settings.seed_user_email, settings.seed_user_password
        )
        token_service = TokenService(settings.jwt)
        product_service = ProductService(persistence)

        container = ApplicationContainer(
            settings=settings,
            persistence=persistence,
            credential_service=credential_service,
            token_service=token_service,
            product_service=product_service,
        )

        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Product Stock API ready (database: %s)", settings.database_path)

        try:
            yield
        finally:
            persistence.close()

    return lifespan
