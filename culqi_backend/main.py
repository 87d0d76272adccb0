import os
from contextlib import asynccontextmanager
from logging import Logger
from typing import AsyncIterator

import inject
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .bindings import configure_bindings
from .constants import APP_NAME
from .culqi.client import CulqiClient
from .culqi.errors import GatewayConfigurationError
from .exception_handlers import ExceptionHandlers
from .health.router import router as health_router
from .payments.router import router as payments_router
from .version.models import VersionInfo
from .version.router import router as index_router

CONFIG_FILE_ENV = "APP_CONFIG_FILE"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_culqi_client()


async def close_culqi_client() -> None:
    """
    Closes the connection pool of the shared Culqi client.
    """
    logger: Logger = inject.instance(Logger)

    try:
        culqi_client: CulqiClient = inject.instance(CulqiClient)
    except GatewayConfigurationError:
        # Without a secret key no client was ever built
        logger.debug("No Culqi client to close")
        return

    await culqi_client.aclose()
    logger.info("Culqi client closed")


def create_app() -> FastAPI:
    if not inject.is_configured():
        config_file = os.environ.get(CONFIG_FILE_ENV, "app.conf")
        inject.configure(
            lambda binder: configure_bindings(binder=binder, config_file=config_file),
        )

    version_info: VersionInfo = inject.instance(VersionInfo)

    app = FastAPI(
        title=APP_NAME,
        version=version_info.release_version,
        lifespan=lifespan,
    )

    ExceptionHandlers.load_handlers(app)

    for router in [
        index_router,
        health_router,
        payments_router,
    ]:
        app.include_router(router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_headers=["*"],
        allow_methods=["*"],
    )

    return app
