"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from rostercache.api.middleware import RequestLogMiddleware
from rostercache.api.routes import ops_router, records_router
from rostercache.config import AppConfig
from rostercache.core.exceptions import RosterCacheError, StoreError
from rostercache.core.services.cache_coordinator import CacheCoordinator
from rostercache.core.services.record_service import RecordService
from rostercache.core.services.renderer import ListRenderer
from rostercache.infrastructure.backends.redis import RedisCacheBackend
from rostercache.infrastructure.key_builders.default import DefaultKeyBuilder
from rostercache.infrastructure.serializers.json import JsonSerializer
from rostercache.infrastructure.stores.sqlite import SqliteDurableStore

logger = logging.getLogger(__name__)


async def build_coordinator(config: AppConfig, stack: AsyncExitStack) -> CacheCoordinator:
    """Open the durable store and Redis client described by ``config``.

    Both are closed when ``stack`` unwinds.
    """
    store = await stack.enter_async_context(SqliteDurableStore(config.database_path))
    backend = await stack.enter_async_context(
        RedisCacheBackend(
            host=config.redis_host,
            port=config.redis_port,
            password=config.redis_password,
            default_ttl=config.distributed_ttl,
            socket_timeout=config.redis_timeout,
        )
    )
    logger.info(
        "Distributed cache at %s:%s (%s)",
        config.redis_host,
        config.redis_port,
        "authenticated" if config.redis_password else "unauthenticated",
    )
    return CacheCoordinator(
        store=store,
        backend=backend,
        key_builder=DefaultKeyBuilder(prefix=config.key_prefix),
        serializer=JsonSerializer(),
        config=config.cache_config(),
    )


def create_app(
    config: AppConfig | None = None,
    coordinator: CacheCoordinator | None = None,
) -> FastAPI:
    """Build the HTTP application.

    Args:
        config: Process settings. Read from the environment if not provided.
        coordinator: Pre-built coordinator. When given, the caller owns
            its store and backend and the application neither opens
            nor closes them.

    Returns:
        The FastAPI application.
    """
    config = config or AppConfig.from_env()
    renderer = ListRenderer(config.templates_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            active = coordinator or await build_coordinator(config, stack)
            app.state.service = RecordService(active, renderer)
            logger.info("rostercache ready")
            yield
            logger.info("rostercache shutting down")

    app = FastAPI(
        title="rostercache",
        description="Quiz and goal registrations behind a tiered cache",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RosterCacheError)
    async def handle_roster_error(request: Request, exc: RosterCacheError) -> PlainTextResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc
            )
            return PlainTextResponse("storage unavailable", status_code=exc.status_code)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    # Fixed paths first, so they are not captured by /{collection}/{email}
    app.include_router(ops_router)
    app.include_router(records_router)
    return app
