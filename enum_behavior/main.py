from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI, Request

from enum_behavior.core.config import settings
from enum_behavior.core.logging import configure_logging, correlation_context, get_logger
from enum_behavior.db.database import Base, engine
from enum_behavior.engine.registry import EnumFieldRegistry
from enum_behavior.i18n import preload_i18n_resources
from enum_behavior.models.enum_mixin import EnumMixin
from enum_behavior.routers.enums import router as enums_router
from enum_behavior.routers.exceptions import register_exception_handlers


configure_logging(level=settings.log_level, environment=settings.environment)
logger = get_logger("enum_behavior.main", component="app")

CORRELATION_HEADER = "X-Correlation-ID"


def create_app(
    registry: Optional[EnumFieldRegistry] = None,
    models: Iterable[type[EnumMixin]] = (),
) -> FastAPI:
    """Build the API around an enum registry.

    ``models`` are bound to ``registry`` at startup and released at
    shutdown, so every lookup served by the app sees fully registered
    models.
    """
    registry = registry if registry is not None else EnumFieldRegistry()
    bound_models = tuple(models)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.run_startup_ddl:
            logger.info("startup_execute_ddl")
            Base.metadata.create_all(bind=engine)
        if settings.i18n_preload_enabled:
            stats = preload_i18n_resources()
            logger.info("i18n_preload_complete", **stats)
        for model in bound_models:
            model.setup_enums(registry)
        logger.info("enum_models_bound", models=[model.enum_model_id() for model in bound_models])
        yield
        for model in bound_models:
            model.teardown_enums()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.enum_registry = registry
    register_exception_handlers(app)

    @app.middleware("http")
    async def _bind_correlation_id(request: Request, call_next):
        with correlation_context(request.headers.get(CORRELATION_HEADER)) as cid:
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = cid
        return response

    app.include_router(enums_router)

    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "environment": settings.environment,
            "enum_models": sorted(str(model_id) for model_id in registry.snapshot()),
        }

    return app


app = create_app()
