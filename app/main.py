from fastapi import FastAPI

from app.clinica.api import api_router
from app.clinica.core.config import settings
from app.clinica.core.errors import setup_exception_handlers
from app.clinica.core.logging import configure_logging
from app.clinica.middleware.auth_context import AuthContextMiddleware
from app.clinica.middleware.observability import ObservabilityMiddleware
from app.clinica.middleware.trace import TraceIdMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(AuthContextMiddleware)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
