from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from faqflow.errors import CycleError, NotFoundError, ValidationError

from backend.app.config import AppConfig
from backend.app.api.routes_faqs import router as faqs_router
from backend.app.api.routes_graph import router as graph_router
from backend.app.dependencies import get_session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Hydrates the editor session once at startup and lets pending
    saves drain at shutdown.
    """
    session = get_session()

    yield

    session.discard()
    get_session.cache_clear()


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "message": str(exc)},
        )

    return handler


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.add_exception_handler(ValidationError, _error_handler(400))
    app.add_exception_handler(NotFoundError, _error_handler(404))
    app.add_exception_handler(CycleError, _error_handler(409))

    app.include_router(
        faqs_router,
        prefix=config.api_prefix,
        tags=["faqs"],
    )

    app.include_router(
        graph_router,
        prefix=f"{config.api_prefix}/graph",
        tags=["graph"],
    )

    return app


config = AppConfig()
app = create_app(config)
