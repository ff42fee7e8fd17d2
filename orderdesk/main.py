from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from orderdesk import config
from orderdesk.db import Base, engine
from orderdesk.errors import DomainError, RepositoryError
from orderdesk.utils.logging import add_context, clear_context, configure_logging, get_logger

# Models must be imported before create_all() so the tables are registered
import orderdesk.models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Application started", app=config.APP_NAME, env=config.ENV)
    yield


# ==== Middleware ====
class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        clear_context()
        add_context(method=request.method, path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_context()


# ==== Error mapping ====
async def domain_error_handler(request: Request, exc: DomainError):
    # expected outcome, not a failure
    logger.info("Request rejected", code=exc.code, status=exc.http_status, detail=exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content={"code": exc.code, "message": exc.message},
    )


INTERNAL_ERROR = {"code": "internal_error", "message": "internal server error"}


async def repository_error_handler(request: Request, exc: RepositoryError):
    logger.error("Database error", operation=exc.operation, error=str(exc.cause))
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


async def unhandled_error_handler(request: Request, exc: Exception):
    # Starlette re-raises after this response and the server logs the traceback
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title=config.APP_NAME, lifespan=lifespan)
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ==== Routers ====
    from orderdesk.routers import orders as orders_router
    from orderdesk.routers import temp_orders as temp_orders_router
    from orderdesk.routers import public as public_router

    app.include_router(orders_router.router)
    app.include_router(temp_orders_router.router)
    app.include_router(public_router.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
