from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi import FastAPI, Request

from core.logging import get_logger
from core.resilience import BackendWriteError, ServiceUnavailableError
from schemas.common import error_response, ApiStatus
from services.ingestion import MatchValidationError
from services.state import PlayerNotFoundError

log = get_logger("middleware")


def setup_middleware(app: FastAPI, origins: list[str] | None = None):
    """Setup CORS and global exception handlers"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        log.info("request_validation_failed", path=str(request.url.path), errors=str(exc.errors()))
        return JSONResponse(
            status_code=422,
            content=error_response(
                message="Request validation failed",
                status=ApiStatus.VALIDATION_ERROR,
                error_code="VALIDATION_ERROR",
                data={"errors": [str(e.get("msg")) for e in exc.errors()]}
            )
        )

    @app.exception_handler(MatchValidationError)
    async def match_validation_handler(request: Request, exc: MatchValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                message="Match submission rejected",
                status=ApiStatus.VALIDATION_ERROR,
                error_code="MATCH_VALIDATION_ERROR",
                data={"errors": [e.model_dump(mode="json") for e in exc.errors]}
            )
        )

    @app.exception_handler(PlayerNotFoundError)
    async def not_found_handler(request: Request, exc: PlayerNotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_response(
                message=str(exc),
                status=ApiStatus.NOT_FOUND,
                error_code="PLAYER_NOT_FOUND",
            )
        )

    @app.exception_handler(ServiceUnavailableError)
    async def unavailable_handler(request: Request, exc: ServiceUnavailableError):
        log.error("service_unavailable", path=str(request.url.path), error=str(exc.cause or exc))
        return JSONResponse(
            status_code=503,
            content=error_response(
                message="Service unavailable, please retry",
                status=ApiStatus.SERVICE_UNAVAILABLE,
                error_code="SERVICE_UNAVAILABLE",
            )
        )

    @app.exception_handler(BackendWriteError)
    async def write_error_handler(request: Request, exc: BackendWriteError):
        return JSONResponse(
            status_code=502,
            content=error_response(
                message=str(exc),
                status=ApiStatus.SERVER_ERROR,
                error_code="WRITE_FAILED",
                data={"operation": exc.operation, "reason": exc.reason}
            )
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
