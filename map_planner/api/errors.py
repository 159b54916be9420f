# map_planner/api/errors.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from map_planner.core.errors import (
    ConfigurationError,
    InvalidRequestError,
    InvalidToolCallError,
    ModelResponseError,
    NoResultsError,
    NotFoundError,
    PlannerError,
    ProviderError,
)
from map_planner.core.logging_config import logger

STATUS_BY_ERROR = {
    InvalidRequestError: 400,
    NotFoundError: 404,
    NoResultsError: 404,
    ProviderError: 502,
    ModelResponseError: 502,
    InvalidToolCallError: 502,
    ConfigurationError: 500,
}


def status_for(exc: PlannerError) -> int:
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


def _failure(status: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status, content={"success": False, "error": error, **extra})


async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.url.path} failed ({exc.code}): {exc.message}")
    else:
        logger.info(f"{request.url.path} -> {status} ({exc.code}): {exc.message}")

    if isinstance(exc, (NotFoundError, NoResultsError)):
        return _failure(status, exc.public_detail)
    if isinstance(exc, InvalidRequestError):
        return _failure(status, exc.message)
    return _failure(status, exc.public_message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"path": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return _failure(400, "Validation failed", details=details)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error in {request.url.path}: {exc}")
    return _failure(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlannerError, planner_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
