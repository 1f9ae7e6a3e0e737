"""
HTTP mapping of seat API errors

Every error body is {'detail': ...}; the sync client reads the same key.
- ValidationError / DomainError -> 400
- StorageError -> 500 with the storage message, the write was not applied
- Request schema errors -> 400 with the pydantic error list
- Anything else -> 500 without internals
"""

from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger

# Type alias for exception handlers (compatible with Starlette's expected signature)
ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


def _route(request: Request) -> str:
    return f'{request.method} {request.url.path}'


async def seat_api_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc))
    if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        Logger.base.error(f'💥 [API] {_route(request)} -> {error.status_code}: {error.message}')
    else:
        Logger.base.warning(f'🚫 [API] {_route(request)} -> {error.status_code}: {error.message}')
    return JSONResponse(status_code=error.status_code, content={'detail': error.message})


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.warning(f'🚫 [API] {_route(request)} -> 400: {exc}')
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'detail': str(exc)})


async def request_schema_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    Logger.base.warning(f'🚫 [API] {_route(request)} -> 400: {len(errors)} schema errors')
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.exception(f'💥 [API] Unhandled {type(exc).__name__} on {_route(request)}')
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: seat_api_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: request_schema_error_handler,
    Exception: unhandled_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
