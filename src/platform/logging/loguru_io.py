"""
Logger facade

    Logger.base.info('...')      plain log line
    @Logger.io                    trace an async call: args at entry, return value
                                  or exception at exit (DEBUG only for args/return)

Every traced call in the seat service is a coroutine (use cases, repos,
controllers, the seat API client), so only coroutine functions are accepted.
"""

from functools import wraps
from inspect import iscoroutinefunction
import types
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ParamSpec, TypeVar, cast, overload


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io_config import ExtraField, custom_logger
from src.platform.logging.loguru_io_utils import (
    call_target,
    drop_unknown_kwargs,
    enter_call,
    exit_call,
    mask,
    truncate,
)


_F = TypeVar('_F', bound=Callable[..., Awaitable[Any]])


class LoguruIO:
    def __init__(
        self, logger: 'LoguruLogger', *, reraise: bool = True, truncate_content: bool = False
    ) -> None:
        self._logger = logger
        self.reraise = reraise
        self.truncate_content = truncate_content
        self.target = ''

    def _bound(self, start_time: float) -> 'LoguruLogger':
        return self._logger.bind(
            **{ExtraField.CALL_TARGET: self.target, ExtraField.CHAIN_START_TIME: start_time}
        )

    def _render(self, data: Any) -> Any:
        masked = mask(data)
        return truncate(masked) if self.truncate_content else masked

    def _log_exception(self, logger: 'LoguruLogger', e: Exception) -> None:
        # Logged once, by the innermost traced call
        if getattr(e, '_has_logged', False):
            return
        e._has_logged = True  # type: ignore[attr-defined]
        if isinstance(e, CustomBaseError):
            logger.opt(depth=2).error(f'{type(e).__name__}: {e.message}')
        else:
            logger.opt(depth=2).exception(f'{type(e).__name__}: {e}')

    def _hide_from_traceback(self, func: Callable[..., Any]) -> Callable[..., Any]:
        func.__code__ = func.__code__.replace(  # type: ignore[attr-defined]
            co_filename=cast(types.FunctionType, self._logger.catch).__code__.co_filename
        )
        return func

    def __call__(self, func: _F) -> _F:
        if not iscoroutinefunction(func):
            raise TypeError(f'@Logger.io traces coroutine functions only, got {func!r}')
        self.target = call_target(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = self._bound(enter_call())
            try:
                if settings.DEBUG:
                    logger.opt(depth=1).debug(
                        f'args: {self._render(args)}, kwargs: {self._render(kwargs)}'
                    )
                return_value = await func(*args, **drop_unknown_kwargs(func, kwargs))
                if settings.DEBUG:
                    logger.opt(depth=1).debug(f'return: {self._render(return_value)}')
                return return_value
            except Exception as e:
                self._log_exception(logger, e)
                if self.reraise:
                    raise
                return None
            finally:
                exit_call()

        return cast(_F, self._hide_from_traceback(wrapper))


_P = ParamSpec('_P')
_T = TypeVar('_T')


class Logger:
    base = custom_logger

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate_content: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate_content: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        tracer = LoguruIO(custom_logger, reraise=reraise, truncate_content=truncate_content)
        if func:
            return tracer(func)  # type: ignore[arg-type]
        return tracer
