"""
Loguru sinks for the seat API and the sync client

- stdout always; a rotating file under LOG_DIR (or TEST_LOG_DIR) in DEBUG mode
- stdlib loggers (granian, sqlalchemy, httpx, sse-starlette) are routed into loguru
- every line carries the service context and, for @Logger.io calls, the call target
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import os
import sys

from loguru import logger as loguru_logger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR as DEFAULT_LOG_DIR
from src.platform.logging.service_context import get_service_context


LOG_DIR = os.environ.get('TEST_LOG_DIR', str(DEFAULT_LOG_DIR))

# Keys whose values never reach a log line
SENSITIVE_KEYWORDS = frozenset({'password', 'token', 'secret', 'authorization'})

# Loggers too chatty at DEBUG: sse-starlette logs every ping, httpcore every socket event
_QUIET_DEBUG_LOGGERS = ('sse_starlette', 'httpcore', 'aiosqlite')

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def _default_extra() -> dict[str, str]:
    return {
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno <= logging.DEBUG and record.name.startswith(_QUIET_DEBUG_LOGGERS):
            return

        try:
            level: str | int = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)

min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'

loguru_logger.remove()
custom_logger = loguru_logger.bind(**_default_extra())
custom_logger.add(sys.stdout, format=log_format, level=min_log_level, enqueue=True)

if settings.DEBUG:
    prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
    hour = datetime.now(timezone.utc).strftime('%Y-%m-%d_%H')
    custom_logger.add(
        f'{LOG_DIR}/{prefix}{hour}.log',
        format=log_format,
        rotation='1 hour',
        retention='7 days',
        compression='gz',
        enqueue=True,
        level=min_log_level,
    )

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
