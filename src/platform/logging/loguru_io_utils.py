from inspect import getfile, getfullargspec, getsourcelines
from os.path import basename
from re import IGNORECASE, compile
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


# key='value' / key="value" / key=value inside repr() output
_SENSITIVE_PATTERN = compile(
    rf'({"|".join(sorted(SENSITIVE_KEYWORDS))})(\s*[=:]\s*)(\'[^\']*\'|"[^"]*"|[^\s,)]+)',
    IGNORECASE,
)

MASK = '********'
MAX_CONTENT_LENGTH = 500


def enter_call() -> float:
    """Count one more traced call on this context; returns the chain start time."""
    call_depth_var.set(call_depth_var.get() + 1)
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def exit_call() -> None:
    depth = call_depth_var.get() - 1
    call_depth_var.set(depth)
    if depth <= 0:
        chain_start_time_var.set(0)


def call_target(func: Callable[..., Any]) -> str:
    try:
        lineno = getsourcelines(func)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(func))}::{func.__qualname__}:{lineno}'


def drop_unknown_kwargs(func: Callable[..., Any], kwargs: dict[str, Any]) -> dict[str, Any]:
    """Keep only keyword arguments the wrapped function accepts."""
    spec = getfullargspec(getattr(func, '__wrapped__', func))
    if spec.varkw:
        return kwargs
    accepted = set(spec.args) | set(spec.kwonlyargs)
    return {k: v for k, v in kwargs.items() if k in accepted}


def mask(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: MASK if k in SENSITIVE_KEYWORDS else mask(v) for k, v in data.items()}
    if isinstance(data, list | tuple):
        return type(data)(mask(item) for item in data)
    data_str = str(data)
    masked = _SENSITIVE_PATTERN.sub(rf"\1\2'{MASK}'", data_str)
    return data if data_str == masked else masked


def truncate(data: Any, max_length: int = MAX_CONTENT_LENGTH) -> Any:
    data_str = str(data)
    if len(data_str) <= max_length:
        return data
    return f'{data_str[:max_length]}... ({len(data_str)} chars)'
