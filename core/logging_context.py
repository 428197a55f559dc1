# core/logging_context.py
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Optional

_state = threading.local()


@dataclass(frozen=True)
class LogContext:
    request_id: str
    method: str = ""
    path: str = ""
    user_id: Optional[int] = None


def bind(*, request_id: str, method: str = "", path: str = "", user_id: Optional[int] = None) -> LogContext:
    ctx = LogContext(request_id=request_id, method=method, path=path, user_id=user_id)
    _state.ctx = ctx
    return ctx


def bind_user(user_id: Optional[int]) -> None:
    """Attach the authenticated user once auth middleware has run."""
    ctx = current()
    if ctx is not None:
        _state.ctx = LogContext(request_id=ctx.request_id, method=ctx.method, path=ctx.path, user_id=user_id)


def unbind() -> None:
    _state.__dict__.pop("ctx", None)


def current() -> LogContext | None:
    return getattr(_state, "ctx", None)


def make_request_id() -> str:
    return uuid.uuid4().hex
