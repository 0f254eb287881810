"""
Helpers for building ToolResult envelopes at the tool boundary.
"""
import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

from .exceptions import ErrorCode, InputError, SkillError
from .logging_utils import new_trace_id
from .models import ToolError, ToolResult, TxReceipt

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., ToolResult])


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value


def to_tool_error(err: BaseException) -> ToolError:
    """
    Map any exception to a ToolError.

    SkillError keeps its code and details; anything else becomes UNKNOWN_ERROR.
    """
    if isinstance(err, SkillError):
        return ToolError(code=err.code, message=err.message, details=_jsonable(err.details))
    return ToolError(code=ErrorCode.UNKNOWN_ERROR.value, message=str(err) or type(err).__name__)


def ok(data: Any, tx: Optional[TxReceipt] = None, trace_id: Optional[str] = None) -> ToolResult:
    """Build a success envelope"""
    return ToolResult(success=True, data=_jsonable(data), tx=tx, trace_id=trace_id)


def fail(err: BaseException, trace_id: Optional[str] = None) -> ToolResult:
    """Build a failure envelope; data and tx are never set"""
    return ToolResult(success=False, error=to_tool_error(err), trace_id=trace_id)


def require_field(value: Any, name: str) -> Any:
    """
    Ensure a required request field is present.

    Raises:
        InputError: INVALID_INPUT if the value is None or an empty string
    """
    if value is None or value == "":
        raise InputError(ErrorCode.INVALID_INPUT, f"{name} is required")
    return value


def tool_operation(fn: F) -> F:
    """
    Decorate a domain operation so that it never raises.

    Any exception is logged (secrets redacted) and converted into a failure
    ToolResult carrying a fresh trace id.
    """
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            trace_id = new_trace_id()
            result = fail(e, trace_id)
            logger.error(
                "tool_failed",
                extra={"fields": {
                    "tool": fn.__name__,
                    "traceId": trace_id,
                    "code": result.error.code,
                    "message": result.error.message,
                }},
            )
            return result

    return wrapper  # type: ignore[return-value]
