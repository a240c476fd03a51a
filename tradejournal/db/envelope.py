"""Boundary between internal errors and the response envelope."""

import functools
import logging
from typing import Callable

from tradejournal.errors import FilesystemError, JournalError
from tradejournal.models.response import ApiResponse

logger = logging.getLogger(__name__)


def api_operation(action: str) -> Callable:
    """Wrap a store or engine method so it always returns an ``ApiResponse``.

    A plain return value becomes ``ApiResponse.ok(value)``; an
    ``ApiResponse`` returned by the method is passed through untouched.
    ``JournalError`` and ``OSError`` become a failed response whose
    message is prefixed with ``Failed to <action>``.

    Args:
        action: What the operation attempts, e.g. ``"save trade"``.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ApiResponse:
            try:
                result = func(*args, **kwargs)
            except JournalError as e:
                logger.debug("%s failed: %s", action, e)
                return ApiResponse.fail(f"Failed to {action}: {e}", kind=type(e).__name__)
            except OSError as e:
                fs_error = FilesystemError.from_os_error(e)
                logger.warning("%s failed: %s", action, fs_error)
                return ApiResponse.fail(
                    f"Failed to {action}: {fs_error}", kind="FilesystemError"
                )
            except Exception as e:
                logger.exception("Unexpected error during %s", action)
                return ApiResponse.fail(f"Failed to {action}: {e}", kind=type(e).__name__)
            if isinstance(result, ApiResponse):
                return result
            return ApiResponse.ok(result)

        return wrapper

    return decorator
