"""
Translation of service-layer exceptions into HTTP responses
Reference: https://fastapi.tiangolo.com/tutorial/handling-errors/
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status

from tasktrack.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    TaskTrackError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
}


def to_http_exception(error: TaskTrackError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


@contextmanager
def service_errors(action: str) -> Iterator[None]:
    """
    Map exceptions raised while `action` runs to HTTP errors

    - NotFoundError -> 404, ConflictError -> 409, InvalidArgumentError -> 400
    - HTTPException passes through unchanged
    - anything else is logged with its traceback and becomes a generic 500

    Usage:
        with service_errors("completing task"):
            task = await task_service.complete_task(task_id, actor_id)
    """
    try:
        yield
    except HTTPException:
        raise
    except TaskTrackError as e:
        logger.info(f"Rejected {action}: {type(e).__name__}: {e.message}")
        raise to_http_exception(e) from e
    except Exception as e:
        logger.error(
            f"Unexpected error {action}: {type(e).__name__}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"An unexpected error occurred while {action}",
        ) from e
