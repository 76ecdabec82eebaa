# atelier/api/errors.py
from contextlib import contextmanager

from fastapi import HTTPException

from atelier.domain.errors import (
    BadRequestError,
    ConflictError,
    DomainError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from atelier.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES = (
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ConflictError, 409),
    (InvalidStateError, 409),
    (BadRequestError, 400),
)


def status_for(error: DomainError) -> int:
    for kind, code in STATUS_CODES:
        if isinstance(error, kind):
            return code
    return 400


@contextmanager
def http_errors():
    """Run a service call, turning domain errors into HTTPException."""
    try:
        yield
    except DomainError as e:
        code = status_for(e)
        logger.info(f"{type(e).__name__} -> {code}: {e}")
        raise HTTPException(status_code=code, detail=str(e)) from e
