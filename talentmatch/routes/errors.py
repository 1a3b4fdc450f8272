"""
Domain error -> HTTP status translation shared by all routers.
"""
from fastapi import HTTPException, status

from talentmatch.domain.errors import (
    ConflictError,
    NotFoundError,
    TalentMatchError,
    ValidationFailedError,
)


def http_error(error: TalentMatchError) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status.HTTP_409_CONFLICT, str(error))
    if isinstance(error, ValidationFailedError):
        return HTTPException(status.HTTP_400_BAD_REQUEST, str(error))
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, str(error))
