from fastapi import HTTPException, status

from clinic.services.records import RecordConflictError, RecordNotFoundError
from clinic.services.users import UserConflictError, UserNotFoundError


def http_error(exc: ValueError) -> HTTPException:
    if isinstance(exc, (RecordNotFoundError, UserNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (RecordConflictError, UserConflictError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


def not_found(label: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
