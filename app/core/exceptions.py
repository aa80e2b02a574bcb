from typing import Union

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(ServiceError):
    """Referenced row does not exist."""

    def __init__(self, resource: str, identifier: Union[int, str, None] = None, message: str = None) -> None:
        if message is None:
            if isinstance(identifier, int):
                message = f"{resource} with ID {identifier} not found"
            else:
                message = f"{resource} '{identifier}' not found"
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class DuplicateResourceError(ServiceError):
    """Uniqueness violation detected before (or at) insert."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class LimitExceededError(ServiceError):
    """Attendance cap reached for a (student, course, semester) triple."""

    def __init__(self, semester: int, max_allowed: int) -> None:
        self.semester = semester
        self.max_allowed = max_allowed
        super().__init__(
            f"Student has reached the maximum of {max_allowed} attendance records "
            f"for this course in semester {semester}",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
