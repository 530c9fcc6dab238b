from fastapi import status


class CirclesException(Exception):
    """Base exception for the application"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthenticationError(CirclesException):
    """Missing or invalid credentials"""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(CirclesException):
    """Actor lacks rights over the target"""
    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(CirclesException):
    """Field level constraint violation"""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidOperationError(CirclesException):
    """Semantically malformed request"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(CirclesException):
    """Resource not found errors"""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(CirclesException):
    """Uniqueness or relationship invariant violated"""
    status_code = status.HTTP_409_CONFLICT
