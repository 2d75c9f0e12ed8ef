"""
Error taxonomy shared by services and routes.
Each error carries its HTTP status; main.py renders all of them as {"error": message}.
"""
from fastapi import status


class NavigatorError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(NavigatorError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class Conflict(NavigatorError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflict"


class Unauthenticated(NavigatorError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class InvalidToken(NavigatorError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid token"


class Forbidden(NavigatorError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(NavigatorError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
