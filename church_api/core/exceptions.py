class ChurchApiException(Exception):
    """Base exception for the church management API"""

    pass


class UnauthorizedException(ChurchApiException):
    """Raised when JWT validation fails"""

    pass


class NotFoundException(ChurchApiException):
    """Raised when an actor, target member or related record is not found"""

    pass


class ForbiddenException(ChurchApiException):
    """
    Raised when an authorization decision denies the operation.

    Carries the machine-readable reason code next to the Portuguese message
    so the HTTP layer can expose both.
    """

    def __init__(self, message: str, reason: str | None = None, details: list[str] | None = None):
        super().__init__(message)
        self.reason = reason
        self.details = details or []


class ValidationException(ChurchApiException):
    """Raised for malformed input: unknown enum values, bad dates, empty payloads"""

    pass


class InvalidRoleError(ValidationException):
    """Raised when a role value is not part of the closed role enum"""

    pass


class UnknownPermissionError(ValidationException):
    """Raised when a permission name is not part of the catalog"""

    def __init__(self, names: list[str]):
        super().__init__(f"Permissões desconhecidas: {', '.join(names)}")
        self.names = names
