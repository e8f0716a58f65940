"""Error taxonomy shared by the use cases and the HTTP layer."""


class AccountError(Exception):
    """Base class for every error raised by the account service."""

    default_message = "Account service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Domain errors ---
class DomainError(AccountError):
    default_message = "Domain rule violated"


class InsufficientPermissionsError(DomainError):
    default_message = "You do not have permission to modify user role"


class AuthenticationError(DomainError):
    default_message = "Invalid authentication credentials"


# --- Application errors ---
class ApplicationError(AccountError):
    default_message = "Application error"


class ResourceNotFoundError(ApplicationError):
    default_message = "Resource not found"


class UnauthorizedError(ApplicationError):
    default_message = (
        "Authentication required. Please login to access this resource."
    )


class ForbiddenError(ApplicationError):
    default_message = "Insufficient permissions to access this resource."


# --- Upstream errors ---
class IdentityProviderError(AccountError):
    """The identity provider rejected a call or could not be reached."""

    default_message = "Identity provider request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
