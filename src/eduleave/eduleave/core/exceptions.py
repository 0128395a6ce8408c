class DomainError(Exception):
    """Base class for errors whose message is shown to the user as-is."""


class ValidationError(DomainError):
    """Form input, filter or configuration value rejected."""


class AuthenticationError(DomainError):
    """Login failed: wrong credentials, empty username or backend unreachable."""


class AuthorizationError(DomainError):
    """The acting user's role does not grant this action."""


class NotFoundError(DomainError):
    """Referenced request or account is not in the session's data."""


class GatewayError(Exception):
    """The remote data backend could not be reached or answered garbage."""
