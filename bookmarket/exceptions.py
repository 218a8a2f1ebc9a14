# bookmarket/exceptions.py
"""Error taxonomy shared by services and routes.

Every `MarketplaceError` carries the HTTP status it maps to and a message that
is safe to show to clients. `ConfigurationError` is raised at startup only.
"""
from typing import Optional


class MarketplaceError(Exception):
    """Base error for the marketplace API"""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    status_code = 400
    default_message = "Invalid input"


class InvalidReference(MarketplaceError):
    status_code = 400
    default_message = "Invalid book ID format"


class AuthenticationError(MarketplaceError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(MarketplaceError):
    status_code = 403
    default_message = "Unauthorized"


class NotFound(MarketplaceError):
    status_code = 404
    default_message = "Not found"


class UpstreamFailure(MarketplaceError):
    """Image host unavailable or rejected the upload. Not retried."""
    status_code = 502
    default_message = "Upload failed"


class ConfigurationError(Exception):
    """Required setting missing at startup"""
    pass
