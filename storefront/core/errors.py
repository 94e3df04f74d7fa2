# storefront/core/errors.py
# Typed failures raised by the services and turned into HTTP responses in main.py.


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StorefrontError):
    status_code = 404


class Unauthorized(StorefrontError):
    """Bad or absent credential."""
    status_code = 401


class Forbidden(StorefrontError):
    """Authenticated, but lacking the permission or ownership."""
    status_code = 403


class ValidationError(StorefrontError):
    status_code = 400


class InvalidOrExpiredToken(StorefrontError):
    status_code = 400


class PaymentFailure(StorefrontError):
    status_code = 402


class Conflict(StorefrontError):
    status_code = 409


class MailDeliveryFailure(StorefrontError):
    """The outbound mail server refused or could not be reached."""
    status_code = 503
