"""
errors.py — Error taxonomy shared by the storefront services

Services raise these; the HTTP layer in `main.py` maps each kind to a status
code. Nothing here is retried.
"""


class StorefrontError(Exception):
    """Base class for all expected service-level failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Malformed or missing input, e.g. an empty checkout."""


class OutOfStockError(ValidationError):
    """Raised under the `reject` stock policy when an order exceeds available stock."""

    def __init__(self, product_id: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: available {available}, requested {requested}"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class NotFoundError(StorefrontError):
    status_code = 404


class AuthorizationError(StorefrontError):
    """
    Token missing or unresolvable (401), or the resolved user lacks the
    required role (403, `forbidden=True`).
    """

    def __init__(self, message: str, forbidden: bool = False):
        super().__init__(message)
        self.forbidden = forbidden
        self.status_code = 403 if forbidden else 401


class InvalidTransitionError(StorefrontError):
    status_code = 409

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class CheckoutError(StorefrontError):
    """An order could not be stored for a reason other than its input."""

    status_code = 500
