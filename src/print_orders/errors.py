"""Exceptions raised by the order and photo lifecycle core.

Errors are grouped by kind. ``NotFoundError`` covers both absent entities and
entities owned by someone else, so callers cannot discover foreign ids.
``ValidationFailedError`` and ``ConflictError`` are safe to show to the caller
verbatim. ``DependencyFailureError`` wraps failures of external collaborators.
"""


class PrintOrdersError(Exception):
    """Base exception for all print order errors."""


class NotFoundError(PrintOrdersError):
    """Raised when an entity is absent or not owned by the caller."""


class ValidationFailedError(PrintOrdersError):
    """Raised when caller input is malformed or not acceptable."""


class ConflictError(PrintOrdersError):
    """Raised when the request conflicts with the current state."""


class DependencyFailureError(PrintOrdersError):
    """Raised when an external collaborator is unavailable."""


class PhotoNotFoundError(NotFoundError):
    """Raised when a photo doesn't exist for the owner."""

    def __init__(self, photo_id: object):
        self.photo_id = photo_id
        super().__init__(f"Photo not found: {photo_id}")


class OrderNotFoundError(NotFoundError):
    """Raised when an order doesn't exist for the caller."""

    def __init__(self, order_id: object):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class PrintSizeNotFoundError(NotFoundError):
    """Raised when a print size code is unknown."""

    def __init__(self, size_code: str):
        self.size_code = size_code
        super().__init__(f"Print size not found: {size_code}")


class InvalidQuantityError(ValidationFailedError):
    """Raised when a line quantity is outside the accepted range."""

    def __init__(self, quantity: object, maximum: int):
        self.quantity = quantity
        self.maximum = maximum
        super().__init__(f"Quantity must be between 1 and {maximum}, got {quantity!r}")


class PrintSizeInactiveError(ValidationFailedError):
    """Raised when a print size is disabled for ordering."""

    def __init__(self, size_code: str):
        self.size_code = size_code
        super().__init__(f"Print size is not available for ordering: {size_code}")


class InvalidPaymentMethodError(ValidationFailedError):
    """Raised when the payment method is not supported."""

    def __init__(self, method: object):
        self.method = method
        super().__init__(f"Unsupported payment method: {method!r}")


class UnsupportedJurisdictionError(ValidationFailedError):
    """Raised when no tax rate is configured for a state."""

    def __init__(self, state_code: str):
        self.state_code = state_code
        super().__init__(f"No tax rate configured for state: {state_code}")


class PhotoLockedError(ConflictError):
    """Raised when deleting a photo that is part of an order."""

    def __init__(self, photo_id: object):
        self.photo_id = photo_id
        super().__init__(f"Photo is part of an order and cannot be deleted: {photo_id}")


class AlreadyLockedError(ConflictError):
    """Raised when a photo is locked by a different order."""

    def __init__(self, photo_id: object, order_id: object):
        self.photo_id = photo_id
        self.order_id = order_id
        super().__init__(f"Photo {photo_id} is already locked by order {order_id}")


class PhotoUnavailableError(ConflictError):
    """Raised when a cart photo can no longer be ordered."""

    def __init__(self, photo_id: object):
        self.photo_id = photo_id
        super().__init__(f"Photo is no longer available for ordering: {photo_id}")


class EmptyCartError(ConflictError):
    """Raised when creating an order from an empty cart."""

    def __init__(self, owner_id: object):
        self.owner_id = owner_id
        super().__init__("Shopping cart is empty")


class InvalidTransitionError(ConflictError):
    """Raised when an order status change is not the next legal step."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from {current} to {requested}")


class DuplicatePrintSizeError(ConflictError):
    """Raised when creating a print size with an existing code."""

    def __init__(self, size_code: str):
        self.size_code = size_code
        super().__init__(f"A print size with code '{size_code}' already exists")
