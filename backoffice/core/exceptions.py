"""
Custom Application Exceptions
"""
from typing import Optional


class BackofficeException(Exception):
    """Base exception for the back-office application"""
    pass


class ImmutableRecordError(BackofficeException):
    """Raised when code tries to update or delete an append-only record"""

    def __init__(self, entity: str, entity_id: Optional[int], operation: str):
        self.entity = entity
        self.entity_id = entity_id
        self.operation = operation
        super().__init__(f"{entity} {entity_id} is append-only; {operation} is not allowed")


class StockError(BackofficeException):
    """
    Typed failure of a stock adjustment or movement

    Every subclass carries a stable ``kind`` code and a human-readable
    message. Only ``PersistenceFailure`` is retryable.
    """
    kind = "STOCK_ERROR"
    status_code = 400
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidQuantity(StockError):
    kind = "INVALID_QUANTITY"
    status_code = 400

    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


class ProductNotFound(StockError):
    kind = "PRODUCT_NOT_FOUND"
    status_code = 404

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ProductInactive(StockError):
    kind = "PRODUCT_INACTIVE"
    status_code = 409

    def __init__(self, product_id: int, status: str):
        self.product_id = product_id
        self.status = status
        super().__init__(f"Cannot adjust stock for inactive product {product_id} (status {status})")


class InsufficientStock(StockError):
    kind = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: available {available}, requested {requested}"
        )


class InvalidMovementContext(StockError):
    """Destination store reference is inconsistent with the movement direction"""
    kind = "INVALID_MOVEMENT_CONTEXT"
    status_code = 400


class PersistenceFailure(StockError):
    """Store-of-record failure, including lock timeouts and deadlock victims"""
    kind = "PERSISTENCE_FAILURE"
    status_code = 503
    retryable = True


class ConstraintViolation(PersistenceFailure):
    """The store of record refused a write that breaks a key or CHECK constraint"""
    kind = "CONSTRAINT_VIOLATION"
    status_code = 409
    retryable = False


class StockInvariantError(BackofficeException):
    """Internal guard tripped: a code path tried to break a stock or ledger invariant"""
    pass
