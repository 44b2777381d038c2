"""
Errors raised while validating or totalizing a cart.

Every error carries a stable ``code`` and a JSON friendly ``details``
mapping, so callers can turn it into a customer notice or a log record
without inspecting the concrete class.
"""
from typing import Any, Dict, List, Optional


def _as_str(value: Optional[Any]) -> Optional[str]:
    return None if value is None else str(value)


class DomainException(Exception):
    """Root of the cart error hierarchy."""

    default_code = 'DOMAIN_ERROR'

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details,
        }


class EntityNotFoundException(DomainException):
    """A lookup (usually a catalog product) returned nothing."""

    default_code = 'ENTITY_NOT_FOUND'

    def __init__(self, entity_type: str, entity_id: Optional[Any] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        if entity_id is None:
            message = f"{entity_type} not found"
        else:
            message = f"{entity_type} '{entity_id}' not found"
        super().__init__(
            message,
            details={'entity_type': entity_type, 'entity_id': _as_str(entity_id)},
        )


class ValidationException(DomainException):
    """
    Input failed validation.

    ``errors`` maps a field name to the messages collected for it.
    """

    default_code = 'VALIDATION_ERROR'

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, List[str]]] = None
    ):
        self.errors: Dict[str, List[str]] = errors or {}
        super().__init__(message, details={'validation_errors': self.errors})

    def add_error(self, field: str, error: str) -> None:
        self.errors.setdefault(field, []).append(error)


class InvalidCartStateException(DomainException):
    """
    The cart cannot be totalized as it stands.

    Aborts the running totalization; the cart keeps the totals and
    recurring carts it had before.
    """

    default_code = 'INVALID_CART_STATE'

    def __init__(
        self,
        message: str,
        item_key: Optional[str] = None,
        product_id: Optional[Any] = None
    ):
        self.item_key = item_key
        self.product_id = product_id
        super().__init__(
            message,
            details={'item_key': item_key, 'product_id': _as_str(product_id)},
        )
