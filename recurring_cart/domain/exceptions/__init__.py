# Cart errors
from .domain_exceptions import (
    DomainException,
    EntityNotFoundException,
    ValidationException,
    InvalidCartStateException,
)

__all__ = [
    'DomainException',
    'EntityNotFoundException',
    'ValidationException',
    'InvalidCartStateException',
]
