"""Marketplace error taxonomy.

Every error carries the HTTP status it maps to and an optional tip for the
caller; the API serializes them as {"error": ..., "tip": ...}.
"""
from decimal import Decimal
from typing import Any, Dict, Optional, Union

class MarketplaceError(Exception):
    """Base class for marketplace errors."""
    status_code = 500

    def __init__(self, message: str, tip: Optional[str] = None):
        self.message = message
        self.tip = tip
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {'error': self.message}
        if self.tip:
            body['tip'] = self.tip
        return body

class ValidationError(MarketplaceError):
    """Raised when request fields are missing or malformed."""
    status_code = 400

class NotFoundError(MarketplaceError):
    """Raised when an asset ID is unknown."""
    status_code = 404

class ConflictError(MarketplaceError):
    """Raised when an asset is not in the state the operation requires."""
    status_code = 400

class CapacityError(MarketplaceError):
    """Raised when an asset has insufficient supply for a purchase."""
    status_code = 400

    def __init__(self, asset_name: str, available: int, requested: int):
        self.asset_name = asset_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient supply for {asset_name}: "
            f"available {available}, requested {requested}"
        )

class TransactionError(MarketplaceError):
    """Raised when the chain gateway fails a deploy, mint or query."""
    status_code = 500

def to_decimal(value: Union[str, int, float, Decimal], field: str) -> Decimal:
    """Parse a price-like value, raising ValidationError when it is not a finite number."""
    try:
        amount = Decimal(str(value).strip())
    except (ArithmeticError, ValueError):
        raise ValidationError(f"{field} must be a number, got {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number, got {value!r}")
    return amount
