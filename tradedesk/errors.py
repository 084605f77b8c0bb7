# tradedesk/errors.py

from typing import Any, Dict, Optional


class TradingError(Exception):
    """
    Base class for errors that map onto an HTTP error response.

    Every error is rendered as ``{"error": message, **context}`` with the
    class' ``status_code``.
    """
    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.context}


class AuthenticationError(TradingError):
    status_code = 401


class ForbiddenError(TradingError):
    status_code = 403


class ValidationError(TradingError):
    status_code = 400


class NotFoundError(TradingError):
    status_code = 404


class InsufficientFundsError(ValidationError):
    def __init__(self, required: float, available: float, currency: Optional[str] = None):
        context = {"required": required, "available": available}
        if currency:
            context["currency"] = currency
        super().__init__("Insufficient funds", **context)


class InsufficientHoldingsError(ValidationError):
    def __init__(self, required: float, available: float):
        super().__init__("Insufficient holdings", required=required, available=available)


class InvalidOrderStateError(ValidationError):
    def __init__(self, order_id: str, status: str):
        super().__init__(
            f"Order cannot transition from status '{status}'", order_id=order_id, status=status
        )


class ConcurrentModificationError(TradingError):
    status_code = 409


class DatabaseError(TradingError):
    status_code = 500
