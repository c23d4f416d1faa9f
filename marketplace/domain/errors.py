# marketplace/domain/errors.py
class MarketplaceError(Exception):
    """Bazowy blad domenowy: kind dla klienta, status_code dla HTTP."""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    kind = "ValidationError"
    status_code = 400


class EmptyCart(MarketplaceError):
    kind = "EmptyCart"
    status_code = 400


class ProductUnavailable(MarketplaceError):
    kind = "ProductUnavailable"
    status_code = 409


class NotFound(MarketplaceError):
    kind = "NotFound"
    status_code = 404


class Unauthorized(MarketplaceError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(MarketplaceError):
    kind = "Forbidden"
    status_code = 403


class Conflict(MarketplaceError):
    kind = "Conflict"
    status_code = 409


class CouponInactive(MarketplaceError):
    kind = "Inactive"
    status_code = 400


class CouponExpired(MarketplaceError):
    kind = "Expired"
    status_code = 400


class CouponLimitReached(MarketplaceError):
    kind = "LimitReached"
    status_code = 400


class BelowMinimum(MarketplaceError):
    kind = "BelowMinimum"
    status_code = 400


class TransactionFailure(MarketplaceError):
    kind = "TransactionFailure"
    status_code = 500


class PaymentVerificationFailure(MarketplaceError):
    kind = "PaymentVerificationFailure"
    status_code = 400


class PaymentGatewayError(MarketplaceError):
    kind = "PaymentGatewayError"
    status_code = 502
