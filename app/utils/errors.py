"""Domain errors raised by the service layer and mapped to HTTP responses in app.main."""

from typing import Optional


class MarketplaceError(Exception):
    """Base exception for the marketplace backend."""
    code = "internal"
    status_code = 500

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, "reason": self.reason}


class Unauthenticated(MarketplaceError):
    """Missing, malformed, expired or forged credential."""
    code = "unauthenticated"
    status_code = 401

    def __init__(self, message: str = "Invalid authentication credentials"):
        super().__init__(message)


class Forbidden(MarketplaceError):
    """Identity mismatch or insufficient role."""
    code = "forbidden"
    status_code = 403

    def __init__(self, message: str = "Forbidden access", reason: Optional[str] = None):
        super().__init__(message, reason)


class Rejected(MarketplaceError):
    """Caller is known but barred from the operation (e.g. fraudulent agent)."""
    code = "rejected"
    status_code = 403


class InvalidInput(MarketplaceError):
    code = "invalid_input"
    status_code = 400


class NotFound(MarketplaceError):
    code = "not_found"
    status_code = 404


class Conflict(MarketplaceError):
    """Business-rule violation."""
    code = "conflict"
    status_code = 409


class Internal(MarketplaceError):
    code = "internal"
    status_code = 500

    def __init__(self, message: str = "Internal server error", reason: Optional[str] = None):
        super().__init__(message, reason)


class ServiceUnavailable(MarketplaceError):
    """Datastore timed out or dropped the connection. Safe to retry."""
    code = "unavailable"
    status_code = 503

    def __init__(self, message: str = "Datastore unavailable, please retry"):
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retryable"] = True
        return body


class PartialCascadeFailure(Internal):
    """A cascade stopped midway. Carries counts of the steps that did complete."""
    code = "partial_cascade"

    def __init__(self, failed_step: str, completed: dict):
        super().__init__(f"Cascade stopped at step '{failed_step}'", reason=failed_step)
        self.failed_step = failed_step
        self.completed = completed

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["completed"] = self.completed
        return body


# Reason codes
ALREADY_SOLD = "AlreadySold"
DUPLICATE_OFFER = "DuplicateOffer"
DUPLICATE_SETTLEMENT = "DuplicateSettlement"
OFFER_REJECTED = "OfferRejected"
INVALID_TRANSITION = "InvalidTransition"
FRAUDULENT_AGENT = "FraudulentAgent"
