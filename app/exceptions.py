from typing import Any, Mapping, Optional

from domain.enums import ValidationReason


class ServiceValidationError(Exception):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers (400)
    """

    http_status = 400

    def __init__(self, message: str = "Invalid input", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class MealValidationError(ServiceValidationError):
    """Raised when meal or line item input is malformed or incomplete.

    The ``reason`` is always one of :class:`ValidationReason` and is exposed as
    ``code`` so handlers can return it unchanged to the client.
    """

    def __init__(self, reason: ValidationReason, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message or reason.default_message, details=details, code=reason.value)
        self.reason = reason


class UnknownParticipantError(MealValidationError):
    """Raised when an item references a participant id missing from the meal roster."""

    def __init__(self, participant_id: str, item_name: Optional[str] = None):
        details: dict[str, Any] = {"participant_id": participant_id}
        if item_name:
            details["item_name"] = item_name
        super().__init__(ValidationReason.UNKNOWN_PARTICIPANT, details=details)
        self.participant_id = participant_id


class NotFoundError(Exception):
    """Raised when a requested resource was not found.

    Attributes are similar to ServiceValidationError. http_status is 404.
    """

    http_status = 404

    def __init__(self, message: str = "Not found", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class SettlementIntegrityError(Exception):
    """Raised when data that should have been rejected earlier reaches the calculator.

    Examples are a line item without consumers or a stored split amount that
    does not match its price and consumer count. This is a defect, not user
    error, so http_status is 500.
    """

    http_status = 500

    def __init__(self, message: str = "Settlement integrity violated", details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message, "code": "settlementIntegrity"}
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message
