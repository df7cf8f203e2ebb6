from __future__ import annotations

from dataclasses import dataclass
from typing import Any

INTERNAL_ERROR_MESSAGE = "something went wrong, try again later"


@dataclass(slots=True)
class DomainError(Exception):
    code: str
    message: str
    details: Any = None
    status_code: int = 400

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(
            code="not_found",
            message=message,
            details=details,
            status_code=404,
        )


class ValidationError(DomainError):
    def __init__(self, message: str, *, code: str = "validation_error", details: Any = None) -> None:
        super().__init__(
            code=code,
            message=message,
            details=details,
            status_code=400,
        )


class InternalError(DomainError):
    """Opaque failure; the real cause is logged, never sent to the client."""

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE) -> None:
        super().__init__(
            code="internal_error",
            message=message,
            status_code=500,
        )


class QueryTimeoutError(DomainError):
    def __init__(self, message: str = "query timed out or was cancelled") -> None:
        super().__init__(
            code="timeout",
            message=message,
            status_code=504,
        )


class OperationNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("specified operation ID not found")


class UnknownActorOrCategoryError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid actor or category provided", code="unknown_actor_or_category")


class InvalidOrderByError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid ordering parameter specified", code="invalid_order_by")


class InvalidGroupByError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid grouping parameter specified", code="invalid_group_by")


class InvalidDirectionError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            "invalid ASC/DESC provided: exactly one of them must be set", code="invalid_direction"
        )


class InvalidTimeRangeError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            "invalid start/end time provided: start cannot be later than end",
            code="invalid_time_range",
        )


class InvalidTimeFormatError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(
            f"invalid {field} value provided: expected ISO-8601 date or datetime",
            code="invalid_time_format",
            details={"field": field},
        )


class InvalidPageError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid page value provided: value must be > 0", code="invalid_page")


class InvalidLimitError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            "invalid limit value provided: value must be > 0 and < 1000", code="invalid_limit"
        )


class InvalidAmountError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid amount provided", code="invalid_amount")


class InvalidActorError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid actor provided", code="invalid_actor")


class InvalidCategoryError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid category provided", code="invalid_category")


class InvalidOpTypeError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid operation type provided", code="invalid_op_type")


class InvalidOpTimeError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid operation time provided", code="invalid_op_time")


class InvalidIDError(ValidationError):
    def __init__(self) -> None:
        super().__init__("invalid operation ID provided", code="invalid_id")
