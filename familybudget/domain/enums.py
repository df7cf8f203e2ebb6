from __future__ import annotations

from enum import StrEnum


class Actor(StrEnum):
    MOTHER = "mother"
    FATHER = "father"
    DAUGHTER = "daughter"
    SON = "son"
    UNKNOWN = "unknown"


class Category(StrEnum):
    SALARY = "salary"
    CHORES = "chores"
    TRANSPORT = "transport"
    FOOD = "food"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    PRESENTS = "presents"
    ELECTRONICS = "electronics"
    COMMUNICATION = "communication"
    OTHER = "other"


class OperationType(StrEnum):
    DEBIT = "debit"  # money coming into the budget
    CREDIT = "credit"  # money leaving the budget, stored negative


class GroupBy(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ACTOR = "actor"
    CATEGORY = "category"
    TYPE = "type"


class OrderBy(StrEnum):
    ID = "id"
    AMOUNT = "amount"
    ACTOR = "actor"
    CATEGORY = "category"
    TYPE = "type"
    OPERATION_AT = "operation_at"


TIME_BUCKETS: frozenset[GroupBy] = frozenset(
    {GroupBy.DAY, GroupBy.WEEK, GroupBy.MONTH, GroupBy.YEAR}
)


def is_member(vocabulary: type[StrEnum], value: object) -> bool:
    """Membership test against one of the closed vocabularies above."""
    if not isinstance(value, str):
        return False
    return value in vocabulary._value2member_map_
