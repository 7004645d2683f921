"""
Enum Utilities for VARCHAR-based Status Fields

STORAGE STANDARD:
━━━━━━━━━━━━━━━━━
• Database: VARCHAR(20) - NOT PostgreSQL ENUM
• SQLAlchemy: String(20) with Mapped[str]
• Pydantic: Python Enum for API validation
• Case: All enum values stored in UPPERCASE

DATA FLOW:
━━━━━━━━━━
INPUT (API Request / service call):
    Enum → .value → String → Database
    Example: WithdrawalStatus.PENDING → "PENDING" → VARCHAR

OUTPUT (API Response):
    Database → String → Return directly
"""

from enum import Enum
from typing import Any, Optional, TypeVar, Type, Set


T = TypeVar('T', bound=Enum)


def get_enum_value(value: Any) -> str:
    """
    Safely get string value from an enum or string.

    Examples:
        >>> get_enum_value(WithdrawalStatus.PENDING)
        'PENDING'
        >>> get_enum_value("PENDING")
        'PENDING'
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    return str(value)


def to_enum(value: Any, enum_class: Type[T]) -> Optional[T]:
    """
    Convert a string value to an enum instance, case-insensitively.

    Returns None if the value is not a member.
    """
    if value is None:
        return None
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(str(value).upper())
    except (ValueError, KeyError):
        return None


def enum_values(enum_class: Type[Enum]) -> list:
    return [e.value for e in enum_class]


def enum_comment(enum_class: Type[Enum]) -> str:
    """
    Generate a comment string for VARCHAR column.

    Examples:
        >>> enum_comment(CommissionStatus)
        'PENDING, CONFIRMED, VOIDED'
    """
    return ", ".join(enum_values(enum_class))


def normalize_to_uppercase(value: Any, valid_values: Set[str]) -> Any:
    """
    Normalize a string value to UPPERCASE if it's a valid enum value.

    Use this in Pydantic field_validators to accept case-insensitive input
    while ensuring UPPERCASE storage in the database.

    Examples:
        >>> normalize_to_uppercase('completed', {'COMPLETED', 'REJECTED'})
        'COMPLETED'
        >>> normalize_to_uppercase('invalid', {'COMPLETED', 'REJECTED'})
        'invalid'  # Returned as-is for Pydantic to raise validation error
    """
    if value is None:
        return value
    if isinstance(value, str):
        upper_v = value.upper()
        if upper_v in valid_values:
            return upper_v
    return value


# =============================================================================
# PRE-DEFINED VALID VALUE SETS
# =============================================================================

VALID_WITHDRAWAL_STATUSES = {"PENDING", "COMPLETED", "REJECTED"}
