"""
Enumeration Module
==================

Defines enumerations used across the application.
"""

from enum import Enum


class Severity(str, Enum):
    """Urgency tier of an incident. SEV1 is the most urgent."""

    SEV1 = "SEV1"
    SEV2 = "SEV2"
    SEV3 = "SEV3"
    SEV4 = "SEV4"


class IncidentStatus(str, Enum):
    """Lifecycle statuses for incidents. Transitions are not restricted."""

    OPEN = "OPEN"
    MITIGATED = "MITIGATED"
    RESOLVED = "RESOLVED"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Return the raw string values of an enum, in declaration order."""
    return [member.value for member in enum_cls]
