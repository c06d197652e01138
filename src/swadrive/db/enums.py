"""Enumerated column values."""

from __future__ import annotations

import enum


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    HELPER = "helper"


class TaskStatus(str, enum.Enum):
    OPEN = "open"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


class TaskUrgency(str, enum.Enum):
    EMERGENCY = "emergency"
    IMMEDIATE = "immediate"
    TODAY = "today"
    TOMORROW = "tomorrow"
    WEEK = "week"
    FLEXIBLE = "flexible"
