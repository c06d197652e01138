"""Task lifecycle: creation, editing, discovery.

State progression: open -> assigned -> completed
Transitions are validated: no skipping states, no going backwards. The
transitions themselves are performed by the assignment ledger
(swadrive.tasks.assignments), which owns accept and complete.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.db.enums import TaskStatus, TaskUrgency
from swadrive.db.models import Task

logger = structlog.get_logger()

VALID_TRANSITIONS: dict[TaskStatus, list[TaskStatus]] = {
    TaskStatus.OPEN: [TaskStatus.ASSIGNED],
    TaskStatus.ASSIGNED: [TaskStatus.COMPLETED],
    TaskStatus.COMPLETED: [],
}

DEFAULT_CATEGORY = "Service"
DEFAULT_PROBLEM = "General Help"
DEFAULT_TITLE = f"{DEFAULT_CATEGORY} - {DEFAULT_PROBLEM}"

# Largest value a NUMERIC(10,2) column holds.
MAX_REWARD = Decimal("99999999.99")


class TaskNotFoundError(LookupError):
    """No task with this id (visible to the caller) exists."""


class InvalidTransitionError(ValueError):
    """A status change that the state machine does not allow."""


class InvalidRewardError(ValueError):
    """A reward amount below zero or above MAX_REWARD."""


def validate_transition(current: TaskStatus, target: TaskStatus) -> None:
    """Validate a state transition. Raises InvalidTransitionError if invalid."""
    valid = VALID_TRANSITIONS.get(current, [])
    if target not in valid:
        raise InvalidTransitionError(
            f"Invalid transition: {current.value} -> {target.value}"
        )


def derive_title(
    category: str | None = None,
    specific_problem: str | None = None,
    component: str | None = None,
    title: str | None = None,
) -> str:
    """Build a task title from the structured request fields.

    "{category} - {specific_problem or component}" with "Service" and
    "General Help" standing in for missing parts. An explicit title is only
    used when none of the structured fields is present.
    """
    if not (category or specific_problem or component):
        return title.strip() if title and title.strip() else DEFAULT_TITLE
    return f"{category or DEFAULT_CATEGORY} - {specific_problem or component or DEFAULT_PROBLEM}"


def coerce_reward(value: Any) -> Decimal:
    """Turn a loosely typed reward into a non-negative Decimal.

    Missing, empty and non-numeric values become 0. Negative values and
    values above MAX_REWARD raise.
    """
    if value is None or value == "" or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    if amount < 0:
        raise InvalidRewardError("reward_amount must not be negative")
    if amount > MAX_REWARD:
        raise InvalidRewardError(f"reward_amount must not exceed {MAX_REWARD}")
    return amount.quantize(Decimal("0.01"))


# ---------------------------------------------------------------------------
# Customer operations
# ---------------------------------------------------------------------------


async def create_task(
    db: AsyncSession,
    owner_id: int,
    *,
    title: str,
    description: str | None,
    location: str | None,
    urgency: TaskUrgency = TaskUrgency.TODAY,
    reward_amount: Any = None,
) -> Task:
    """Create an open task owned by the customer."""
    task = Task(
        owner_id=owner_id,
        title=title,
        description=description,
        location=location,
        urgency=urgency,
        reward_amount=coerce_reward(reward_amount),
        status=TaskStatus.OPEN,
        created_at=datetime.now(timezone.utc),
    )
    db.add(task)
    await db.flush()
    logger.info("task_created", task_id=task.id, owner_id=owner_id, urgency=urgency.value)
    return task


async def get_owned_task(db: AsyncSession, owner_id: int, task_id: int) -> Task:
    """Get a task that belongs to the customer. Raises TaskNotFoundError otherwise."""
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise TaskNotFoundError(f"Task {task_id} not found for owner {owner_id}")
    return task


async def update_task(
    db: AsyncSession,
    owner_id: int,
    task_id: int,
    *,
    title: str,
    description: str | None,
    location: str | None,
    urgency: TaskUrgency,
    reward_amount: Any = None,
) -> Task:
    """Replace a task's editable fields.

    Allowed in any status; only ownership is checked.
    """
    reward = coerce_reward(reward_amount)
    task = await get_owned_task(db, owner_id, task_id)
    task.title = title
    task.description = description
    task.location = location
    task.urgency = urgency
    task.reward_amount = reward
    await db.flush()
    logger.info("task_updated", task_id=task_id, owner_id=owner_id, status=task.status.value)
    return task


async def delete_task(db: AsyncSession, owner_id: int, task_id: int) -> None:
    """Delete a task the customer owns, whatever its status.

    Assignments, reviews and chats go with it; notifications keep a null task_id.
    """
    task = await get_owned_task(db, owner_id, task_id)
    status = task.status
    await db.delete(task)
    await db.flush()
    logger.info("task_deleted", task_id=task_id, owner_id=owner_id, status=status.value)


async def list_own_tasks(db: AsyncSession, owner_id: int) -> list[Task]:
    """All tasks the customer owns, any status, newest first."""
    result = await db.execute(
        select(Task)
        .where(Task.owner_id == owner_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return list(result.scalars().all())


async def list_completed_tasks(db: AsyncSession, owner_id: int) -> list[Task]:
    """The customer's completed tasks, newest first."""
    result = await db.execute(
        select(Task)
        .where(Task.owner_id == owner_id, Task.status == TaskStatus.COMPLETED)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Helper operations
# ---------------------------------------------------------------------------


async def list_open_tasks(db: AsyncSession) -> list[Task]:
    """Every task still open for acceptance, newest first."""
    result = await db.execute(
        select(Task)
        .where(Task.status == TaskStatus.OPEN)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return list(result.scalars().all())


async def get_task(db: AsyncSession, task_id: int) -> Task:
    """Get any task by id. Raises TaskNotFoundError if absent."""
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if task is None:
        raise TaskNotFoundError(f"Task {task_id} not found")
    return task
