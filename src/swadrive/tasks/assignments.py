"""Assignment ledger: which helper is bound to which task.

Rules:
- At most one assignment per task (unique task_id)
- Accepting is a single conditional UPDATE (... WHERE status = 'open');
  the affected-row count decides the winner, so concurrent accepts on one
  task yield exactly one success
- Only the assigned helper may complete a task
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.db.enums import TaskStatus
from swadrive.db.models import Task, TaskAssignment
from swadrive.notifications.service import TASK_ACCEPTED, TASK_COMPLETED, notify
from swadrive.tasks.service import get_task, validate_transition

logger = structlog.get_logger()


class TaskAlreadyTakenError(ValueError):
    """The task is no longer open."""


class NotAssignedToYouError(PermissionError):
    """The caller has no assignment for this task."""


async def _transition(
    db: AsyncSession,
    task_id: int,
    current: TaskStatus,
    target: TaskStatus,
) -> bool:
    """Conditionally move a task from `current` to `target`. True if a row changed."""
    validate_transition(current, target)
    result = await db.execute(
        update(Task)
        .where(Task.id == task_id, Task.status == current)
        .values(status=target)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def get_assignment(db: AsyncSession, task_id: int) -> TaskAssignment | None:
    """Get the assignment for a task, if it has been accepted."""
    result = await db.execute(
        select(TaskAssignment).where(TaskAssignment.task_id == task_id)
    )
    return result.scalar_one_or_none()


async def accept_task(db: AsyncSession, helper_id: int, task_id: int) -> TaskAssignment:
    """Bind the helper to an open task and move it to assigned.

    Raises:
        TaskNotFoundError: If the task does not exist.
        TaskAlreadyTakenError: If the task is not open (including losing a race).
    """
    if not await _transition(db, task_id, TaskStatus.OPEN, TaskStatus.ASSIGNED):
        task = await get_task(db, task_id)
        logger.info(
            "task_accept_rejected", task_id=task_id, helper_id=helper_id, status=task.status.value
        )
        raise TaskAlreadyTakenError("Task already taken")

    assignment = TaskAssignment(
        task_id=task_id,
        helper_id=helper_id,
        assigned_at=datetime.now(timezone.utc),
    )
    db.add(assignment)
    await db.flush()

    task = await get_task(db, task_id)
    await db.refresh(task, ["status"])
    logger.info("task_accepted", task_id=task_id, helper_id=helper_id)

    await notify(
        db,
        task.owner_id,
        task_id,
        TASK_ACCEPTED,
        title="Task accepted",
        message=f'Your task "{task.title}" has been accepted by a helper.',
    )
    return assignment


async def complete_task(db: AsyncSession, helper_id: int, task_id: int) -> Task:
    """Mark an assigned task completed and notify its owner.

    Raises:
        NotAssignedToYouError: If no assignment binds this helper to the task.
        InvalidTransitionError: If the task is already completed.
    """
    result = await db.execute(
        select(TaskAssignment).where(
            TaskAssignment.task_id == task_id,
            TaskAssignment.helper_id == helper_id,
        )
    )
    if result.scalar_one_or_none() is None:
        raise NotAssignedToYouError("Task is not assigned to you")

    task = await get_task(db, task_id)
    if not await _transition(db, task_id, TaskStatus.ASSIGNED, TaskStatus.COMPLETED):
        await db.refresh(task, ["status"])
        validate_transition(task.status, TaskStatus.COMPLETED)
    await db.refresh(task, ["status"])
    logger.info("task_completed", task_id=task_id, helper_id=helper_id)

    await notify(
        db,
        task.owner_id,
        task_id,
        TASK_COMPLETED,
        title="Task completed",
        message=f'Your task "{task.title}" has been marked as completed.',
    )
    return task


async def list_assigned_tasks(db: AsyncSession, helper_id: int) -> list[Task]:
    """Tasks bound to the helper, most recently assigned first."""
    result = await db.execute(
        select(Task)
        .join(TaskAssignment, TaskAssignment.task_id == Task.id)
        .where(TaskAssignment.helper_id == helper_id)
        .order_by(TaskAssignment.assigned_at.desc(), TaskAssignment.id.desc())
    )
    return list(result.scalars().all())

