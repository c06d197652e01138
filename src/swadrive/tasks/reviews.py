"""Review gate: a customer rates the helper once their task is completed."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.db.enums import TaskStatus
from swadrive.db.models import Review, Task, TaskAssignment

logger = structlog.get_logger()

MIN_RATING = 1
MAX_RATING = 5


class ReviewValidationError(ValueError):
    """The review payload is malformed (e.g. rating out of range)."""


class ReviewNotEligibleError(ValueError):
    """The task cannot be reviewed by this customer (yet)."""


def validate_rating(rating: object) -> int:
    """Return the rating if it is an integer in [1, 5]."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ReviewValidationError("Rating must be an integer between 1 and 5")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ReviewValidationError("Rating must be an integer between 1 and 5")
    return rating


async def submit_review(
    db: AsyncSession,
    customer_id: int,
    task_id: int,
    rating: object,
    comment: str | None = None,
) -> Review:
    """Record a review of the helper who completed the customer's task.

    Eligible only when the task exists, belongs to the customer, is completed
    and has an assignment (which supplies the helper). Repeat reviews are not
    rejected.

    Raises:
        ReviewValidationError: If the rating is not an integer in [1, 5].
        ReviewNotEligibleError: If any eligibility condition fails.
    """
    rating = validate_rating(rating)

    result = await db.execute(
        select(Task, TaskAssignment)
        .join(TaskAssignment, TaskAssignment.task_id == Task.id, isouter=True)
        .where(Task.id == task_id)
    )
    row = result.first()
    if row is None:
        raise ReviewNotEligibleError("Task not found")
    task, assignment = row
    if task.owner_id != customer_id:
        raise ReviewNotEligibleError("Task does not belong to you")
    if task.status is not TaskStatus.COMPLETED:
        raise ReviewNotEligibleError("Task is not completed yet")
    if assignment is None:
        raise ReviewNotEligibleError("Task has no assigned helper")

    review = Review(
        task_id=task_id,
        helper_id=assignment.helper_id,
        customer_id=customer_id,
        rating=rating,
        comment=comment,
        created_at=datetime.now(timezone.utc),
    )
    db.add(review)
    await db.flush()
    logger.info(
        "review_submitted", task_id=task_id, helper_id=assignment.helper_id, rating=rating
    )
    return review
