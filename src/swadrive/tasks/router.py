"""Task API endpoints (12 routes).

Customer (7), Helper (5). Required roles live in swadrive.auth.access.ROUTE_ROLES.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.auth.access import Identity
from swadrive.auth.dependencies import require_identity
from swadrive.database import get_session
from swadrive.db.models import MAX_ID, Task
from swadrive.tasks.assignments import (
    NotAssignedToYouError,
    TaskAlreadyTakenError,
    accept_task,
    complete_task,
    list_assigned_tasks,
)
from swadrive.tasks.reviews import ReviewNotEligibleError, ReviewValidationError, submit_review
from swadrive.tasks.schemas import (
    MessageResponse,
    ReviewRequest,
    TaskCreatedResponse,
    TaskRequest,
    TaskResponse,
)
from swadrive.tasks.service import (
    InvalidRewardError,
    InvalidTransitionError,
    TaskNotFoundError,
    create_task,
    delete_task,
    derive_title,
    get_owned_task,
    get_task,
    list_completed_tasks,
    list_open_tasks,
    list_own_tasks,
    update_task,
)

router = APIRouter(prefix="/api", tags=["Tasks"])


# ── Response builders ──


def _task_response(task: Task) -> TaskResponse:
    """Build a TaskResponse from ORM model."""
    return TaskResponse(
        task_id=task.id,
        user_id=task.owner_id,
        title=task.title,
        description=task.description,
        location=task.location,
        reward_amount=float(task.reward_amount or 0),
        urgency=task.urgency,
        status=task.status,
        created_at=task.created_at,
    )


def _title_from(body: TaskRequest) -> str:
    return derive_title(body.category, body.specific_problem, body.component, body.title)


# ── Customer Endpoints (7) ──


@router.post("/tasks", response_model=TaskCreatedResponse)
async def create_task_endpoint(
    body: TaskRequest,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Post a new help request."""
    try:
        task = await create_task(
            db,
            identity.user_id,
            title=_title_from(body),
            description=body.description,
            location=body.location,
            urgency=body.urgency,
            reward_amount=body.reward_amount,
        )
    except InvalidRewardError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return TaskCreatedResponse(message="Task created", task_id=task.id)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task_endpoint(
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Get one of the caller's own tasks (e.g. for editing)."""
    try:
        task = await get_owned_task(db, identity.user_id, task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail="Task not found") from e
    return _task_response(task)


@router.put("/tasks/{task_id}", response_model=MessageResponse)
async def update_task_endpoint(
    body: TaskRequest,
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Replace the editable fields of one of the caller's tasks."""
    try:
        await update_task(
            db,
            identity.user_id,
            task_id,
            title=_title_from(body),
            description=body.description,
            location=body.location,
            urgency=body.urgency,
            reward_amount=body.reward_amount,
        )
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail="Task not found or not yours") from e
    except InvalidRewardError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return MessageResponse(message="Task updated")


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task_endpoint(
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Delete one of the caller's tasks."""
    try:
        await delete_task(db, identity.user_id, task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail="Task not found or not yours") from e
    await db.commit()
    return MessageResponse(message="Task deleted")


@router.get("/my-tasks", response_model=list[TaskResponse])
async def my_tasks(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """All of the caller's tasks, any status."""
    return [_task_response(t) for t in await list_own_tasks(db, identity.user_id)]


@router.get("/my-completed-tasks", response_model=list[TaskResponse])
async def my_completed_tasks(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """The caller's completed tasks, newest first."""
    return [_task_response(t) for t in await list_completed_tasks(db, identity.user_id)]


@router.post("/tasks/{task_id}/review", response_model=MessageResponse)
async def review_task(
    body: ReviewRequest,
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Rate the helper who completed the caller's task."""
    try:
        await submit_review(db, identity.user_id, task_id, body.rating, body.comment)
    except (ReviewValidationError, ReviewNotEligibleError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return MessageResponse(message="Review submitted")


# ── Helper Endpoints (5) ──


@router.get("/open-tasks", response_model=list[TaskResponse])
async def open_tasks(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Tasks still waiting for a helper."""
    return [_task_response(t) for t in await list_open_tasks(db)]


@router.get("/helper/tasks/{task_id}", response_model=TaskResponse)
async def helper_get_task(
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Any task by id; helpers are not owners so no ownership check applies."""
    try:
        task = await get_task(db, task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail="Task not found") from e
    return _task_response(task)


@router.post("/tasks/{task_id}/accept", response_model=MessageResponse)
async def accept(
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Accept an open task."""
    try:
        await accept_task(db, identity.user_id, task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=400, detail="Task not found") from e
    except TaskAlreadyTakenError as e:
        raise HTTPException(status_code=400, detail="Task already taken") from e
    await db.commit()
    return MessageResponse(message="Task accepted")


@router.get("/my-assigned-tasks", response_model=list[TaskResponse])
async def my_assigned_tasks(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Tasks the caller has accepted."""
    return [_task_response(t) for t in await list_assigned_tasks(db, identity.user_id)]


@router.post("/tasks/{task_id}/complete", response_model=MessageResponse)
async def complete(
    task_id: int = Path(ge=1, le=MAX_ID),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_session),
):
    """Mark an accepted task as done."""
    try:
        await complete_task(db, identity.user_id, task_id)
    except NotAssignedToYouError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail="Task is already completed") from e
    await db.commit()
    return MessageResponse(message="Task completed")
