"""Pydantic schemas for task endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from swadrive.db.enums import TaskStatus, TaskUrgency


class TaskRequest(BaseModel):
    """Body for creating or replacing a task.

    The title is derived from category / specific_problem / component.
    reward_amount is accepted as a number or a numeric string.
    """

    category: str | None = Field(None, max_length=100)
    component: str | None = Field(None, max_length=100)
    specific_problem: str | None = Field(
        None,
        max_length=100,
        validation_alias=AliasChoices("specific_problem", "mechanicProblem"),
    )
    title: str | None = Field(None, max_length=255)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    urgency: TaskUrgency = TaskUrgency.TODAY
    reward_amount: float | str | None = None


class TaskResponse(BaseModel):
    task_id: int
    user_id: int
    title: str
    description: str | None = None
    location: str | None = None
    reward_amount: float
    urgency: TaskUrgency
    status: TaskStatus
    created_at: datetime | None = None


class TaskCreatedResponse(BaseModel):
    message: str
    task_id: int


class ReviewRequest(BaseModel):
    rating: int
    comment: str | None = None


class MessageResponse(BaseModel):
    message: str
