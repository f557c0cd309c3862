"""
Request bodies accepted by the API.

Unknown fields are ignored. Update models distinguish "absent" (left out of
`model_dump(exclude_unset=True)`) from an explicit null, which clears the
column where it is nullable and fails validation where it is not.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt, StringConstraints, field_validator

from vita.repositories.base import MAX_COUNT

TaskStatus = Literal["pending", "completed"]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PositiveInt = Annotated[StrictInt, Field(gt=0, le=MAX_COUNT)]


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _date_string_only(value):
    if value is not None and not isinstance(value, (str, date)):
        raise ValueError("Expected a date string (YYYY-MM-DD)")
    return value


def _not_in_past(value: Optional[date]) -> Optional[date]:
    # "today" is the server's local calendar date
    if value is not None and value < date.today():
        raise ValueError("Date cannot be in the past")
    return value


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterRequest(_Body):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class LoginRequest(_Body):
    email: EmailStr
    password: str

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class TaskCreate(_Body):
    title: NonEmptyStr
    due_date: date
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    due_date_is_string = field_validator("due_date", mode="before")(_date_string_only)
    due_date_not_in_past = field_validator("due_date")(_not_in_past)


class TaskUpdate(_Body):
    # title/status default to None without being Optional: absent is fine, explicit null is rejected
    title: NonEmptyStr = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    status: TaskStatus = None

    due_date_is_string = field_validator("due_date", mode="before")(_date_string_only)
    due_date_not_in_past = field_validator("due_date")(_not_in_past)


class HabitCreate(_Body):
    name: NonEmptyStr
    description: Optional[str] = None
    target_count: Optional[PositiveInt] = None


class HabitUpdate(_Body):
    name: NonEmptyStr = None
    description: Optional[str] = None
    target_count: Optional[PositiveInt] = None


class HabitLogCreate(_Body):
    count: PositiveInt = 1
