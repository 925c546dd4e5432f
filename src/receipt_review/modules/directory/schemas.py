from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import Field

from receipt_review.core.schemas import WireModel


class EmployeeIn(WireModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = None
    team_code: str | None = None


class EmployeeOut(WireModel):
    id: uuid.UUID
    name: str
    email: str | None
    team_code: str | None
    created_at: datetime


class TeamIn(WireModel):
    code: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None


class TeamOut(WireModel):
    code: str
    name: str
    description: str | None
    active: bool
    created_at: datetime


class TripIn(WireModel):
    name: str = Field(min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    city: str | None = None
    country: str | None = None


class TripOut(WireModel):
    id: uuid.UUID
    name: str
    start_date: date | None
    end_date: date | None
    city: str | None
    country: str | None
    active: bool
    created_at: datetime
