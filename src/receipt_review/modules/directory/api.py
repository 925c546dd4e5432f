from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from receipt_review.core.db import db_session
from receipt_review.modules.directory.schemas import (
    EmployeeIn,
    EmployeeOut,
    TeamIn,
    TeamOut,
    TripIn,
    TripOut,
)
from receipt_review.modules.directory.service import (
    create_employee,
    create_team,
    create_trip,
    list_employees,
    list_teams,
    list_trips,
)

router = APIRouter(tags=["directory"])


@router.get("/employees", response_model=list[EmployeeOut])
def list_employees_endpoint(session: Session = Depends(db_session)) -> list[EmployeeOut]:
    return [EmployeeOut.model_validate(e, from_attributes=True) for e in list_employees(session)]


@router.post("/employees", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee_endpoint(
    payload: EmployeeIn, session: Session = Depends(db_session)
) -> EmployeeOut:
    employee = create_employee(session, **payload.model_dump())
    return EmployeeOut.model_validate(employee, from_attributes=True)


@router.get("/teams", response_model=list[TeamOut])
def list_teams_endpoint(session: Session = Depends(db_session)) -> list[TeamOut]:
    return [TeamOut.model_validate(t, from_attributes=True) for t in list_teams(session)]


@router.post("/teams", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team_endpoint(payload: TeamIn, session: Session = Depends(db_session)) -> TeamOut:
    team = create_team(session, **payload.model_dump())
    return TeamOut.model_validate(team, from_attributes=True)


@router.get("/trips", response_model=list[TripOut])
def list_trips_endpoint(session: Session = Depends(db_session)) -> list[TripOut]:
    return [TripOut.model_validate(t, from_attributes=True) for t in list_trips(session)]


@router.post("/trips", response_model=TripOut, status_code=status.HTTP_201_CREATED)
def create_trip_endpoint(payload: TripIn, session: Session = Depends(db_session)) -> TripOut:
    trip = create_trip(session, **payload.model_dump())
    return TripOut.model_validate(trip, from_attributes=True)
