from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from receipt_review.core.errors import InvalidRequestError, StoreFailedError
from receipt_review.modules.directory.models import Employee, FunctionalTeam, Trip


def list_employees(session: Session) -> list[Employee]:
    return list(session.scalars(select(Employee).order_by(Employee.name.asc())))


def list_teams(session: Session, *, active_only: bool = True) -> list[FunctionalTeam]:
    stmt = select(FunctionalTeam).order_by(FunctionalTeam.name.asc())
    if active_only:
        stmt = stmt.where(FunctionalTeam.active.is_(True))
    return list(session.scalars(stmt))


def list_trips(session: Session, *, active_only: bool = True) -> list[Trip]:
    stmt = select(Trip).order_by(Trip.start_date.desc())
    if active_only:
        stmt = stmt.where(Trip.active.is_(True))
    return list(session.scalars(stmt))


def create_employee(
    session: Session, *, name: str, email: str | None = None, team_code: str | None = None
) -> Employee:
    name = name.strip()
    if not name:
        raise InvalidRequestError("Employee name is required")
    employee = Employee(name=name, email=(email or "").strip() or None, team_code=team_code)
    _commit(session, employee, what="employee")
    return employee


def create_team(
    session: Session, *, code: str, name: str, description: str | None = None
) -> FunctionalTeam:
    code = code.strip()
    if not code or not name.strip():
        raise InvalidRequestError("Team code and name are required")
    if session.scalar(select(FunctionalTeam).where(FunctionalTeam.code == code)):
        raise InvalidRequestError("Team code already exists", code=code)
    team = FunctionalTeam(code=code, name=name.strip(), description=description, active=True)
    _commit(session, team, what="team")
    return team


def create_trip(
    session: Session,
    *,
    name: str,
    start_date: date | None = None,
    end_date: date | None = None,
    city: str | None = None,
    country: str | None = None,
) -> Trip:
    if not name.strip():
        raise InvalidRequestError("Trip name is required")
    if start_date and end_date and end_date < start_date:
        raise InvalidRequestError("Trip end date is before its start date")
    trip = Trip(
        name=name.strip(),
        start_date=start_date,
        end_date=end_date,
        city=city,
        country=country,
        active=True,
    )
    _commit(session, trip, what="trip")
    return trip


def _commit(session: Session, obj: object, *, what: str) -> None:
    try:
        session.add(obj)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise InvalidRequestError(f"Conflicting {what}") from e
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreFailedError(f"Failed to save {what}") from e
