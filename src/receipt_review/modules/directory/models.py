from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from receipt_review.core.models import Base, CreatedAt, UUIDPrimaryKey


class Employee(UUIDPrimaryKey, CreatedAt, Base):
    __tablename__ = "directory_employee"

    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    team_code: Mapped[str | None] = mapped_column(String(64), nullable=True)


class FunctionalTeam(CreatedAt, Base):
    __tablename__ = "directory_functional_team"

    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)


class Trip(UUIDPrimaryKey, CreatedAt, Base):
    __tablename__ = "directory_trip"

    name: Mapped[str] = mapped_column(String(200))
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
