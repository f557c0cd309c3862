"""SQLAlchemy models for users, tasks, habits and habit logs."""
from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .session import Base

ID_LENGTH = 40


class User(Base):
    __tablename__ = "users"

    id = Column(String(ID_LENGTH), primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    tasks = relationship("Task", back_populates="owner", cascade="all,delete-orphan")
    habits = relationship("Habit", back_populates="owner", cascade="all,delete-orphan")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(ID_LENGTH), primary_key=True)
    user_id = Column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String(16), default="pending", nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    owner = relationship("User", back_populates="tasks")


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String(ID_LENGTH), primary_key=True)
    user_id = Column(String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    target_count = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    owner = relationship("User", back_populates="habits")
    logs = relationship(
        "HabitLog",
        back_populates="habit",
        cascade="all,delete-orphan",
        order_by="HabitLog.date",
    )


class HabitLog(Base):
    __tablename__ = "habit_logs"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_logs_habit_date"),)

    id = Column(String(ID_LENGTH), primary_key=True)
    habit_id = Column(String(ID_LENGTH), ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    count = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)

    habit = relationship("Habit", back_populates="logs")
