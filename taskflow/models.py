from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Task -> task edges: task_id cannot start before blocked_by_id is done
task_dependencies = Table(
    "task_dependencies",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("blocked_by_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
)

# Task -> availability windows it should be worked in
task_availability = Table(
    "task_availability",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "window_id",
        Integer,
        ForeignKey("availability_windows.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(20), default="user", nullable=False)  # admin, user
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    clients = relationship("Client", back_populates="user", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
    settings = relationship(
        "UserSettings", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    availability_windows = relationship(
        "AvailabilityWindow", back_populates="user", cascade="all, delete-orphan"
    )


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    vat_number = Column(String(50), nullable=True)
    currency = Column(String(3), nullable=True)  # ISO code, defaults to the user's currency
    hourly_rate = Column(Float, nullable=True)
    monthly_wage = Column(Float, nullable=True)
    # Denormalized counters, maintained by the task service
    active_tasks = Column(Integer, default=0, nullable=False)
    completed_tasks = Column(Integer, default=0, nullable=False)
    total_revenue = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="clients")
    tasks = relationship("Task", back_populates="client", cascade="all, delete-orphan")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    estimated_duration = Column(Integer, nullable=False)  # minutes
    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), default="todo", nullable=False, index=True)  # todo, in-progress, done
    priority = Column(String(10), nullable=True)  # low, medium, high
    start_date = Column(Date, nullable=True)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_date = Column(Date, nullable=True)
    end_time = Column(String(5), nullable=True)  # HH:MM
    tracked_hours = Column(Float, default=0.0, nullable=False)
    revenue = Column(Float, default=0.0, nullable=False)
    completed_at = Column(Date, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="tasks")
    client = relationship("Client", back_populates="tasks")
    blocked_by = relationship(
        "Task",
        secondary=task_dependencies,
        primaryjoin=id == task_dependencies.c.task_id,
        secondaryjoin=id == task_dependencies.c.blocked_by_id,
        backref="blocks",
    )
    schedules = relationship("AvailabilityWindow", secondary=task_availability)
    schedule_items = relationship(
        "ScheduleItem", back_populates="task", cascade="all, delete-orphan"
    )


class ScheduleItem(Base):
    """A task placed into a planner slot on a given day"""

    __tablename__ = "schedule_items"
    __table_args__ = (
        UniqueConstraint("user_id", "date", "time_slot", name="uq_schedule_items_slot"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(5), nullable=False)  # HH:MM
    duration = Column(Integer, default=30, nullable=False)  # minutes
    locked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    task = relationship("Task", back_populates="schedule_items")


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    currency_code = Column(String(3), nullable=False, default="DKK")
    currency_symbol = Column(String(5), nullable=False, default="kr")
    currency_position = Column(String(10), nullable=False, default="after")  # before, after
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="settings")


class AvailabilityWindow(Base):
    """Recurring weekly availability, e.g. Mon-Fri 09:00-17:00"""

    __tablename__ = "availability_windows"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    days = Column(JSON, default=list, nullable=False)  # ["Mon", "Tue", ...]
    from_time = Column(String(5), nullable=False)  # HH:MM
    to_time = Column(String(5), nullable=False)  # HH:MM
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="availability_windows")
