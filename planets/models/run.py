import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from planets.models.base import Base


class RunStatus(str, enum.Enum):
    creating = "creating"
    active = "active"
    paused = "paused"
    completed = "completed"


class Run(Base):
    __tablename__ = "runs"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    seed: Mapped[str] = mapped_column(String(32), nullable=False)
    # Universe entity (level 0); set once the root has been generated.
    root_spatial_id: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    planet_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[RunStatus] = mapped_column(
        Enum(RunStatus), nullable=False, default=RunStatus.creating, index=True
    )
    current_turn: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_players: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    turn_interval_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    next_turn_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
