import enum
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from planets.models.base import Base


class EntityType(str, enum.Enum):
    universe = "universe"
    galaxy = "galaxy"
    sector = "sector"
    system = "system"


ENTITY_LEVELS: dict[EntityType, int] = {
    EntityType.universe: 0,
    EntityType.galaxy: 1,
    EntityType.sector: 2,
    EntityType.system: 3,
}


class SpatialEntity(Base):
    """A node of the universe -> galaxy -> sector -> system tree.

    Only the universe (level 0) has no parent. Children of one parent occupy
    distinct (x_coord, y_coord) cells of that parent's grid.
    """

    __tablename__ = "spatial_entities"
    __table_args__ = (
        CheckConstraint("level >= 0 AND level <= 3", name="ck_spatial_entities_level"),
        CheckConstraint(
            "(level = 0 AND parent_id IS NULL) OR (level > 0 AND parent_id IS NOT NULL)",
            name="ck_spatial_entities_parent_level",
        ),
        Index(
            "ix_spatial_entities_parent_coords",
            "parent_id",
            "x_coord",
            "y_coord",
            unique=True,
        ),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("spatial_entities.id", ondelete="CASCADE"), nullable=True, index=True
    )
    entity_type: Mapped[EntityType] = mapped_column(Enum(EntityType), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    x_coord: Mapped[int] = mapped_column(Integer, nullable=False)
    y_coord: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    child_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
