"""Planet model - leaf population of a system entity."""

import enum
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from planets.models.base import Base


class PlanetType(str, enum.Enum):
    barren = "barren"
    terrestrial = "terrestrial"
    gas_giant = "gas_giant"
    ice = "ice"
    volcanic = "volcanic"


class Planet(Base):
    """One planet orbiting a system.

    planet_index is the 0-based position inside the system and is unique per
    system. Gas giants are never habitable, so their max_population is 0.
    """

    __tablename__ = "planets"
    __table_args__ = (
        UniqueConstraint("system_id", "planet_index", name="uq_planets_system_index"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    system_id: Mapped[int] = mapped_column(
        ForeignKey("spatial_entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    planet_index: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[PlanetType] = mapped_column(Enum(PlanetType), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    population: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    max_population: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("players.id", ondelete="SET NULL"), nullable=True, default=None, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
