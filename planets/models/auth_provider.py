from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from planets.models.base import Base


class PlayerAuthProvider(Base):
    """Link between a player and an external OAuth identity."""

    __tablename__ = "player_auth_providers"
    __table_args__ = (
        UniqueConstraint("provider", "provider_user_id", name="uq_auth_provider_identity"),
        UniqueConstraint("player_id", "provider", name="uq_auth_provider_player"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    provider_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
