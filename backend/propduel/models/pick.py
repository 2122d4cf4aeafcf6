import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, String, Text, UniqueConstraint, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from propduel.database import Base, utcnow
from propduel.models.enums import PickType, sql_in


class Pick(Base):
    __tablename__ = "picks"
    __table_args__ = (
        UniqueConstraint("user_id", "projection_id", name="uq_pick_user_projection"),
        CheckConstraint(sql_in("pick_type", PickType), name="ck_picks_pick_type"),
        CheckConstraint("outcome IS NULL OR outcome IN ('WIN', 'LOSS')", name="ck_picks_outcome"),
        CheckConstraint("(is_resolved AND outcome IS NOT NULL) OR (NOT is_resolved AND outcome IS NULL)", name="ck_picks_resolved_outcome"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    projection_id: Mapped[str] = mapped_column(String(255), index=True)
    pick_type: Mapped[str] = mapped_column(String(10))
    player_name: Mapped[str] = mapped_column(String(255))
    player_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    stat_type: Mapped[str] = mapped_column(String(100))
    line_score: Mapped[float] = mapped_column(Float)

    outcome: Mapped[str | None] = mapped_column(String(10), nullable=True)
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"), index=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
