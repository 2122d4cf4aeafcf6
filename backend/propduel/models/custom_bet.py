from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propduel.database import Base, utcnow
from propduel.models.enums import BetStatus, Outcome, PickType, sql_in
from propduel.models.user import User


class CustomBet(Base):
    __tablename__ = "custom_bets"
    __table_args__ = (
        CheckConstraint(sql_in("creator_pick_type", PickType), name="ck_custom_bets_creator_pick_type"),
        CheckConstraint(sql_in("status", BetStatus), name="ck_custom_bets_status"),
        CheckConstraint(f"outcome IS NULL OR {sql_in('outcome', Outcome)}", name="ck_custom_bets_outcome"),
        CheckConstraint(
            "(status IN ('PENDING', 'DECLINED') AND outcome IS NULL)"
            " OR (status = 'ACCEPTED' AND (outcome IS NULL OR outcome = 'TBD'))"
            " OR (status = 'COMPLETED' AND outcome IN ('WIN', 'LOSS'))",
            name="ck_custom_bets_outcome_matches_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    player: Mapped[str] = mapped_column(String(255))
    stat: Mapped[str] = mapped_column(String(100))
    line: Mapped[float] = mapped_column(Float)
    creator_pick_type: Mapped[str] = mapped_column(String(5))
    status: Mapped[str] = mapped_column(String(20), default=BetStatus.PENDING.value, index=True)
    outcome: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    creator: Mapped[User] = relationship("User")
    participants: Mapped[list["CustomBetParticipant"]] = relationship(
        "CustomBetParticipant",
        back_populates="bet",
        order_by="CustomBetParticipant.joined_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CustomBetParticipant(Base):
    __tablename__ = "custom_bet_participants"
    __table_args__ = (
        UniqueConstraint("bet_id", "user_id", name="uq_custom_bet_participant"),
        CheckConstraint(sql_in("pick_type", PickType), name="ck_custom_bet_participants_pick_type"),
        CheckConstraint(f"outcome IS NULL OR {sql_in('outcome', Outcome)}", name="ck_custom_bet_participants_outcome"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bet_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("custom_bets.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    pick_type: Mapped[str] = mapped_column(String(10))
    outcome: Mapped[str | None] = mapped_column(String(10), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    bet: Mapped[CustomBet] = relationship("CustomBet", back_populates="participants")
    user: Mapped[User] = relationship("User")
