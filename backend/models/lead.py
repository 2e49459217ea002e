"""
Lead Models

Client engagements and their pipeline stage history. A lead with a
stage record equal to the configured "agreement signed" code is a
signed contract for bonus purposes.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class Lead(TimestampMixin, Base):
    """A client engagement with its contract total and role attributions."""

    __tablename__ = "leads"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    total: Mapped[Decimal | None] = mapped_column(
        Numeric(14, 2),
        nullable=True,
        comment="Contract total in the lead's currency",
    )
    currency_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="1=NIS, 2=EUR, 3=USD, 4=GBP",
    )

    # Role attributions
    meeting_scheduler_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    meeting_manager_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    meeting_lawyer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
        comment="Helper closer",
    )
    closer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    expert_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    case_handler_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )

    stages: Mapped[list["LeadStage"]] = relationship(
        back_populates="lead",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Lead {self.id} total={self.total}>"


class LeadStage(Base):
    """A pipeline stage reached by a lead on a given date."""

    __tablename__ = "lead_stages"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    lead_id: Mapped[UUID] = mapped_column(
        ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False,
    )
    stage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    stage_date: Mapped[date] = mapped_column(
        "date",
        Date,
        nullable=False,
    )

    lead: Mapped["Lead"] = relationship(back_populates="stages")

    __table_args__ = (
        Index("ix_lead_stages_stage_date", "stage", "date"),
        Index("ix_lead_stages_lead_id", "lead_id"),
    )
