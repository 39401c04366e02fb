"""SQLAlchemy models for pnlkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

# Amounts are stored as exact decimal strings, converted in mappers
MONEY = String


class LineItem(Base):
    """Raw ledger line item model."""

    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True)
    location_id = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    category = Column(String, nullable=False, default="")
    subcategory = Column(String, nullable=True)
    gl_account = Column(String, nullable=True)
    amount = Column(MONEY, nullable=False)
    import_id = Column(String, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_line_items_scope", "location_id", "year", "month"),)


class PeriodSummary(Base):
    """Aggregated summary model, one row per (location, year, month)."""

    __tablename__ = "period_summaries"

    id = Column(Integer, primary_key=True)
    location_id = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    revenue_from_produced_goods = Column(MONEY, nullable=False, default="0")
    revenue_from_merchandise_sales = Column(MONEY, nullable=False, default="0")
    unclassified_revenue = Column(MONEY, nullable=False, default="0")
    revenue_total = Column(MONEY, nullable=False, default="0")
    cost_of_sales_total = Column(MONEY, nullable=False, default="0")
    labor_total = Column(MONEY, nullable=False, default="0")
    other_costs_total = Column(MONEY, nullable=False, default="0")
    depreciation_total = Column(MONEY, nullable=False, default="0")
    financial_result_total = Column(MONEY, nullable=False, default="0")
    unclassified_costs = Column(MONEY, nullable=False, default="0")
    rollup_excluded_total = Column(MONEY, nullable=False, default="0")
    gross_profit = Column(MONEY, nullable=False, default="0")
    result = Column(MONEY, nullable=False, default="0")
    record_count = Column(Integer, nullable=False, default=0)
    aggregated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One summary per scope
    __table_args__ = (
        UniqueConstraint("location_id", "year", "month", name="uq_summary_scope"),
    )

    # Relationships
    breakdown = relationship(
        "SummaryBreakdown",
        back_populates="summary",
        cascade="all, delete-orphan",
        order_by="SummaryBreakdown.id",
    )


class SummaryBreakdown(Base):
    """Sub-category detail line of a summary."""

    __tablename__ = "summary_breakdown"

    id = Column(Integer, primary_key=True)
    summary_id = Column(Integer, ForeignKey("period_summaries.id"), nullable=False)
    bucket = Column(String, nullable=False)
    detail_group = Column(String, nullable=True)
    label = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    record_count = Column(Integer, nullable=False, default=0)

    # Relationships
    summary = relationship("PeriodSummary", back_populates="breakdown")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
