"""Pydantic schemas for the deal pipeline.

Defines all structured types the pipeline core and its callers exchange:
- Enums: ServiceType, ValueRange, ProbabilityRange
- Related summaries: LeadSummary, OwnerSummary
- Deal records: Deal (read model), DealCreate, DealUpdate, StageMoveRequest,
  LeadConversion
- Filtering: DealFilters
- Derived views: StageMetrics, PipelineMetrics, ColumnSummary, PipelineColumn

Deal is a read-derived copy of what the repository stores. It deliberately
does not validate probability/value ranges or the stage identifier: the
metrics and board functions trust their input. Range checks live on the
create/update payloads, which are what callers submit.

DealStage and StageDefinition are imported from stages (not duplicated).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from dealboard.pipeline.stages import DealStage, StageDefinition  # noqa: F401 -- re-export


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime. Naive timestamps are stored as UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


# ── Enums ───────────────────────────────────────────────────────────────────


class ServiceType(str, Enum):
    """Service line a deal is sold under."""

    GROWTH_CREATOR = "Growth Creator"
    AIGC_SYSTEMS = "AIGC Systems"
    CUSTOM_PROJECTS = "Custom Projects"
    ONGOING_SUPPORT = "Ongoing Support"
    BUSINESS_CONSULTING = "Business Consulting"
    SYSTEM_OPTIMIZATION = "System Optimization"
    CRM_IMPLEMENTATION = "CRM Implementation"


class ValueRange(str, Enum):
    """Deal value bucket used by the board filters."""

    ALL = "all"
    UNDER_10K = "under_10k"
    FROM_10K_TO_50K = "10k_50k"
    FROM_50K_TO_100K = "50k_100k"
    OVER_100K = "over_100k"


class ProbabilityRange(str, Enum):
    """Win probability bucket: low <40, medium 40-79, high >=80."""

    ALL = "all"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Related Records ─────────────────────────────────────────────────────────


class LeadSummary(BaseModel):
    """The originating lead, as joined onto a deal for display and search."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    company: str | None = None
    phone: str | None = None


class OwnerSummary(BaseModel):
    """The team member who owns a deal."""

    id: str
    email: str
    full_name: str | None = None
    role: str | None = None


# ── Deal Records ────────────────────────────────────────────────────────────


class Deal(BaseModel):
    """A sales opportunity as returned by the deal repository."""

    id: str
    deal_name: str
    deal_value: float = 0.0
    probability: int = 0
    stage: str = DealStage.NEW_OPPORTUNITY.value
    deal_owner: str | None = None
    service_type: str | None = None
    deal_source: str | None = None
    notes: str | None = None
    lead_id: str | None = None
    lost_reason: str | None = None
    created_by: str | None = None
    expected_close_date: datetime | None = None
    actual_close_date: datetime | None = None
    won_date: datetime | None = None
    lost_date: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    lead: LeadSummary | None = None
    owner: OwnerSummary | None = None


class DealCreate(BaseModel):
    """Schema for creating a new deal."""

    deal_name: str = Field(min_length=1)
    deal_value: float = Field(default=0.0, ge=0.0)
    probability: int = Field(default=10, ge=0, le=100)
    stage: DealStage = DealStage.NEW_OPPORTUNITY
    deal_owner: str | None = None
    service_type: ServiceType | None = None
    deal_source: str | None = None
    notes: str | None = None
    expected_close_date: datetime | None = None
    lead_id: str | None = None
    created_by: str | None = None


class DealUpdate(BaseModel):
    """Schema for updating a deal (all fields optional).

    Stage changes sent through here bypass the won/lost date stamping;
    use StageMoveRequest for board moves.
    """

    deal_name: str | None = Field(default=None, min_length=1)
    deal_value: float | None = Field(default=None, ge=0.0)
    probability: int | None = Field(default=None, ge=0, le=100)
    stage: DealStage | None = None
    deal_owner: str | None = None
    service_type: ServiceType | None = None
    deal_source: str | None = None
    notes: str | None = None
    expected_close_date: datetime | None = None
    lost_reason: str | None = None


class StageMoveRequest(BaseModel):
    """A user-initiated move of a deal to another board column."""

    stage: DealStage
    lost_reason: str | None = None


class LeadConversion(BaseModel):
    """Payload for turning an existing lead into a deal."""

    lead: LeadSummary
    deal_name: str = Field(min_length=1)
    deal_value: float = Field(default=0.0, ge=0.0)
    probability: int = Field(default=10, ge=0, le=100)
    service_type: ServiceType | None = None
    deal_owner: str | None = None
    expected_close_date: datetime | None = None
    notes: str | None = None


# ── Filters ─────────────────────────────────────────────────────────────────


class DealFilters(BaseModel):
    """Board filter state. Empty strings / ALL mean 'no constraint'."""

    search: str = ""
    stage: str = ""
    service_type: str = ""
    deal_owner: str = ""
    deal_source: str = ""
    value_range: ValueRange = ValueRange.ALL
    probability_range: ProbabilityRange = ProbabilityRange.ALL

    def is_empty(self) -> bool:
        return (
            not any((self.search, self.stage, self.service_type, self.deal_owner, self.deal_source))
            and self.value_range == ValueRange.ALL
            and self.probability_range == ProbabilityRange.ALL
        )


# ── Derived Views ───────────────────────────────────────────────────────────


class StageMetrics(BaseModel):
    """Aggregate figures for the deals in one stage."""

    count: int = 0
    value: float = 0.0
    probability_sum: float = 0.0
    average_probability: float = 0.0


class PipelineMetrics(BaseModel):
    """Aggregate figures for a deal collection."""

    total_deals: int = 0
    total_value: float = 0.0
    weighted_value: float = 0.0
    average_deal_size: float = 0.0
    conversion_rate: float = 0.0
    average_sales_cycle_days: float = 0.0
    stage_metrics: dict[str, StageMetrics] = Field(default_factory=dict)


class ColumnSummary(BaseModel):
    """Bucket-local aggregate shown in a board column header."""

    count: int = 0
    total_value: float = 0.0
    average_probability: float = 0.0


class PipelineColumn(BaseModel):
    """One board column: a stage, its deals, and their aggregate."""

    stage: StageDefinition
    deals: list[Deal] = Field(default_factory=list)
    summary: ColumnSummary = Field(default_factory=ColumnSummary)
