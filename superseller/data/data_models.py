"""
SuperSeller Data Models
=======================

Pydantic input records consumed by the scoring core.

The core never fetches anything: callers materialize these records from their
own storage or marketplace clients and pass them in.

Units used across the package:
    - conversion_rate and ctr are fractions in [0, 1] (0.02 == 2%)
    - discount_percent is a percentage in [0, 100]
    - prices are BRL
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ListingStatus(str, Enum):
    """Normalized listing status."""
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "ListingStatus":
        """Map a raw marketplace status. 'deleted' is reported as closed."""
        if not raw:
            return cls.UNKNOWN
        value = raw.strip().lower()
        if value in ("deleted", "closed"):
            return cls.CLOSED
        if value == "active":
            return cls.ACTIVE
        if value == "paused":
            return cls.PAUSED
        return cls.UNKNOWN


class ConfidenceTier(str, Enum):
    """Confidence of a statistical baseline."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNAVAILABLE = "unavailable"


class HackHistoryStatus(str, Enum):
    CONFIRMED = "confirmed"
    DISMISSED = "dismissed"


class ListingRecord(BaseModel):
    """A listing as stored by the caller."""
    model_config = ConfigDict(frozen=True)

    id: str
    listing_id_ext: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    category: Optional[str] = None
    price: float = 0.0
    original_price: Optional[float] = None
    has_promotion: Optional[bool] = None
    discount_percent: Optional[float] = None
    stock: Optional[int] = None
    status: str = "active"
    pictures_count: Optional[int] = None
    has_video: Optional[bool] = None
    has_clips: Optional[bool] = None
    variations_count: Optional[int] = None
    is_catalog: Optional[bool] = None
    visits_last_7d: Optional[int] = None
    sales_last_7d: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("pictures_count", "variations_count", "visits_last_7d", "sales_last_7d")
    @classmethod
    def _non_negative(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("must be >= 0")
        return value


class PricingInput(BaseModel):
    """Price and promotion state of the listing."""
    model_config = ConfigDict(frozen=True)

    original_price: Optional[float] = None
    promotional_price: Optional[float] = None
    has_promotion: bool = False
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)


class ShippingInput(BaseModel):
    """Shipping state. `mode` is free text as returned by the marketplace."""
    model_config = ConfigDict(frozen=True)

    mode: Optional[str] = None
    free_shipping: Optional[bool] = None
    full_eligible: Optional[bool] = None


class MetricsWindow(BaseModel):
    """Aggregated metrics over a window (usually 30 days). None means unknown."""
    model_config = ConfigDict(frozen=True)

    visits: Optional[int] = None
    orders: Optional[int] = None
    revenue: Optional[float] = None
    conversion_rate: Optional[float] = Field(default=None, ge=0, le=1)


class CategoryBenchmark(BaseModel):
    """Price distribution and baseline conversion of the listing's category."""
    model_config = ConfigDict(frozen=True)

    median_price: Optional[float] = None
    p25_price: Optional[float] = None
    p75_price: Optional[float] = None
    baseline_conversion_rate: Optional[float] = None
    baseline_conversion_confidence: Optional[ConfidenceTier] = None
    baseline_sample_size: Optional[int] = None


class DailyMetric(BaseModel):
    """One day of listing metrics. visits=None marks a day without data."""
    model_config = ConfigDict(frozen=True)

    date: date
    visits: Optional[int] = None
    orders: int = 0
    gmv: float = 0.0
    impressions: Optional[int] = None
    clicks: Optional[int] = None
    ctr: Optional[float] = None


class CompetitorItem(BaseModel):
    """One item of a category search sample."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    price: float = 0.0
    pictures_count: int = 0
    has_video: Optional[bool] = None
    category_id: Optional[str] = None
    listing_type_id: Optional[str] = None


class BaselineMetricRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    visits: Optional[int] = None
    orders: int = 0


class CategoryBaselineInput(BaseModel):
    """Tenant listings of a category and their daily metrics over 30 days."""
    model_config = ConfigDict(frozen=True)

    category_id: str
    listing_count: int = 0
    metrics: List[BaselineMetricRow] = Field(default_factory=list)


class HackHistoryEntry(BaseModel):
    """A past user decision on a hack suggestion."""
    model_config = ConfigDict(frozen=True)

    hack_id: str
    status: HackHistoryStatus
    dismissed_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None


class ListingSnapshot(BaseModel):
    """
    Everything needed to evaluate one listing at one instant.

    now_utc is required: the core never reads the system clock.
    """
    model_config = ConfigDict(frozen=True)

    listing: ListingRecord
    now_utc: datetime
    period_days: int = Field(default=30, gt=0)
    daily_metrics: Optional[List[DailyMetric]] = None
    pricing: Optional[PricingInput] = None
    shipping: Optional[ShippingInput] = None
    metrics_30d: Optional[MetricsWindow] = None
    benchmark: Optional[CategoryBenchmark] = None
    category_path: Optional[List[str]] = None
    category_permalink: Optional[str] = None
    competitors: Optional[List[CompetitorItem]] = None
    baseline_input: Optional[CategoryBaselineInput] = None
    hack_history: List[HackHistoryEntry] = Field(default_factory=list)
    title_problem_hint: Optional[str] = None
    description_diagnostic: Optional[str] = None
