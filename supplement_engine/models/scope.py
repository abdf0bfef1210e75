"""Canonical carrier scope produced by the scope normalizer."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

ZERO = Decimal("0")


class ClaimIdentity(BaseModel):
    """Claim metadata. Every field may be missing early in the supplement workflow."""

    model_config = ConfigDict(populate_by_name=True)

    claim_number: Optional[str] = None
    policy_number: Optional[str] = None
    date_of_loss: Optional[str] = None
    carrier: Optional[str] = None
    adjuster_name: Optional[str] = None
    insured_name: Optional[str] = None
    property_address: Optional[str] = None


class LineItem(BaseModel):
    """A single priced line of an estimate."""

    model_config = ConfigDict(populate_by_name=True)

    line_number: Optional[int] = None
    code: Optional[str] = None
    description: str = ""
    category: str = "other"
    trade: Optional[str] = None
    area: Optional[str] = None
    quantity: Decimal = ZERO
    unit: str = "EA"
    unit_price: Decimal = ZERO
    rcv: Decimal = ZERO
    acv: Decimal = ZERO
    depreciation: Decimal = ZERO
    tax: Decimal = ZERO
    overhead_profit: Decimal = ZERO
    age_life: Optional[str] = None
    citation_id: Optional[str] = None
    notes: Optional[str] = None


class ScopeTotals(BaseModel):
    """Coverage totals as stated by the carrier."""

    replacement_cost_value: Decimal = ZERO
    actual_cash_value: Decimal = ZERO
    depreciation: Decimal = ZERO
    deductible: Decimal = ZERO
    net_payment: Decimal = ZERO
    tax: Decimal = ZERO
    overhead_profit: Decimal = ZERO


class RoofMetrics(BaseModel):
    """Roof geometry and derived cost metrics.

    ``cost_per_area_unit`` stays ``None`` when it cannot be computed, which is
    different from a computed zero.
    """

    total_area_units: Optional[Decimal] = None
    cost_per_area_unit: Optional[Decimal] = None
    pitch: Optional[float] = Field(default=None, description="Rise per 12 units of run")
    pitch_text: Optional[str] = None
    stories: Optional[int] = None


class Coverage(BaseModel):
    name: str
    limit: Decimal = ZERO
    deductible: Decimal = ZERO


class TradeSummary(BaseModel):
    trade: str
    rcv: Decimal = ZERO
    depreciation: Decimal = ZERO
    acv: Decimal = ZERO


class NormalizedScope(BaseModel):
    """A carrier scope in canonical, typed form."""

    claim: ClaimIdentity = Field(default_factory=ClaimIdentity)
    line_items: List[LineItem] = Field(default_factory=list)
    totals: ScopeTotals = Field(default_factory=ScopeTotals)
    roof_metrics: RoofMetrics = Field(default_factory=RoofMetrics)
    coverages: List[Coverage] = Field(default_factory=list)
    trade_summaries: List[TradeSummary] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list, description="Recovered data-quality issues")

    def roofing_items(self) -> List[LineItem]:
        return [item for item in self.line_items if item.category == "roofing"]


class ScopeSummary(BaseModel):
    """Headline numbers for a normalized scope."""

    line_item_count: int
    roofing_line_item_count: int
    roofing_rcv: Decimal
    roofing_acv: Decimal
    roofing_depreciation: Decimal
    estimated_area_units: Optional[Decimal] = None
    cost_per_area_unit: Optional[Decimal] = None
    rcv_by_category: Dict[str, Decimal] = Field(default_factory=dict)
    warning_count: int = 0
