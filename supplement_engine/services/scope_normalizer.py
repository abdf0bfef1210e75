"""Scope normalizer: defensive parsing of extracted carrier estimates.

The extraction step hands over a loosely shaped record (camelCase or
snake_case keys, numbers as strings, fields missing or null). Nothing here
raises for bad data; every recovery is recorded in ``NormalizedScope.warnings``.
"""
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from supplement_engine.config import settings
from supplement_engine.models.knowledge import UnitOfMeasure
from supplement_engine.models.scope import (
    ClaimIdentity,
    Coverage,
    LineItem,
    NormalizedScope,
    RoofMetrics,
    ScopeSummary,
    ScopeTotals,
    TradeSummary,
)
from supplement_engine.utils.logging import get_logger
from supplement_engine.utils.money import ZERO, format_pitch, quantize_money

logger = get_logger(__name__)

UNIT_ALIASES = {
    "SQ": "SQ", "SQS": "SQ", "SQUARE": "SQ", "SQUARES": "SQ",
    "SF": "SF", "SQFT": "SF", "SQ FT": "SF", "SQ. FT.": "SF", "SQUARE FEET": "SF", "FT2": "SF",
    "LF": "LF", "LFT": "LF", "LIN FT": "LF", "LINEAR FEET": "LF", "LINEAR FT": "LF",
    "EA": "EA", "EACH": "EA", "UNIT": "EA", "UNITS": "EA",
    "HR": "HR", "HRS": "HR", "HOUR": "HR", "HOURS": "HR",
    "DA": "DA", "DAY": "DA", "DAYS": "DA",
}

CATEGORY_BY_CODE_PREFIX = (
    ("RFG", "roofing"),
    ("GTR", "gutters"),
)

WORD_NUMBERS = {"one": 1, "two": 2, "three": 3, "four": 4, "single": 1, "double": 2}

SCOPE_INDICATORS = [
    r"claim\s*(?:number|no\.?|#)",
    r"date\s+of\s+loss",
    r"\brcv\b|replacement\s+cost",
    r"\bacv\b|actual\s+cash\s+value",
    r"depreciation",
    r"deductible",
    r"xactimate",
    r"line\s+item",
    r"net\s+(?:claim|payment)",
    r"\bo\s*&\s*p\b|overhead",
]


def _pick(record: Dict[str, Any], *keys: str) -> Any:
    """First non-null value among the given keys."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class _Parser:
    """Collects warnings while coercing one raw scope."""

    def __init__(self) -> None:
        self.warnings: List[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning("Scope data issue", issue=message)

    def number(self, value: Any, path: str) -> Decimal:
        """Coerce to Decimal; malformed values become 0 with a warning."""
        if value is None:
            return ZERO
        if isinstance(value, bool):
            self.warn(f"Malformed number at {path}: {value!r}; using 0")
            return ZERO
        if isinstance(value, (int, float, Decimal)):
            result = Decimal(str(value))
        else:
            text = str(value).strip()
            if not text:
                return ZERO
            negative = text.startswith("(") and text.endswith(")")
            cleaned = re.sub(r"[$,\s()]", "", text)
            try:
                result = Decimal(cleaned)
            except InvalidOperation:
                self.warn(f"Malformed number at {path}: {value!r}; using 0")
                return ZERO
            if negative:
                result = -result
        if not result.is_finite():
            self.warn(f"Malformed number at {path}: {value!r}; using 0")
            return ZERO
        try:
            quantize_money(result)
        except InvalidOperation:
            self.warn(f"Number out of range at {path}: {value!r}; using 0")
            return ZERO
        return result

    def optional_number(self, value: Any, path: str) -> Optional[Decimal]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return self.number(value, path)

    def unit(self, value: Any, path: str) -> str:
        text = _as_text(value)
        if text is None:
            return UnitOfMeasure.EA.value
        canonical = UNIT_ALIASES.get(text.upper())
        if canonical is None:
            self.warn(f"Unknown unit at {path}: {text!r}; kept as {text.upper()}")
            return text.upper()
        return canonical

    def pitch(self, value: Any, path: str) -> Tuple[Optional[float], Optional[str]]:
        """Parse ``"8/12"``, ``"8:12"``, ``"8 in 12"`` or a bare rise."""
        if value is None:
            return None, None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value):
                self.warn(f"Unparseable roof pitch at {path}: {value!r}")
                return None, None
            return float(value), format_pitch(float(value))
        text = str(value).strip()
        if not text:
            return None, None
        match = re.search(r"(\d+(?:\.\d+)?)\s*(?:/|:|in)\s*12\b", text, re.IGNORECASE)
        if match is None:
            match = re.fullmatch(r"(\d+(?:\.\d+)?)", text)
        if match is None:
            self.warn(f"Unparseable roof pitch at {path}: {text!r}")
            return None, text
        rise = float(match.group(1))
        return rise, format_pitch(rise)

    def stories(self, value: Any, path: str) -> Optional[int]:
        if value is None:
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value):
                self.warn(f"Unparseable story count at {path}: {value!r}")
                return None
            return int(value)
        text = str(value).strip().lower()
        if not text:
            return None
        match = re.search(r"\d+", text)
        if match:
            return int(match.group(0))
        for word, count in WORD_NUMBERS.items():
            if word in text:
                return count
        self.warn(f"Unparseable story count at {path}: {value!r}")
        return None


def _infer_category(raw_category: Any, code: Optional[str]) -> str:
    category = _as_text(raw_category)
    if category:
        return category.lower()
    if code:
        upper = code.upper()
        for prefix, name in CATEGORY_BY_CODE_PREFIX:
            if upper.startswith(prefix):
                return name
    return "other"


def _normalize_line_item(raw: Dict[str, Any], index: int, parser: _Parser) -> LineItem:
    path = f"lineItems[{index}]"
    code = _as_text(_pick(raw, "xactimateCode", "xactimate_code", "code", "selector"))
    quantity = parser.number(_pick(raw, "quantity", "qty"), f"{path}.quantity")
    unit_price = parser.number(_pick(raw, "unitPrice", "unit_price", "price"), f"{path}.unitPrice")
    raw_rcv = _pick(raw, "rcv", "replacementCostValue", "replacement_cost_value", "total")
    if raw_rcv is None:
        try:
            rcv = quantize_money(quantity * unit_price)
        except InvalidOperation:
            parser.warn(f"{path}: quantity x unit price is out of range; RCV set to 0")
            rcv = ZERO
    else:
        rcv = parser.number(raw_rcv, f"{path}.rcv")
    depreciation = parser.number(_pick(raw, "depreciation", "depreciationAmount"), f"{path}.depreciation")

    raw_acv = _pick(raw, "acv", "actualCashValue", "actual_cash_value")
    expected_acv = rcv - depreciation
    if raw_acv is None:
        acv = expected_acv
    else:
        acv = parser.number(raw_acv, f"{path}.acv")
        if abs(acv - expected_acv) > settings.acv_tolerance:
            label = f"Line item {_pick(raw, 'lineNumber', 'line_number') or index + 1}"
            if code:
                label += f" ({code})"
            parser.warn(
                f"{label}: ACV {quantize_money(acv)} does not match RCV - depreciation "
                f"({quantize_money(expected_acv)})"
            )

    line_number = _pick(raw, "lineNumber", "line_number", "line")
    try:
        line_number = int(line_number) if line_number is not None else index + 1
    except (TypeError, ValueError):
        parser.warn(f"Malformed line number at {path}.lineNumber: {line_number!r}")
        line_number = index + 1

    return LineItem(
        line_number=line_number,
        code=code.upper() if code else None,
        description=_as_text(raw.get("description")) or "",
        category=_infer_category(raw.get("category"), code),
        trade=_as_text(raw.get("trade")),
        area=_as_text(raw.get("area")),
        quantity=quantity,
        unit=parser.unit(raw.get("unit"), f"{path}.unit"),
        unit_price=unit_price,
        rcv=rcv,
        acv=acv,
        depreciation=depreciation,
        tax=parser.number(raw.get("tax"), f"{path}.tax"),
        overhead_profit=parser.number(_pick(raw, "overheadProfit", "overhead_profit"), f"{path}.overheadProfit"),
        age_life=_as_text(_pick(raw, "ageLife", "age_life")),
        notes=_as_text(raw.get("notes")),
    )


def _normalize_claim(raw: Dict[str, Any]) -> ClaimIdentity:
    claim = _as_dict(raw.get("claim"))
    insured = _as_dict(raw.get("insured"))
    merged = {**raw, **claim}
    return ClaimIdentity(
        claim_number=_as_text(_pick(merged, "claimNumber", "claim_number")),
        policy_number=_as_text(_pick(merged, "policyNumber", "policy_number")),
        date_of_loss=_as_text(_pick(merged, "dateOfLoss", "date_of_loss")),
        carrier=_as_text(_pick(merged, "carrier", "carrierName", "carrier_name")),
        adjuster_name=_as_text(_pick(merged, "adjusterName", "adjuster_name", "adjuster")),
        insured_name=_as_text(_pick({**merged, **insured}, "insuredName", "insured_name", "name")),
        property_address=_as_text(
            _pick({**merged, **insured}, "propertyAddress", "property_address", "address")
        ),
    )


def normalize_scope(raw: Optional[Dict[str, Any]]) -> NormalizedScope:
    """Convert an extracted scope record into a ``NormalizedScope``.

    Args:
        raw: Loosely typed scope record from the extraction collaborator

    Returns:
        NormalizedScope with defaulted numbers, derived metrics and warnings
    """
    parser = _Parser()
    if not isinstance(raw, dict):
        parser.warn(f"Scope record is not an object ({type(raw).__name__}); using an empty scope")
        raw = {}

    raw_items = _pick(raw, "lineItems", "line_items") or []
    if not isinstance(raw_items, list):
        parser.warn("lineItems is not a list; ignoring it")
        raw_items = []
    line_items: List[LineItem] = []
    for index, raw_item in enumerate(raw_items):
        if not isinstance(raw_item, dict):
            parser.warn(f"lineItems[{index}] is not an object; skipped")
            continue
        line_items.append(_normalize_line_item(raw_item, index, parser))

    line_rcv = sum((item.rcv for item in line_items), ZERO)

    raw_totals = _as_dict(raw.get("totals"))
    raw_total_rcv = _pick(raw_totals, "rcv", "replacementCostValue", "replacement_cost_value")
    totals = ScopeTotals(
        replacement_cost_value=line_rcv if raw_total_rcv is None else parser.number(raw_total_rcv, "totals.rcv"),
        actual_cash_value=parser.number(
            _pick(raw_totals, "acv", "actualCashValue", "actual_cash_value"), "totals.acv"
        ),
        depreciation=parser.number(raw_totals.get("depreciation"), "totals.depreciation"),
        deductible=parser.number(raw_totals.get("deductible"), "totals.deductible"),
        net_payment=parser.number(_pick(raw_totals, "netPayment", "net_payment", "netClaim"), "totals.netPayment"),
        tax=parser.number(raw_totals.get("tax"), "totals.tax"),
        overhead_profit=parser.number(_pick(raw_totals, "overheadProfit", "overhead_profit"), "totals.overheadProfit"),
    )
    if raw_total_rcv is not None and line_items:
        gap = totals.replacement_cost_value - line_rcv
        if abs(gap) > settings.rcv_tolerance:
            parser.warn(
                f"Total RCV {quantize_money(totals.replacement_cost_value)} differs from the sum of line item "
                f"RCV {quantize_money(line_rcv)} by {quantize_money(gap)}"
            )

    raw_metrics = _as_dict(_pick(raw, "roofMetrics", "roof_metrics"))
    total_area = parser.optional_number(
        _pick(raw_metrics, "totalAreaUnits", "total_area_units", "totalSquares", "total_squares"),
        "roofMetrics.totalSquares",
    )
    pitch, pitch_text = parser.pitch(_pick(raw_metrics, "pitch", "predominantPitch"), "roofMetrics.pitch")
    roofing_rcv = sum((item.rcv for item in line_items if item.category == "roofing"), ZERO)
    cost_per_area_unit = None
    if total_area is not None and total_area > 0:
        cost_per_area_unit = quantize_money(roofing_rcv / total_area)
    roof_metrics = RoofMetrics(
        total_area_units=total_area,
        cost_per_area_unit=cost_per_area_unit,
        pitch=pitch,
        pitch_text=pitch_text,
        stories=parser.stories(_pick(raw_metrics, "stories", "storyCount"), "roofMetrics.stories"),
    )

    raw_coverages = raw.get("coverages") or []
    if not isinstance(raw_coverages, list):
        parser.warn("coverages is not a list; ignoring it")
        raw_coverages = []
    coverages = []
    for index, raw_coverage in enumerate(raw_coverages):
        if not isinstance(raw_coverage, dict):
            continue
        coverages.append(Coverage(
            name=_as_text(_pick(raw_coverage, "name", "coverage", "type")) or f"Coverage {index + 1}",
            limit=parser.number(raw_coverage.get("limit"), f"coverages[{index}].limit"),
            deductible=parser.number(raw_coverage.get("deductible"), f"coverages[{index}].deductible"),
        ))

    raw_trades = _pick(raw, "tradeSummaries", "trade_summaries") or []
    if not isinstance(raw_trades, list):
        parser.warn("tradeSummaries is not a list; ignoring it")
        raw_trades = []
    trade_summaries = []
    for index, raw_trade in enumerate(raw_trades):
        if not isinstance(raw_trade, dict):
            continue
        trade_summaries.append(TradeSummary(
            trade=_as_text(_pick(raw_trade, "trade", "name")) or f"Trade {index + 1}",
            rcv=parser.number(raw_trade.get("rcv"), f"tradeSummaries[{index}].rcv"),
            depreciation=parser.number(raw_trade.get("depreciation"), f"tradeSummaries[{index}].depreciation"),
            acv=parser.number(raw_trade.get("acv"), f"tradeSummaries[{index}].acv"),
        ))

    scope = NormalizedScope(
        claim=_normalize_claim(raw),
        line_items=line_items,
        totals=totals,
        roof_metrics=roof_metrics,
        coverages=coverages,
        trade_summaries=trade_summaries,
        warnings=parser.warnings,
    )

    logger.info(
        "Scope normalized",
        claim_number=scope.claim.claim_number,
        line_items=len(line_items),
        total_rcv=str(totals.replacement_cost_value),
        cost_per_area_unit=str(cost_per_area_unit) if cost_per_area_unit is not None else None,
        warnings=len(parser.warnings),
    )
    return scope


def summarize_scope(scope: NormalizedScope) -> ScopeSummary:
    """Headline roofing numbers for a normalized scope.

    When the carrier did not state the roof area, it is estimated from the
    first shingle line priced per square.
    """
    roofing = scope.roofing_items()
    estimated_area = scope.roof_metrics.total_area_units
    if not estimated_area:
        shingle_line = next(
            (
                item for item in roofing
                if item.unit == UnitOfMeasure.SQ.value
                and "shingle" in item.description.lower()
                and "remove" not in item.description.lower()
                and item.quantity > 0
            ),
            None,
        )
        estimated_area = shingle_line.quantity if shingle_line else None

    roofing_rcv = sum((item.rcv for item in roofing), ZERO)
    cost_per_area_unit = scope.roof_metrics.cost_per_area_unit
    if cost_per_area_unit is None and estimated_area:
        cost_per_area_unit = quantize_money(roofing_rcv / estimated_area)

    by_category: Dict[str, Decimal] = {}
    for item in scope.line_items:
        by_category[item.category] = by_category.get(item.category, ZERO) + item.rcv

    return ScopeSummary(
        line_item_count=len(scope.line_items),
        roofing_line_item_count=len(roofing),
        roofing_rcv=quantize_money(roofing_rcv),
        roofing_acv=quantize_money(sum((item.acv for item in roofing), ZERO)),
        roofing_depreciation=quantize_money(sum((item.depreciation for item in roofing), ZERO)),
        estimated_area_units=estimated_area,
        cost_per_area_unit=cost_per_area_unit,
        rcv_by_category={k: quantize_money(v) for k, v in by_category.items()},
        warning_count=len(scope.warnings),
    )


def looks_like_carrier_scope(text: str) -> bool:
    """Whether extracted document text reads like a carrier estimate (three or more indicators)."""
    if not text:
        return False
    hits = sum(1 for pattern in SCOPE_INDICATORS if re.search(pattern, text, re.IGNORECASE))
    return hits >= 3
