"""Adapters turning collaborator outputs into ``EvidenceSignal``s."""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from supplement_engine.models.evidence import (
    EvidenceSignal,
    EvidenceSourceType,
    PhotoAnalysis,
)
from supplement_engine.models.knowledge import normalize_component
from supplement_engine.models.supplement import PhotoRef
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)

# Measurement report keys -> (normalized feature, unit)
MEASUREMENT_FEATURES = {
    "eave": ("eave", "LF"),
    "eaves": ("eave", "LF"),
    "rake": ("rake", "LF"),
    "rakes": ("rake", "LF"),
    "ridge": ("ridge", "LF"),
    "ridges": ("ridge", "LF"),
    "hip": ("hip", "LF"),
    "hips": ("hip", "LF"),
    "valley": ("valley", "LF"),
    "valleys": ("valley", "LF"),
    "step flashing": ("step flashing", "LF"),
    "wall flashing": ("step flashing", "LF"),
    "gutter": ("gutter", "LF"),
    "gutters": ("gutter", "LF"),
    "total squares": ("roof area", "SQ"),
    "roof area": ("roof area", "SQ"),
    "total area": ("roof area", "SQ"),
}


def _feature_key(key: str) -> str:
    # totalSquares -> total squares, eaves_lf -> eaves
    spaced = "".join(f" {c.lower()}" if c.isupper() else c for c in key)
    name = normalize_component(spaced)
    for suffix in (" lf", " sq", " ft"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name


def signals_from_photo_analysis(analysis: PhotoAnalysis) -> List[EvidenceSignal]:
    """One signal per detected component and one per damage finding."""
    signals: List[EvidenceSignal] = []
    for index, component in enumerate(analysis.components):
        signals.append(EvidenceSignal(
            signal_id=f"{analysis.photo_id}:component:{index}",
            source_type=EvidenceSourceType.PHOTO,
            detected_component=normalize_component(component.component),
            component_present=component.present,
            confidence=component.confidence,
            location_hint=analysis.location,
            photo_id=analysis.photo_id,
            photo_type=analysis.photo_type,
        ))
    for index, damage in enumerate(analysis.damage):
        signals.append(EvidenceSignal(
            signal_id=f"{analysis.photo_id}:damage:{index}",
            source_type=EvidenceSourceType.PHOTO,
            detected_component=normalize_component(damage.component) or None,
            component_present=True,
            detected_damage=damage,
            confidence=analysis.confidence,
            location_hint=damage.location or analysis.location,
            photo_id=analysis.photo_id,
            photo_type=analysis.photo_type,
        ))
    return signals


def signals_from_measurement_report(report: Optional[Dict[str, Any]], source: str = "report") -> List[EvidenceSignal]:
    """One measurement signal per recognized roof feature with a positive quantity.

    Accepts flat reports (``{"eaves": 120, "rakes": 80}``) or reports with a
    nested ``measurements`` object. Unrecognized keys are ignored.
    """
    if not report:
        return []
    values = report.get("measurements") if isinstance(report.get("measurements"), dict) else report
    signals: List[EvidenceSignal] = []
    seen = set()
    for key, value in values.items():
        feature = MEASUREMENT_FEATURES.get(_feature_key(str(key)))
        if feature is None or feature[0] in seen:
            continue
        try:
            quantity = Decimal(str(value))
        except (ArithmeticError, ValueError):
            logger.warning("Skipping malformed measurement", feature=key, value=str(value))
            continue
        if not quantity.is_finite() or quantity <= 0:
            continue
        name, unit = feature
        seen.add(name)
        signals.append(EvidenceSignal(
            signal_id=f"{source}:{name.replace(' ', '-')}",
            source_type=EvidenceSourceType.MEASUREMENT,
            detected_component=name,
            quantity=quantity,
            unit=unit,
        ))
    logger.info("Measurement signals built", source=source, features=sorted(seen))
    return signals


def photo_refs_from_signals(signals: Iterable[EvidenceSignal]) -> List[PhotoRef]:
    """Group photo signals into one ``PhotoRef`` per photo, in first-seen order."""
    refs: Dict[str, PhotoRef] = {}
    for signal in signals:
        if signal.source_type != EvidenceSourceType.PHOTO or not signal.photo_id:
            continue
        ref = refs.get(signal.photo_id)
        if ref is None:
            ref = PhotoRef(
                photo_id=signal.photo_id,
                photo_type=signal.photo_type or "rooftop",
                location_hint=signal.location_hint,
            )
            refs[signal.photo_id] = ref
        if signal.detected_damage is not None:
            summary = signal.detected_damage.summary()
            if summary not in ref.damage:
                ref.damage.append(summary)
        elif signal.detected_component and signal.component_present:
            if signal.detected_component not in ref.components:
                ref.components.append(signal.detected_component)
    return list(refs.values())
