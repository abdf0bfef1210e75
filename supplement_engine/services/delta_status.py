"""Reviewer-driven status transitions for delta items."""
from typing import Dict, FrozenSet, Iterable, List, Union

from supplement_engine.exceptions import IllegalStatusTransition
from supplement_engine.models.delta import DeltaItem, DeltaStatus
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: Dict[DeltaStatus, FrozenSet[DeltaStatus]] = {
    DeltaStatus.IDENTIFIED: frozenset({DeltaStatus.APPROVED, DeltaStatus.DENIED}),
    DeltaStatus.APPROVED: frozenset({DeltaStatus.INCLUDED}),
    DeltaStatus.DENIED: frozenset(),
    DeltaStatus.INCLUDED: frozenset(),
}


def can_transition(current: DeltaStatus, target: DeltaStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition_delta(delta: DeltaItem, target: Union[DeltaStatus, str]) -> DeltaItem:
    """Return a copy of ``delta`` moved to ``target``.

    Raises:
        IllegalStatusTransition: If ``target`` is not reachable from the current status
    """
    target_status = DeltaStatus(target)
    if not can_transition(delta.status, target_status):
        logger.warning(
            "Rejected delta status transition",
            delta_id=delta.delta_id,
            current=delta.status.value,
            target=target_status.value,
        )
        raise IllegalStatusTransition(delta.delta_id, delta.status.value, target_status.value)
    logger.info(
        "Delta status changed",
        delta_id=delta.delta_id,
        current=delta.status.value,
        target=target_status.value,
    )
    return delta.model_copy(update={"status": target_status})


def approved_only(deltas: Iterable[DeltaItem]) -> List[DeltaItem]:
    return [delta for delta in deltas if delta.status == DeltaStatus.APPROVED]


def mark_included(deltas: Iterable[DeltaItem]) -> List[DeltaItem]:
    """Move every approved delta to ``included`` once its package has been sent.

    Deltas in other states are returned unchanged.
    """
    return [
        transition_delta(delta, DeltaStatus.INCLUDED) if delta.status == DeltaStatus.APPROVED else delta
        for delta in deltas
    ]
