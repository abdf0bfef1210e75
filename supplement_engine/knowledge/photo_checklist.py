"""Photo documentation checklist for roofing supplements.

Adjusters deny items they cannot see. Each entry is a shot the supplement
photo set should contain; ``related_codes`` names the line items the shot
supports.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from supplement_engine.models.supplement import ChecklistCompletion, PhotoChecklistItem, PhotoRef

PHOTO_CHECKLIST: List[Dict[str, Any]] = [
    # Property overview
    {
        "id": "ov_front",
        "category": "overview",
        "title": "Front Elevation Overview",
        "description": "Full view of the home showing the front roof slopes",
        "required": True,
        "photo_types": ["ground"],
        "location": "front",
        "tips": ["Stand back far enough to capture the entire structure", "Include the address if possible"],
    },
    {
        "id": "ov_rear",
        "category": "overview",
        "title": "Rear Elevation Overview",
        "description": "Full view of the home showing the rear roof slopes",
        "required": True,
        "photo_types": ["ground"],
        "location": "rear",
    },
    {
        "id": "ov_left",
        "category": "overview",
        "title": "Left Side Elevation",
        "description": "Side view from the left when facing the front",
        "required": True,
        "photo_types": ["ground"],
        "location": "left",
    },
    {
        "id": "ov_right",
        "category": "overview",
        "title": "Right Side Elevation",
        "description": "Side view from the right when facing the front",
        "required": True,
        "photo_types": ["ground"],
        "location": "right",
    },

    # Damage
    {
        "id": "dm_closeups",
        "category": "damage",
        "title": "Existing Damage Close-ups",
        "description": "Close-up shots of visible storm damage",
        "required": True,
        "shows_damage": True,
        "tips": ["Mark hail hits with chalk", "Capture cracked or missing shingles"],
    },
    {
        "id": "dm_decking",
        "category": "damage",
        "title": "Decking Damage",
        "description": "Rotted or soft decking found at tear-off",
        "components": ["decking", "deck", "sheathing"],
        "related_codes": ["RFGDECK"],
    },
    {
        "id": "dm_gutters",
        "category": "damage",
        "title": "Gutter Condition",
        "description": "Existing gutters and downspouts that must be detached or replaced",
        "components": ["gutter", "gutters"],
        "related_codes": ["GTRDR"],
    },

    # Edges and underlayment
    {
        "id": "ed_drip_edge",
        "category": "edges",
        "title": "Drip Edge at Eaves and Rakes",
        "description": "Roof edge showing whether drip edge is installed (IRC R905.2.8.5)",
        "required": True,
        "components": ["drip edge"],
        "related_codes": ["RFGDRIP"],
        "tips": ["Shoot along the eave so the edge profile is visible"],
    },
    {
        "id": "ed_starter",
        "category": "edges",
        "title": "Starter Course",
        "description": "First course at the eaves showing starter strip or its absence",
        "required": True,
        "components": ["starter", "starter strip", "starter course"],
        "related_codes": ["RFGSTRT"],
    },
    {
        "id": "ed_ice_water",
        "category": "edges",
        "title": "Ice & Water Shield at Eaves",
        "description": "Membrane at the eaves and valleys, visible at tear-off",
        "components": ["ice and water shield", "ice & water shield", "ice water shield"],
        "related_codes": ["RFGIWS"],
        "tips": ["Show at least 24 inches of coverage inside the exterior wall line"],
    },

    # Flashing and penetrations
    {
        "id": "fl_step",
        "category": "flashing",
        "title": "Step Flashing at Walls",
        "description": "Roof-to-wall intersections showing step flashing",
        "required": True,
        "components": ["step flashing"],
        "related_codes": ["RFGSTEP"],
    },
    {
        "id": "fl_chimney",
        "category": "flashing",
        "title": "Chimney and Cricket",
        "description": "Chimney flashing and the upslope side where a cricket belongs",
        "components": ["chimney", "cricket", "saddle"],
        "related_codes": ["RFGCRKT"],
    },
    {
        "id": "fl_valleys",
        "category": "flashing",
        "title": "Valleys",
        "description": "Valley construction, open or closed",
        "components": ["valley", "valley metal"],
        "related_codes": ["RFGVLYMT"],
    },
    {
        "id": "fl_penetrations",
        "category": "flashing",
        "title": "Pipe Boots and Electrical Mast",
        "description": "Penetrations that need new boots or a split boot",
        "components": ["pipe boot", "split boot", "electrical mast", "mast"],
        "related_codes": ["RFGPJSPL"],
    },

    # Ridge
    {
        "id": "rg_ridge_cap",
        "category": "ridge",
        "title": "Hip and Ridge Cap",
        "description": "Hips and ridges showing cap shingles",
        "required": True,
        "components": ["ridge cap", "hip cap"],
        "related_codes": ["RFGRIDGC"],
    },
    {
        "id": "rg_ridge_vent",
        "category": "ridge",
        "title": "Ridge Vent",
        "description": "Existing ridge ventilation",
        "components": ["ridge vent"],
        "related_codes": ["RFGRIDGE"],
    },

    # Access and charges
    {
        "id": "ac_pitch",
        "category": "access",
        "title": "Pitch Gauge Reading",
        "description": "Pitch gauge on each main roof plane to support steep charges",
        "required": True,
        "photo_types": ["measurement"],
        "related_codes": ["RFGSTEEP", "RFGSTEEP2"],
    },
    {
        "id": "ac_satellite",
        "category": "access",
        "title": "Satellite Dish",
        "description": "Dishes mounted on the roof that must be detached and reset",
        "components": ["satellite dish", "satellite"],
        "related_codes": ["RFGSAT"],
    },
]

_items: Optional[List[PhotoChecklistItem]] = None


def checklist_items() -> List[PhotoChecklistItem]:
    global _items
    if _items is None:
        _items = [PhotoChecklistItem.model_validate(record) for record in PHOTO_CHECKLIST]
    return _items


def required_checklist_items() -> List[PhotoChecklistItem]:
    return [item for item in checklist_items() if item.required]


def items_for_code(code: Optional[str]) -> List[PhotoChecklistItem]:
    """Checklist shots that support a line item code."""
    if not code:
        return []
    wanted = code.strip().upper()
    return [item for item in checklist_items() if wanted in item.related_codes]


def _candidates(required_only: bool) -> List[PhotoChecklistItem]:
    return required_checklist_items() if required_only else checklist_items()


def checklist_completion(photos: Iterable[PhotoRef], required_only: bool = False) -> ChecklistCompletion:
    """How much of the checklist a photo set covers."""
    photos = list(photos)
    items = _candidates(required_only)
    missing = [item.id for item in items if not any(item.satisfied_by(photo) for photo in photos)]
    completed = len(items) - len(missing)
    percentage = 0
    if items:
        percentage = int((Decimal(completed * 100) / len(items)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return ChecklistCompletion(completed=completed, total=len(items), percentage=percentage, missing=missing)


def next_incomplete_items(
    photos: Iterable[PhotoRef],
    limit: int = 3,
    required_only: bool = False,
) -> List[PhotoChecklistItem]:
    """The first ``limit`` checklist shots no photo covers yet, in checklist order."""
    missing = set(checklist_completion(photos, required_only=required_only).missing)
    return [item for item in _candidates(required_only) if item.id in missing][:limit]
