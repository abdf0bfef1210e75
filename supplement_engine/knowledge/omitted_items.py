"""Items carriers frequently leave out of roofing scopes.

Order matters: when two applicable templates share a line-item code, the
higher priority wins and ties go to the entry defined first.

Measured features used by ``quantity_rule`` are normalized component names
from the measurement report: ``eave``, ``rake``, ``ridge``, ``hip``,
``valley``, ``step flashing``, ``gutter`` (all LF) and ``roof area`` (SQ).
"""
from typing import Any, Dict, List

from supplement_engine.knowledge.citations import OSHA_FALL_PROTECTION

OMITTED_ITEMS: List[Dict[str, Any]] = [
    # Critical: code or manufacturer required, always checked
    {
        "line_item_code": "RFGDRIP",
        "name": "Drip Edge",
        "category": "edges",
        "priority": "critical",
        "citation_id": "R905.2.8.5",
        "rationale": "Required by code at eaves and rake edges; carriers often omit it entirely.",
        "evidence_hints": ["Edge of roof photo showing existing/missing drip edge", "Eave close-up", "Rake close-up"],
        "aliases": ["drip edge"],
        "equivalent_codes": ["RFGDRIPG"],
        "evidence_components": ["drip edge"],
        "quantity_rule": {"features": {"eave": "1", "rake": "1"}},
        "quantity_source": "Eaves LF + rakes LF from the measurement report",
    },
    {
        "line_item_code": "RFGSTRT",
        "name": "Starter Course",
        "category": "starter",
        "priority": "critical",
        "citation_id": "R904.1",
        "rationale": "Required by manufacturer instructions and not part of the shingle waste calculation.",
        "evidence_hints": ["Edge of roof showing starter course installation point"],
        "aliases": ["starter"],
        "equivalent_codes": ["RFGSTRT3", "RFGASTR"],
        "evidence_components": ["starter", "starter strip", "starter course"],
        "quantity_rule": {"features": {"eave": "1", "rake": "1"}},
        "quantity_source": "Eaves LF + rakes LF from the measurement report",
    },
    {
        "line_item_code": "RFGIWS",
        "name": "Ice & Water Shield",
        "category": "underlayment",
        "priority": "critical",
        "citation_id": "R905.2.8.2",
        "rationale": "Required in valleys and at eaves by code and manufacturer instructions.",
        "evidence_hints": ["Valley photos", "Eave photos showing ice & water shield installation area"],
        "aliases": ["ice and water", "ice & water", "ice barrier", "ice/water"],
        "evidence_components": ["ice and water shield", "ice & water shield", "ice water shield"],
        # valley LF x 3 ft + eave LF x 2 ft, in squares
        "quantity_rule": {"features": {"valley": "3", "eave": "2"}, "divisor": "100"},
        "quantity_source": "Valley LF x 3 ft + eaves LF x 2 ft, converted to squares",
    },
    {
        "line_item_code": "RFGSTEP",
        "name": "Step Flashing",
        "category": "flashing",
        "priority": "critical",
        "citation_id": "R905.2.8.3",
        "rationale": "Required at all roof-to-wall intersections and cannot be reused after tear-off.",
        "evidence_hints": ["Wall-to-roof intersection photos", "Chimney step flashing", "Dormer sidewall flashing"],
        "aliases": ["step flash"],
        "evidence_components": ["step flashing"],
        "quantity_rule": {"features": {"step flashing": "1"}},
        "quantity_source": "Wall intersection LF from photos or measurements",
    },
    {
        "line_item_code": "RFGRIDGC",
        "name": "Hip/Ridge Cap",
        "category": "ridge",
        "priority": "critical",
        "rationale": "Not included in measurement waste calculations; must be a separate line item.",
        "evidence_hints": ["Ridge line photos", "Hip line photos"],
        "aliases": ["ridge cap", "hip cap", "hip and ridge", "hip & ridge", "hip/ridge"],
        "equivalent_codes": ["RFGRIDGCS", "RFGRIDGHP"],
        "evidence_components": ["ridge cap", "hip cap"],
        "quantity_rule": {"features": {"ridge": "1", "hip": "1"}},
        "quantity_source": "Ridge LF + hips LF from the measurement report",
    },

    # High: safety and labor
    {
        "line_item_code": "RFGSTEEP",
        "name": "Steep Pitch Charges",
        "category": "steep",
        "priority": "high",
        "citation_id": OSHA_FALL_PROTECTION,
        "trigger": {"min_pitch": 7, "max_pitch": 10},
        "rationale": "Pitches of 7/12 and above need additional labor and safety equipment.",
        "evidence_hints": ["Pitch gauge photo", "Overview showing roof steepness", "Measurement report pitch data"],
        "aliases": ["steep roof - 7/12", "steep charge", "steep pitch"],
        "quantity_rule": {"use_total_area": True},
        "quantity_source": "Total roof squares from the measurement report",
    },
    {
        "line_item_code": "RFGSTEEP2",
        "name": "Steep Pitch Charges (10/12 and above)",
        "category": "steep",
        "priority": "high",
        "citation_id": OSHA_FALL_PROTECTION,
        "trigger": {"min_pitch": 10},
        "rationale": "Pitches of 10/12 and above need the higher steep-roof labor charge.",
        "evidence_hints": ["Pitch gauge photo", "Overview showing roof steepness"],
        "aliases": ["steep roof - 10/12"],
        "quantity_rule": {"use_total_area": True},
        "quantity_source": "Total roof squares from the measurement report",
    },
    {
        "line_item_code": "RFGHIGH",
        "name": "Two-Story/High Charges",
        "category": "steep",
        "priority": "high",
        "citation_id": OSHA_FALL_PROTECTION,
        "trigger": {"min_stories": 2},
        "rationale": "Structures of two or more stories need fall protection and extra material handling.",
        "evidence_hints": ["Ground-level elevation photos showing building height", "All four elevations"],
        "aliases": ["2-story", "two-story", "two story", "high roof charge"],
        "equivalent_codes": ["RFGHIGH+"],
        "quantity_rule": {"use_total_area": True},
        "quantity_source": "Total roof squares from the measurement report",
    },
    {
        "line_item_code": "RFGSUPR",
        "name": "Supervisor Hours",
        "category": "labor",
        "priority": "high",
        "citation_id": OSHA_FALL_PROTECTION,
        "trigger": {"min_pitch": 7, "min_stories": 2, "match": "any"},
        "rationale": "Steep or multi-story work requires a designated supervisor for crews working at height.",
        "evidence_hints": ["Photos showing height/steepness requiring supervision"],
        "aliases": ["supervision", "supervisor", "project management"],
        "default_quantity": "8",
        "quantity_source": "8-16 hours based on job size",
    },

    # High: structural
    {
        "line_item_code": "RFGCRKT",
        "name": "Cricket/Saddle",
        "category": "flashing",
        "priority": "high",
        "citation_id": "R903.2.2",
        "trigger": {"required_components": ["chimney"]},
        "rationale": "Required behind chimneys and penetrations wider than 30 inches; frequently omitted.",
        "evidence_hints": ["Chimney with measurement showing width", "Cricket current condition"],
        "aliases": ["cricket", "saddle"],
        "evidence_components": ["cricket", "saddle"],
        "default_quantity": "1",
        "quantity_source": "1 EA per qualifying chimney or penetration",
    },
    {
        "line_item_code": "RFGDECK",
        "name": "Decking Replacement",
        "category": "decking",
        "priority": "high",
        "citation_id": "R905.2.1",
        "trigger": {"required_damaged_components": ["decking", "deck", "sheathing"]},
        "rationale": "Damaged or deteriorated decking must be replaced before new shingles are fastened.",
        "evidence_hints": ["Attic photos showing decking condition", "Water stains", "Rot", "Spacing issues"],
        "aliases": ["decking", "sheathing"],
        "equivalent_codes": ["RFGDECK58", "RFGOSB"],
        "evidence_components": ["decking", "deck", "sheathing"],
        "quantity_source": "SF from attic inspection, typically 10-20% of the roof",
    },
    {
        "line_item_code": "RFGVLYMT",
        "name": "Valley Metal",
        "category": "valley",
        "priority": "high",
        "citation_id": "R905.2.8.1",
        "trigger": {"required_components": ["valley", "valley metal"]},
        "rationale": "Open valleys need replacement W-profile metal to keep like kind and quality.",
        "evidence_hints": ["Valley photos showing W-profile metal", "Valley intersection photos"],
        "aliases": ["valley metal", "w-valley", "w valley"],
        "equivalent_codes": ["RFGVMTLW"],
        "evidence_components": ["valley metal"],
        "quantity_rule": {"features": {"valley": "1"}},
        "quantity_source": "Valley LF from the measurement report",
    },

    # Medium: site and protection
    {
        "line_item_code": "RFGDUMP",
        "name": "Debris Removal",
        "category": "site",
        "priority": "medium",
        "rationale": "Tear-off debris must be hauled off; a load cannot be prorated.",
        "evidence_hints": ["Overview photos showing tear-off scope"],
        "aliases": ["debris", "dumpster", "haul off", "haul-off"],
        "default_quantity": "1",
        "quantity_source": "1 load per 20 squares",
    },
    {
        "line_item_code": "RFGTARP",
        "name": "Ground Tarping",
        "category": "site",
        "priority": "medium",
        "trigger": {"required_components": ["landscaping", "garden", "driveway", "lawn"], "match": "any"},
        "rationale": "Landscaping and hardscape around the work area must be protected during tear-off.",
        "evidence_hints": ["Ground-level photos showing landscaping", "Gardens", "Driveway"],
        "aliases": ["tarp", "ground protection"],
        "quantity_rule": {"use_total_area": True},
        "quantity_source": "Roof squares of the work area",
    },
    {
        "line_item_code": "RFGSAT",
        "name": "Satellite Detach & Reset",
        "category": "detach-reset",
        "priority": "medium",
        "trigger": {"required_components": ["satellite dish", "satellite"], "match": "any"},
        "rationale": "The roof cannot be replaced around a mounted dish; it must be detached and reset.",
        "evidence_hints": ["Roof photos showing satellite dish location"],
        "aliases": ["satellite"],
        "evidence_components": ["satellite dish", "satellite"],
        "default_quantity": "1",
        "quantity_source": "1 EA per dish",
    },
    {
        "line_item_code": "GTRDR",
        "name": "Gutter Detach & Reset",
        "category": "detach-reset",
        "priority": "medium",
        "citation_id": "R905.2.8.5",
        "trigger": {"required_components": ["gutter", "gutters"], "match": "any"},
        "rationale": "Gutters must come off so drip edge can be installed behind them.",
        "evidence_hints": ["Eave photos showing gutter installation"],
        "aliases": ["gutter detach", "gutter d&r", "detach & reset gutter", "detach and reset gutter"],
        "quantity_rule": {"features": {"gutter": "1", "eave": "1"}},
        "quantity_source": "Gutter LF from photos or measurements",
    },

    # Medium: ventilation
    {
        "line_item_code": "RFGRIDGE",
        "name": "Ridge Vent",
        "category": "ventilation",
        "priority": "medium",
        "citation_id": "R806.1",
        "trigger": {"required_components": ["ridge vent"]},
        "rationale": "Existing ridge vent must be replaced to keep the required attic ventilation.",
        "evidence_hints": ["Ridge line photos", "Attic photos showing ventilation"],
        "equivalent_codes": ["RFGVENTA"],
        "evidence_components": ["ridge vent"],
        "quantity_rule": {"features": {"ridge": "1"}},
        "quantity_source": "Ridge LF from the measurement report",
    },
    {
        "line_item_code": "RFGPJSPL",
        "name": "Split Boot",
        "category": "flashing",
        "priority": "medium",
        "trigger": {"required_components": ["electrical mast", "mast"], "match": "any"},
        "rationale": "An electrical mast cannot be removed and reset; it needs a split boot.",
        "evidence_hints": ["Electrical mast penetration photos"],
        "aliases": ["pipe jack/boot - split", "split pipe jack"],
        "equivalent_codes": ["RFGFLPJSB"],
        "evidence_components": ["split boot"],
        "default_quantity": "1",
        "quantity_source": "1 EA per electrical mast",
    },
]
