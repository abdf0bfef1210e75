"""Building-code and safety citations used to justify supplement line items.

``citation_template`` placeholders are filled per line item when the
supplement document is rendered. Supported names: ``description``,
``line_item_code``, ``quantity``, ``unit``, ``claim_number``, ``carrier``,
``insured_name``, ``property_address``, ``pitch``, ``stories``.
"""
from typing import Any, Dict, List

OSHA_FALL_PROTECTION = "OSHA 1926.501(b)(13)"

CODE_CITATIONS: List[Dict[str, Any]] = [
    {
        "id": "R905.2.8.5",
        "title": "Drip Edge",
        "section": "Asphalt Shingles - Drip Edge",
        "requirement_summary": (
            "Drip edge is mandatory at all eaves and rake edges to protect the roof deck and fascia "
            "from water damage."
        ),
        "full_text": (
            "A drip edge shall be provided at eaves and gables of shingle roofs. Adjacent pieces of drip "
            "edge shall be overlapped a minimum of 2 inches (51 mm). Drip edges shall extend a minimum of "
            "0.25 inch (6.4 mm) below the roof sheathing and extend up the roof deck a minimum of 2 inches "
            "(51 mm). Drip edges shall be mechanically fastened to the roof deck at a maximum of 12 inches "
            "(305 mm) o.c. with fasteners as specified by the manufacturer."
        ),
        "applicable_line_item_codes": ["RFGDRIP", "RFGDRIPG"],
        "citation_template": (
            "Per IRC Section R905.2.8.5, drip edge \"shall be provided\" at all eaves and gables of shingle "
            "roofs. It must extend at least 0.25\" below the sheathing, extend at least 2\" up the deck and be "
            "fastened at 12\" on center. We request {quantity} {unit} of {description} ({line_item_code}) "
            "for the property at {property_address}, measured as total eave and rake length."
        ),
    },
    {
        "id": "R904.1",
        "title": "Roof Covering Materials",
        "section": "General - Roof Covering Materials",
        "requirement_summary": (
            "All roofing must be installed per manufacturer specifications, which universally require "
            "starter course shingles."
        ),
        "full_text": (
            "Roof coverings shall be applied in accordance with the applicable provisions of this section "
            "and the manufacturer's installation instructions."
        ),
        "applicable_line_item_codes": ["RFGSTRT", "RFGSTRT3"],
        "citation_template": (
            "Per IRC Section R904.1, roof coverings must be installed according to the manufacturer's "
            "instructions, and every major shingle manufacturer requires a starter course at eaves and "
            "rakes. Starter is not part of the shingle waste allowance and must be scoped as its own line: "
            "{quantity} {unit} of {description} ({line_item_code})."
        ),
    },
    {
        "id": "R905.2.8.2",
        "title": "Ice Barrier",
        "section": "Asphalt Shingles - Ice Barrier",
        "requirement_summary": "Ice & water shield is required at eaves in cold climates and in all valleys.",
        "full_text": (
            "In areas where there has been a history of ice forming along the eaves causing a backup of "
            "water, an ice barrier that consists of at least two layers of underlayment cemented together or "
            "of a self-adhering polymer modified bitumen sheet shall be used in lieu of normal underlayment "
            "and extend from the lowest edges of all roof surfaces to a point at least 24 inches (610 mm) "
            "inside the exterior wall line of the building."
        ),
        "applicable_line_item_codes": ["RFGIWS"],
        "citation_template": (
            "Per IRC Section R905.2.8.2, an ice barrier must run from the lowest roof edge to at least 24\" "
            "inside the exterior wall line, and manufacturers require it in all valleys. We request "
            "{quantity} {unit} of {description} ({line_item_code}) covering eaves and valleys."
        ),
    },
    {
        "id": "R905.2.8.3",
        "title": "Sidewall Flashing",
        "section": "Asphalt Shingles - Flashing",
        "requirement_summary": "Step flashing is required at all roof-to-wall intersections.",
        "full_text": (
            "Flashing shall be installed at wall and roof intersections, at gutters, wherever there is a "
            "change in roof slope or direction and around roof openings. Where flashing is of metal, the "
            "metal shall be corrosion resistant with a minimum thickness of 0.019 inch (0.483 mm)."
        ),
        "applicable_line_item_codes": ["RFGSTEP", "RFGLFL", "RFGCNTFL", "RFGCHMFL"],
        "citation_template": (
            "Per IRC Section R905.2.8.3, flashing is required at every wall and roof intersection. Step "
            "flashing is woven into each shingle course and cannot be reused once the roof is torn off. "
            "We request {quantity} {unit} of {description} ({line_item_code})."
        ),
    },
    {
        "id": "R903.2.2",
        "title": "Cricket and Saddle",
        "section": "Flashings - Cricket and Saddle",
        "requirement_summary": "Crickets are required for chimneys and penetrations over 30\" wide.",
        "full_text": (
            "A cricket or saddle shall be installed on the ridge side of any chimney or penetration greater "
            "than 30 inches (762 mm) wide as measured perpendicular to the slope."
        ),
        "applicable_line_item_codes": ["RFGCRKT"],
        "citation_template": (
            "Per IRC Section R903.2.2, a cricket or saddle is required on the ridge side of any chimney or "
            "penetration wider than 30\" measured perpendicular to the slope. Photos document the chimney "
            "at {property_address}; we request {quantity} {unit} of {description} ({line_item_code})."
        ),
    },
    {
        "id": "R905.2.1",
        "title": "Roof Deck",
        "section": "Asphalt Shingles - Deck Requirements",
        "requirement_summary": "Shingles must be installed on solid, undamaged decking.",
        "full_text": "Asphalt shingles shall be fastened to solidly sheathed decks.",
        "applicable_line_item_codes": ["RFGDECK", "RFGDECK58", "RFGOSB"],
        "citation_template": (
            "Per IRC Section R905.2.1, asphalt shingles must be fastened to solidly sheathed decks. "
            "Delaminated, rotted or water-damaged sheathing documented in the attic photos cannot hold "
            "fasteners and must be replaced: {quantity} {unit} of {description} ({line_item_code})."
        ),
    },
    {
        "id": "R905.2.7",
        "title": "Underlayment",
        "section": "Asphalt Shingles - Underlayment",
        "requirement_summary": "Proper underlayment meeting ASTM standards is required under all asphalt shingles.",
        "full_text": (
            "Unless otherwise noted, required underlayment shall conform to ASTM D226, Type I, ASTM D4869, "
            "Type I, or ASTM D6757. Self-adhering polymer modified bitumen sheet shall comply with ASTM D1970."
        ),
        "applicable_line_item_codes": ["RFG240", "RFG241", "RFGSYN"],
        "citation_template": (
            "Per IRC Section R905.2.7, underlayment meeting ASTM D226, D4869 or D6757 is required under "
            "asphalt shingles as the secondary water barrier. We request {quantity} {unit} of "
            "{description} ({line_item_code})."
        ),
    },
    {
        "id": "R905.2.8.1",
        "title": "Valley Flashing",
        "section": "Asphalt Shingles - Valley Flashing",
        "requirement_summary": "Open valleys require minimum 24\" wide metal flashing.",
        "full_text": (
            "Valley flashing shall be not less than 24 inches (610 mm) wide for open valleys. Valley "
            "flashing of metal shall be at least 0.019 inch (0.483 mm) thick."
        ),
        "applicable_line_item_codes": ["RFGVLYMT"],
        "citation_template": (
            "Per IRC Section R905.2.8.1, open valleys require metal flashing at least 24\" wide and 0.019\" "
            "thick. The existing W-profile valley metal must be replaced to keep like kind and quality: "
            "{quantity} {unit} of {description} ({line_item_code})."
        ),
    },
    {
        "id": "R806.1",
        "title": "Ventilation Required",
        "section": "Roof Ventilation",
        "requirement_summary": "Attic ventilation is required by code for proper roof system performance.",
        "full_text": (
            "Enclosed attics and enclosed rafter spaces formed where ceilings are applied directly to the "
            "underside of roof rafters shall have cross ventilation for each separate space by ventilating "
            "openings protected against the entrance of rain or snow."
        ),
        "applicable_line_item_codes": ["RFGVENT", "RFGVNTRB", "RFGRIDGE", "RFGPWRV"],
        "citation_template": (
            "Per IRC Section R806.1, enclosed attics require cross ventilation (1 sq ft of net free area per "
            "150 sq ft of attic floor). Existing exhaust ventilation must be replaced with the roof: "
            "{quantity} {unit} of {description} ({line_item_code})."
        ),
    },
    {
        "id": OSHA_FALL_PROTECTION,
        "title": "Residential Construction Fall Protection",
        "section": "Safety - Fall Protection",
        "requirement_summary": (
            "Fall protection is required for roofing work 6 feet or more above lower levels, with added "
            "measures for steep and multi-story roofs."
        ),
        "full_text": (
            "Each employee engaged in residential construction activities 6 feet or more above lower levels "
            "shall be protected by guardrail systems, safety net systems, or personal fall arrest systems."
        ),
        "applicable_line_item_codes": ["RFGSTEEP", "RFGSTEEP2", "RFGHIGH", "RFGSUPR", "RFGSAFTY"],
        "citation_template": (
            "Per OSHA 1926.501(b)(13), roofing work 6 feet or more above lower levels requires fall "
            "protection. The roof is documented at {pitch} pitch on a {stories}-story structure, which "
            "requires additional safety labor and supervision. We request {quantity} {unit} of "
            "{description} ({line_item_code})."
        ),
    },
]
