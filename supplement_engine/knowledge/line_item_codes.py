"""Roofing and gutter line-item codes used by carrier estimating software.

Reference prices are regional averages and advisory only; codes without a
price are still valid catalogue entries.
"""
from typing import Any, Dict, List

LINE_ITEM_CODES: List[Dict[str, Any]] = [
    # Tear-off
    {"code": "RFG250", "description": "Remove Composition shingles - 1 layer", "unit": "SQ", "category": "roofing"},
    {"code": "RFG260", "description": "Remove Composition shingles - 2 layers", "unit": "SQ", "category": "roofing"},
    {"code": "RFG270", "description": "Remove Composition shingles - 3 layers", "unit": "SQ", "category": "roofing"},

    # Shingles
    {"code": "RFG300", "description": "Composition shingles - 3-tab 25yr", "unit": "SQ", "category": "roofing"},
    {"code": "RFG310", "description": "Composition shingles - Laminated/Architectural 30yr", "unit": "SQ", "category": "roofing"},
    {"code": "RFG320", "description": "Composition shingles - Laminated/Architectural 40yr", "unit": "SQ", "category": "roofing"},
    {"code": "RFG330", "description": "Composition shingles - Laminated/Architectural 50yr", "unit": "SQ", "category": "roofing"},
    {"code": "RFGMOD", "description": "Modified bitumen roofing", "unit": "SQ", "category": "roofing"},

    # Underlayment
    {"code": "RFG240", "description": "Roofing felt - 15 lb", "unit": "SQ", "category": "roofing"},
    {"code": "RFG241", "description": "Roofing felt - 30 lb", "unit": "SQ", "category": "roofing"},
    {"code": "RFGSYN", "description": "Synthetic underlayment", "unit": "SQ", "category": "roofing"},
    {"code": "RFGIWS", "description": "Ice & water shield membrane", "unit": "SQ", "category": "roofing",
     "code_citation_ids": ["R905.2.7"],
     "reference_price": "2.85"},

    # Edges and starter
    {"code": "RFGDRIP", "description": "Drip edge - aluminum", "unit": "LF", "category": "roofing",
     "reference_price": "3.50"},
    {"code": "RFGDRIPG", "description": "Drip edge - galvanized", "unit": "LF", "category": "roofing"},
    {"code": "RFGSTRT", "description": "Asphalt starter - universal", "unit": "LF", "category": "roofing",
     "reference_price": "4.25"},
    {"code": "RFGSTRT3", "description": "Cut laminated shingle for starter", "unit": "LF", "category": "roofing"},

    # Hip and ridge
    {"code": "RFGRIDGC", "description": "Ridge cap - 3-tab cut", "unit": "LF", "category": "roofing"},
    {"code": "RFGRIDGCS", "description": "Ridge cap - Standard profile laminated", "unit": "LF", "category": "roofing",
     "reference_price": "8.75"},
    {"code": "RFGRIDGHP", "description": "Ridge cap - High profile laminated", "unit": "LF", "category": "roofing"},

    # Flashing
    {"code": "RFGSTEP", "description": "Step flashing - aluminum", "unit": "LF", "category": "roofing",
     "reference_price": "12.50"},
    {"code": "RFGLFL", "description": "L-flashing - galvanized", "unit": "LF", "category": "roofing"},
    {"code": "RFGCHMFL", "description": "Chimney flashing - average", "unit": "EA", "category": "roofing"},
    {"code": "RFGVLYMT", "description": "Valley metal - W style", "unit": "LF", "category": "roofing"},
    {"code": "RFGCNTFL", "description": "Counter flashing - aluminum", "unit": "LF", "category": "roofing"},
    {"code": "RFGCRKT", "description": "Cricket/saddle - metal", "unit": "EA", "category": "roofing",
     "reference_price": "175.00"},

    # Penetrations
    {"code": "RFGPJACK", "description": "Pipe jack/boot - standard", "unit": "EA", "category": "roofing"},
    {"code": "RFGPJSPL", "description": "Pipe jack/boot - split", "unit": "EA", "category": "roofing"},

    # Ventilation
    {"code": "RFGVENT", "description": "Roof vent - turtle/box type", "unit": "EA", "category": "roofing"},
    {"code": "RFGVNTRB", "description": "Roof vent - turbine", "unit": "EA", "category": "roofing"},
    {"code": "RFGRIDGE", "description": "Ridge vent - shingle over", "unit": "LF", "category": "roofing"},
    {"code": "RFGPWRV", "description": "Power vent - roof mounted", "unit": "EA", "category": "roofing"},

    # Decking
    {"code": "RFGDECK", "description": "Plywood decking - 1/2\"", "unit": "SF", "category": "roofing",
     "reference_price": "2.25"},
    {"code": "RFGDECK58", "description": "Plywood decking - 5/8\"", "unit": "SF", "category": "roofing"},
    {"code": "RFGOSB", "description": "OSB decking - 7/16\"", "unit": "SF", "category": "roofing"},

    # Steep, height and labor
    {"code": "RFGSTEEP", "description": "Additional charge for steep roof - 7/12 to 9/12", "unit": "SQ",
     "category": "roofing", "reference_price": "35.00"},
    {"code": "RFGSTEEP2", "description": "Additional charge for steep roof - 10/12 to 12/12", "unit": "SQ",
     "category": "roofing"},
    {"code": "RFGHIGH", "description": "Additional charge for 2-story", "unit": "SQ", "category": "roofing",
     "reference_price": "25.00"},
    {"code": "RFGLABR", "description": "Roofer - per hour", "unit": "HR", "category": "roofing"},
    {"code": "RFGSUPR", "description": "Residential Supervision/Project Management - per hour", "unit": "HR",
     "category": "roofing", "reference_price": "45.00"},
    {"code": "RFGSAFTY", "description": "Fall protection/harness - per day", "unit": "DA", "category": "roofing"},

    # Site
    {"code": "RFGDUMP", "description": "Debris removal - per load", "unit": "EA", "category": "roofing"},
    {"code": "RFGTARP", "description": "Tarp - all purpose poly - per sq", "unit": "SQ", "category": "roofing"},
    {"code": "RFGSAT", "description": "Satellite dish - detach & reset", "unit": "EA", "category": "roofing"},

    # Gutters
    {"code": "GTRSEAM", "description": "Gutter - seamless aluminum", "unit": "LF", "category": "gutters"},
    {"code": "GTRDR", "description": "Gutter detach & reset", "unit": "LF", "category": "gutters"},
    {"code": "GTRSCR", "description": "Gutter screens - detach & reset", "unit": "LF", "category": "gutters"},
]
