import pytest


@pytest.fixture
def raw_scope() -> dict:
    """Extracted carrier scope: 20 squares, 8/12 pitch, two stories, no accessories."""
    return {
        "claimNumber": "CLM-2024-0415",
        "policyNumber": "HO-5521",
        "carrier": "Lone Star Mutual",
        "dateOfLoss": "2024-04-02",
        "insuredName": "Jordan Reyes",
        "propertyAddress": "418 Pecan Ridge Dr, Plano, TX",
        "lineItems": [
            {
                "lineNumber": 1,
                "xactimateCode": "RFGSHGL",
                "description": "Laminated - comp. shingle rfg. - w/out felt",
                "quantity": "20",
                "unit": "SQ",
                "unitPrice": "250.00",
                "rcv": "$5,000.00",
                "depreciation": "1000",
                "acv": "4000",
            },
            {
                "lineNumber": 2,
                "code": "RFGFELT",
                "description": "Roofing felt - 15 lb",
                "quantity": 20,
                "unit": "SQ",
                "unitPrice": 70,
                "rcv": 1400,
            },
        ],
        "totals": {"rcv": "6,400.00", "deductible": "1000"},
        "roofMetrics": {"totalSquares": 20, "pitch": "8/12", "stories": 2},
    }


@pytest.fixture
def measurement_report() -> dict:
    return {"eaves": 120, "rakes": 80, "ridges": 40, "hips": 20, "valleys": 30, "totalSquares": 20}
