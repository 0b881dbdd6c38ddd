"""Add backend to path so tests can import flat modules ('from models import ...') from the project root."""
import json
import os
import sys

import pytest

_backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)


LEASE_TEXT = (
    "RESIDENTIAL TENANCY AGREEMENT\n"
    "This agreement is made between Landlord: John Smith and Tenant: Jane Doe.\n"
    "The rental unit located at 123 Main Street, Vancouver, BC.\n"
    "The tenancy starts on January 1, 2025 and ends on December 31, 2025.\n"
    "Monthly rent: $2,000. Security deposit: $1,000. Pet deposit: $500.\n"
    "The tenant must give one month's written notice to end the tenancy.\n"
)


def ai_payload(**overrides) -> dict:
    """A well-formed AI response: two high violations and one standard clause."""
    payload = {
        "keyDetails": {
            "monthlyRent": "$2,000",
            "securityDeposit": "$1,000",
            "petDeposit": None,
            "leaseStartDate": "January 1, 2025",
            "leaseEndDate": None,
            "propertyAddress": None,
            "landlordName": "John Smith",
            "tenantName": "",
            "noticePeriod": None,
        },
        "flaggedClauses": [
            {
                "clauseText": "The landlord may enter the unit at any time.",
                "category": "privacy",
                "severity": "high",
                "isMalicious": True,
                "violation": "Unrestricted entry",
                "legalReference": "BC RTA Section 29",
                "explanation": "Landlord must give 24 hours notice.",
                "recommendation": "Ask for 24 hours written notice.",
            },
            {
                "clauseText": "Tenant waives all rights under the Act.",
                "category": "other",
                "severity": "high",
                "isMalicious": True,
                "violation": "Waiver of rights",
                "legalReference": "BC RTA Section 5",
                "explanation": "Rights cannot be waived.",
                "recommendation": "Strike this clause.",
            },
            {
                "clauseText": "Tenant pays hydro.",
                "category": "utilities",
                "severity": "low",
                "isMalicious": False,
                "violation": "Utility allocation",
                "legalReference": "",
                "explanation": "Standard utilities clause.",
                "recommendation": "Confirm which utilities are included.",
            },
        ],
        "overallRiskScore": 60,
        "riskLevel": "critical",
        "summary": "The contract contains two serious violations.",
        "recommendations": ["Do not sign until entry terms are fixed.", "Strike the waiver clause."],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def lease_text() -> str:
    return LEASE_TEXT


@pytest.fixture
def ai_raw() -> str:
    return json.dumps(ai_payload())
