"""
Parse and validate raw AI output into the canonical AnalysisResult.

The model's text is untrusted: it is fence-stripped, parsed, validated against
AIAnalysisPayload, and only then mapped. The declared score is recomputed.
"""
from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from errors import TransientAIError
from models import (
    KEY_DETAIL_CATEGORIES,
    MAX_MATCHED_TEXT_CHARS,
    AIAnalysisPayload,
    AIFlaggedClause,
    AIKeyDetails,
    AnalysisMethod,
    AnalysisResult,
    ClausePattern,
    FlaggedClause,
    KeyDetail,
)
from risk_scoring import cross_check

logger = logging.getLogger(__name__)

AI_CONFIDENCE = 95

# AI payload field -> key detail label, in display order
AI_KEY_DETAIL_FIELDS = {
    "propertyAddress": "Property Address",
    "landlordName": "Landlord Name",
    "tenantName": "Tenant Name",
    "monthlyRent": "Monthly Rent",
    "securityDeposit": "Security Deposit",
    "petDeposit": "Pet Deposit",
    "leaseStartDate": "Lease Start Date",
    "leaseEndDate": "Lease End Date",
    "noticePeriod": "Notice Period",
}
_MISSING_VALUES = {"null", "none", "n/a", "na", "not found", "not specified", "unknown"}


def strip_code_fences(raw: str) -> str:
    """Remove a leading ``` / ```json line and a trailing ``` if present."""
    raw = (raw or "").strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```\w*\s*", "", raw)
        raw = re.sub(r"\s*```\s*$", "", raw)
    return raw.strip()


def _key_details(details: AIKeyDetails) -> List[KeyDetail]:
    out = []
    for field, label in AI_KEY_DETAIL_FIELDS.items():
        value = getattr(details, field)
        if value is None:
            continue
        value = " ".join(value.split())
        if not value or value.lower() in _MISSING_VALUES:
            continue
        out.append(KeyDetail(label=label, value=value, category=KEY_DETAIL_CATEGORIES[label]))
    return out


def _flagged_clauses(items: List[AIFlaggedClause], source_text: Optional[str]) -> List[FlaggedClause]:
    out = []
    seen = set()
    for item in items:
        clause_text = " ".join(item.clauseText.split())
        key = (item.category, item.violation.strip().lower(), clause_text.lower())
        if key in seen:
            continue
        seen.add(key)

        pattern = ClausePattern(
            id=f"ai-{len(out)}",
            category=item.category,
            name=item.violation.strip(),
            description=item.explanation.strip(),
            explanation=item.explanation.strip(),
            is_malicious=item.isMalicious,
            severity=item.severity,
            legal_reference=(item.legalReference or "").strip() or None,
        )
        position = 0
        if source_text and item.clauseText:
            position = max(0, source_text.find(item.clauseText.strip()))
        out.append(FlaggedClause(
            clause=pattern,
            matched_text=clause_text[:MAX_MATCHED_TEXT_CHARS],
            position=position,
            ai_insight=(item.recommendation or "").strip() or None,
        ))
    return out


def parse_ai_response(raw: str, source_text: Optional[str] = None) -> AnalysisResult:
    """
    Turn the model's raw text into an AnalysisResult.

    Raises TransientAIError with code PARSE_ERROR for text that is not JSON and
    VALIDATION_ERROR for JSON that does not match the expected schema.
    source_text, when given, is used to locate each clause's position.
    """
    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise TransientAIError(f"Failed to parse AI response as JSON: {e}", code="PARSE_ERROR") from e

    if not isinstance(data, dict):
        raise TransientAIError("AI response is not a JSON object", code="VALIDATION_ERROR")
    try:
        payload = AIAnalysisPayload.model_validate(data)
    except ValidationError as e:
        raise TransientAIError(
            f"Invalid response structure from AI ({e.error_count()} errors)", code="VALIDATION_ERROR"
        ) from e

    flagged = _flagged_clauses(payload.flaggedClauses, source_text)
    total, level = cross_check(payload.overallRiskScore, flagged)
    if level != payload.riskLevel:
        logger.info("[ai] declared risk level=%s replaced by %s", payload.riskLevel.value, level.value)

    return AnalysisResult(
        summary=payload.summary.strip(),
        key_details=_key_details(payload.keyDetails),
        flagged_clauses=flagged,
        overall_risk_score=total,
        recommendations=[r.strip() for r in payload.recommendations if r and r.strip()],
        analysis_method=AnalysisMethod.AI,
        confidence=AI_CONFIDENCE,
    )
