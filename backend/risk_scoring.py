"""
Risk scoring shared by the AI and keyword paths.

Only malicious clauses contribute; the total is capped at 100 and the risk
level is always derived from the total, never taken from an external source.
"""
from __future__ import annotations

import logging
from typing import Iterable, Tuple

from models import FlaggedClause, RiskLevel, Severity

logger = logging.getLogger(__name__)

SEVERITY_POINTS = {
    Severity.HIGH: 30,
    Severity.MEDIUM: 15,
    Severity.LOW: 5,
}
MAX_SCORE = 100
# Declared vs recomputed score difference tolerated without a warning
SCORE_TOLERANCE = 5


def risk_level_for(score: int) -> RiskLevel:
    if score < 0 or score > MAX_SCORE:
        raise ValueError(f"risk score out of range: {score}")
    if score == 0:
        return RiskLevel.LOW
    if score < 30:
        return RiskLevel.MODERATE
    if score < 60:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def score(flagged_clauses: Iterable[FlaggedClause]) -> Tuple[int, RiskLevel]:
    """Return (overall_risk_score, risk_level) for a set of flagged clauses."""
    total = sum(
        SEVERITY_POINTS[fc.clause.severity]
        for fc in flagged_clauses
        if fc.clause.is_malicious
    )
    total = min(MAX_SCORE, total)
    return total, risk_level_for(total)


def cross_check(
    declared_score: float,
    flagged_clauses: Iterable[FlaggedClause],
    tolerance: int = SCORE_TOLERANCE,
) -> Tuple[int, RiskLevel]:
    """
    Recompute the score for clauses an external source already scored.

    The recomputed value is always returned; a declared score further than
    tolerance away is logged so inconsistent model output is visible.
    """
    total, level = score(flagged_clauses)
    if abs(declared_score - total) > tolerance:
        logger.warning(
            "[scoring] declared score=%s disagrees with recomputed=%d; using recomputed",
            declared_score,
            total,
        )
    return total, level
