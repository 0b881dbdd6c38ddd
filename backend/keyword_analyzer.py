"""
Deterministic, network-free contract analysis.

Regex key-detail extraction + keyword matching against the clause catalog +
deposit-to-rent ratio and late-fee cap rules. Used whenever the AI path is unavailable, and
never raises for any text.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from clause_catalog import CLAUSE_PATTERNS, MAX_DEPOSIT_TO_RENT_RATIO, get_pattern
from models import (
    KEY_DETAIL_CATEGORIES,
    MAX_MATCHED_TEXT_CHARS,
    AnalysisMethod,
    AnalysisResult,
    ClauseCategory,
    ClausePattern,
    FlaggedClause,
    KeyDetail,
)
from risk_scoring import score

logger = logging.getLogger(__name__)

KEYWORD_CONFIDENCE = 60
# Characters of context kept before a match in matched_text
EXCERPT_LEAD_CHARS = 60
# Absorbs rounding in extracted amounts (e.g. $1,000.01 on $2,000 rent)
RATIO_TOLERANCE = 0.005

RENT = "Monthly Rent"
SECURITY_DEPOSIT = "Security Deposit"
PET_DEPOSIT = "Pet Deposit"
START_DATE = "Lease Start Date"
END_DATE = "Lease End Date"
PROPERTY_ADDRESS = "Property Address"
LANDLORD = "Landlord Name"
TENANT = "Tenant Name"
NOTICE_PERIOD = "Notice Period"

# Numeric rules: pattern id -> key detail holding the deposit amount
DEPOSIT_RATIO_RULES = {
    "excessive-security-deposit": SECURITY_DEPOSIT,
    "excessive-pet-deposit": PET_DEPOSIT,
}

CATEGORY_RECOMMENDATIONS = {
    ClauseCategory.SECURITY_DEPOSIT: (
        "Ask for the security deposit to be no more than half a month's rent and fully refundable "
        "(RTA Section 19), and insist on move-in and move-out condition inspections."
    ),
    ClauseCategory.RENT: (
        "Review the rent terms: late fees are capped at $25, rent can only rise once every 12 months "
        "with three months' written notice, and you choose how to pay."
    ),
    ClauseCategory.TERMINATION: (
        "Do not accept eviction terms that skip proper notice; a landlord must use the approved notice "
        "forms and you can dispute any notice with the Residential Tenancy Branch."
    ),
    ClauseCategory.MAINTENANCE: (
        "Have major and structural repairs made the landlord's responsibility in writing (RTA Section 32)."
    ),
    ClauseCategory.PRIVACY: (
        "Require 24 hours' written notice with a stated reason before any non-emergency entry (RTA Section 29)."
    ),
    ClauseCategory.PETS: (
        "Confirm the pet deposit is refundable and no more than half a month's rent."
    ),
    ClauseCategory.SUBLETTING: (
        "Check that the landlord cannot unreasonably refuse a sublet or assignment."
    ),
    ClauseCategory.UTILITIES: (
        "Get a written list of which utilities are included in the rent and how the rest are billed."
    ),
    ClauseCategory.OTHER: (
        "Strike any term that waives your rights under the Residential Tenancy Act or limits reasonable "
        "use of your home, such as having guests; such terms are void."
    ),
}
NO_VIOLATION_RECOMMENDATION = (
    "No clear violations were found. Read the full agreement carefully before signing and ask the "
    "landlord to clarify anything you do not understand."
)
ESCALATION_RECOMMENDATION = (
    "If the landlord will not change these terms, contact the Residential Tenancy Branch or a tenant "
    "advocacy service before signing."
)

# ---- Key detail extraction ----

_AMOUNT = r"\$\s?(\d{1,3}(?:,\d{3})+|\d+)(\.\d{1,2})?"
# Label-to-amount gap; never crosses a sentence or clause break
_GAP = r"([^$\n.;]{0,40}?)"
_RE_RENT_EXPLICIT = re.compile(r"\b(?:monthly\s+rent|rent\s+amount|rent\s*:)" + _GAP + _AMOUNT, re.I)
_RE_RENT_LABELLED = re.compile(r"\brent\b" + _GAP + _AMOUNT, re.I)
_RE_RENT_PER_MONTH = re.compile(_AMOUNT + r"\s*(?:per\s+month|/\s*month|a\s+month|monthly)", re.I)
_RE_DEPOSIT = re.compile(r"\bdeposit\b" + _GAP + _AMOUNT, re.I)
_RE_PET_DEPOSIT = re.compile(r"\bpet\s+(?:damage\s+)?deposit\b" + _GAP + _AMOUNT, re.I)
_RE_ANY_AMOUNT = re.compile(_AMOUNT)

# Words that mark an unlabelled monthly amount as something other than rent
_RE_OTHER_CHARGE = re.compile(
    r"\b(?:pet|parking|storage|locker|key|fob|fees?|charges?|utilit\w*|hydro|internet|cable|deposit)\b",
    re.I,
)
_RE_SENTENCE_BREAK = re.compile(r"\n|[.;!?](?=\s|$)")

MAX_LATE_FEE = 25.0
_RE_DAILY = re.compile(r"\b(?:per|a|each)\s+day\b|\bdaily\b|%", re.I)

_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?|"
    r"Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_DATE = (
    r"(\d{4}-\d{2}-\d{2}|" + _MONTHS + r"\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}|"
    r"\d{1,2}/\d{1,2}/\d{2,4})"
)
_RE_START_DATE = re.compile(
    r"\b(?:start(?:s|ing)?|commenc\w*|begin(?:s|ning)?)\b[^\n]{0,40}?" + _DATE, re.I
)
_RE_END_DATE = re.compile(
    r"\b(?:end(?:s|ing)?|expir\w*|terminat\w*)\b[^\n]{0,40}?" + _DATE, re.I
)

_NAME = r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-z'.-]+){1,3})"
_NAME_STOPWORDS = {"The", "This", "Said", "Landlord", "Tenant", "Tenants", "Agreement", "Residential"}

_RE_NOTICE = re.compile(
    r"\b(\d{1,3}|one|two|three|four|six)\s*(?:\(\d{1,3}\)\s*)?(days?|months?)(?:'s|')?\s+"
    r"(?:prior\s+)?(?:written\s+)?notice",
    re.I,
)
_RE_ADDRESS = re.compile(
    r"(?:located\s+at|rental\s+unit\s+at|premises\s+at|address\s*:)\s*"
    r"(\d{1,6}\s+[^\n;]{3,80}?)(?=\.\s|\.$|[;\n(]|$)",
    re.I,
)


def _amount_value(whole: str, cents: Optional[str]) -> float:
    return float(whole.replace(",", "") + (cents or ""))


def _format_amount(value: float) -> str:
    return f"${value:,.2f}"


def _first_amount(regex: re.Pattern, text: str, skip_words: Tuple[str, ...] = ()) -> Optional[Tuple[float, int]]:
    """First (amount, offset) whose gap text between label and amount avoids skip_words."""
    for m in regex.finditer(text):
        gap = (m.group(1) or "").lower()
        if any(w in gap for w in skip_words):
            continue
        return _amount_value(m.group(2), m.group(3)), m.start()
    return None


def _sentence_bounds(text: str, pos: int) -> Tuple[int, int]:
    """Start and end offsets of the sentence or clause containing pos."""
    start = 0
    for m in _RE_SENTENCE_BREAK.finditer(text, 0, pos):
        start = m.end()
    m = _RE_SENTENCE_BREAK.search(text, pos)
    return start, (m.start() if m else len(text))


def _find_rent(text: str) -> Optional[Tuple[float, int]]:
    """Explicit rent label first, then a bare "rent" mention, then an unlabelled monthly amount."""
    skip = ("deposit", "fee", "increase", "parking")
    found = _first_amount(_RE_RENT_EXPLICIT, text, skip_words=skip)
    if found:
        return found
    found = _first_amount(_RE_RENT_LABELLED, text, skip_words=skip)
    if found:
        return found
    for m in _RE_RENT_PER_MONTH.finditer(text):
        start, _ = _sentence_bounds(text, m.start())
        if _RE_OTHER_CHARGE.search(text[start:m.start()]):
            continue
        return _amount_value(m.group(1), m.group(2)), m.start()
    return None


def _find_security_deposit(text: str) -> Optional[Tuple[float, int]]:
    for m in _RE_DEPOSIT.finditer(text):
        before = text[max(0, m.start() - 12):m.start()]
        if re.search(r"\b(?:pet|key|fob|parking|remote)\b", before, re.I) or "pet" in m.group(1).lower():
            continue
        return _amount_value(m.group(2), m.group(3)), m.start()
    return None


def late_fee_amount(text: str, position: int) -> Optional[float]:
    """Dollar amount nearest the late-fee wording at position, within its sentence."""
    start, end = _sentence_bounds(text, position)
    offset = position - start
    nearest = None
    for m in _RE_ANY_AMOUNT.finditer(text[start:end]):
        distance = abs(m.start() - offset)
        if nearest is None or distance < nearest[0]:
            nearest = (distance, _amount_value(m.group(1), m.group(2)))
    return nearest[1] if nearest else None


def _find_name(text: str, role: str) -> Optional[str]:
    patterns = (
        re.compile(r"\b(?i:" + role + r")\b\s*(?:(?i:name))?\s*[:,]\s*" + _NAME),
        re.compile(_NAME + r"\s*\(\s*(?:(?i:the)\s+)?[\"“]?(?i:" + role + r")"),
    )
    for regex in patterns:
        for m in regex.finditer(text):
            name = m.group(1).strip().rstrip(".")
            if name.split()[0] in _NAME_STOPWORDS:
                continue
            return name
    return None


def _find_notice_period(text: str) -> Optional[str]:
    m = _RE_NOTICE.search(text)
    if not m:
        return None
    return f"{m.group(1).lower()} {m.group(2).lower()}"


def _amounts(text: str) -> Dict[str, Tuple[float, int]]:
    found = {}
    rent = _find_rent(text)
    if rent:
        found[RENT] = rent
    deposit = _find_security_deposit(text)
    if deposit:
        found[SECURITY_DEPOSIT] = deposit
    pet = _first_amount(_RE_PET_DEPOSIT, text)
    if pet:
        found[PET_DEPOSIT] = pet
    return found


def extract_key_details(text: str) -> List[KeyDetail]:
    """
    Pull rent, deposits, dates, parties, address and notice period from text.

    Every label is always returned, in display order; value is None when the
    heuristics found nothing.
    """
    text = text or ""
    amounts = _amounts(text)
    values: Dict[str, Optional[str]] = {label: None for label in KEY_DETAIL_CATEGORIES}
    for label, (value, _) in amounts.items():
        values[label] = _format_amount(value)

    m = _RE_ADDRESS.search(text)
    if m:
        values[PROPERTY_ADDRESS] = " ".join(m.group(1).split()).rstrip(",")
    values[LANDLORD] = _find_name(text, "landlord")
    values[TENANT] = _find_name(text, "tenant")
    m = _RE_START_DATE.search(text)
    if m:
        values[START_DATE] = " ".join(m.group(1).split())
    m = _RE_END_DATE.search(text)
    if m:
        values[END_DATE] = " ".join(m.group(1).split())
    values[NOTICE_PERIOD] = _find_notice_period(text)

    return [
        KeyDetail(label=label, value=values[label], category=category)
        for label, category in KEY_DETAIL_CATEGORIES.items()
    ]


# ---- Keyword matching ----


def _keyword_regex(pattern: ClausePattern) -> Optional[re.Pattern]:
    """One alternation per pattern so search() returns the leftmost keyword hit."""
    alternatives = []
    for kw in pattern.keywords:
        words = [re.escape(w).replace("'", "['’]") for w in kw.split()]
        if words:
            alternatives.append(r"\s+".join(words))
    if not alternatives:
        return None
    return re.compile(r"(?<!\w)(?:" + "|".join(alternatives) + r")(?!\w)", re.I)


_KEYWORD_REGEXES = [(p, _keyword_regex(p)) for p in CLAUSE_PATTERNS]


def excerpt(text: str, position: int) -> str:
    """Whitespace-collapsed window starting shortly before position, at most 200 chars."""
    start = max(0, position - EXCERPT_LEAD_CHARS)
    window = " ".join(text[start:start + MAX_MATCHED_TEXT_CHARS * 2].split())
    return window[:MAX_MATCHED_TEXT_CHARS].strip()


def match_patterns(text: str) -> Dict[str, int]:
    """pattern id -> offset of its leftmost keyword match."""
    matches = {}
    for pattern, regex in _KEYWORD_REGEXES:
        if regex is None:
            continue
        m = regex.search(text)
        if m:
            matches[pattern.id] = m.start()
    return matches


def deposit_ratio(deposit: Optional[float], rent: Optional[float]) -> Optional[float]:
    if deposit is None or not rent or rent <= 0:
        return None
    return deposit / rent


def _apply_deposit_rules(text: str, matches: Dict[str, int]) -> Dict[str, int]:
    """
    Let the numeric deposit-to-rent ratio override keyword hits.

    Ratio within the limit suppresses the pattern; ratio above the limit flags
    it at the deposit's position. Unknown ratio leaves keyword hits alone.
    """
    amounts = _amounts(text)
    rent = amounts.get(RENT, (None, 0))[0]
    out = dict(matches)
    for pattern_id, label in DEPOSIT_RATIO_RULES.items():
        deposit, offset = amounts.get(label, (None, 0))
        ratio = deposit_ratio(deposit, rent)
        if ratio is None:
            continue
        if ratio <= MAX_DEPOSIT_TO_RENT_RATIO + RATIO_TOLERANCE:
            if pattern_id in out:
                logger.info("[fallback] suppressed %s: ratio=%.3f within limit", pattern_id, ratio)
            out.pop(pattern_id, None)
        else:
            logger.info("[fallback] flagged %s: ratio=%.3f", pattern_id, ratio)
            out[pattern_id] = min(out.get(pattern_id, offset), offset)
    return out


def _apply_late_fee_rule(text: str, matches: Dict[str, int]) -> Dict[str, int]:
    """Drop a late-fee hit whose flat amount is within the $25 cap. Daily or percentage fees always stand."""
    position = matches.get("excessive-late-fee")
    if position is None:
        return matches
    fee = late_fee_amount(text, position)
    if fee is None or fee > MAX_LATE_FEE:
        return matches
    start, end = _sentence_bounds(text, position)
    if _RE_DAILY.search(text[start:end]):
        return matches
    logger.info("[fallback] suppressed excessive-late-fee: fee=%.2f within limit", fee)
    return {pid: pos for pid, pos in matches.items() if pid != "excessive-late-fee"}


def _recommendations(flagged: List[FlaggedClause]) -> List[str]:
    categories = []
    for fc in flagged:
        if fc.clause.is_malicious and fc.clause.category not in categories:
            categories.append(fc.clause.category)
    if not categories:
        return [NO_VIOLATION_RECOMMENDATION]
    return [CATEGORY_RECOMMENDATIONS[c] for c in categories] + [ESCALATION_RECOMMENDATION]


def _summary(text: str, flagged: List[FlaggedClause], risk_level: str) -> str:
    if not text.strip():
        return "No contract text was provided, so no clauses could be checked."
    violations = sum(1 for fc in flagged if fc.clause.is_malicious)
    standard = len(flagged) - violations
    if violations:
        head = (
            f"Keyword analysis flagged {violations} potential violation{'s' if violations != 1 else ''} "
            f"of the Residential Tenancy Act; overall risk is {risk_level}."
        )
    else:
        head = "Keyword analysis found no clauses that clearly violate the Residential Tenancy Act."
    return (
        f"{head} {standard} standard clause{'s' if standard != 1 else ''} noted. "
        "Results are based on pattern matching and may miss clauses worded differently."
    )


def analyze_with_keywords(text: Optional[str]) -> AnalysisResult:
    """Build a complete AnalysisResult from text alone."""
    text = text if isinstance(text, str) else ""
    matches = _apply_late_fee_rule(text, _apply_deposit_rules(text, match_patterns(text)))

    catalog_order = {p.id: i for i, p in enumerate(CLAUSE_PATTERNS)}
    ordered = sorted(matches.items(), key=lambda kv: (kv[1], catalog_order[kv[0]]))
    flagged = [
        FlaggedClause(clause=get_pattern(pid), matched_text=excerpt(text, pos), position=pos)
        for pid, pos in ordered
    ]

    total, level = score(flagged)
    logger.info("[fallback] flagged=%d score=%d level=%s", len(flagged), total, level.value)
    return AnalysisResult(
        summary=_summary(text, flagged, level.value),
        key_details=extract_key_details(text),
        flagged_clauses=flagged,
        overall_risk_score=total,
        recommendations=_recommendations(flagged),
        analysis_method=AnalysisMethod.KEYWORD,
        confidence=KEYWORD_CONFIDENCE,
    )
