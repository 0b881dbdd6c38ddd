"""Deterministic keyword fallback: key details, pattern matching, deposit ratio rules."""
import pytest

from keyword_analyzer import (
    KEYWORD_CONFIDENCE,
    NO_VIOLATION_RECOMMENDATION,
    analyze_with_keywords,
    deposit_ratio,
    excerpt,
    extract_key_details,
    late_fee_amount,
)
from models import AnalysisMethod, RiskLevel, Severity
from risk_scoring import risk_level_for


def _details(text: str) -> dict:
    return {kd.label: kd.value for kd in extract_key_details(text)}


def _flag_ids(result) -> list:
    return [fc.clause.id for fc in result.flagged_clauses]


# ---- Key details ----

def test_extract_key_details_from_typical_lease(lease_text):
    details = _details(lease_text)
    assert details["Landlord Name"] == "John Smith"
    assert details["Tenant Name"] == "Jane Doe"
    assert details["Property Address"] == "123 Main Street, Vancouver, BC"
    assert details["Lease Start Date"] == "January 1, 2025"
    assert details["Lease End Date"] == "December 31, 2025"
    assert details["Monthly Rent"] == "$2,000.00"
    assert details["Security Deposit"] == "$1,000.00"
    assert details["Pet Deposit"] == "$500.00"
    assert details["Notice Period"] == "one month"


def test_missing_details_are_recorded_not_fabricated():
    details = extract_key_details("The tenant agrees to keep the unit clean.")
    assert len(details) == 9
    assert all(kd.value is None for kd in details)
    assert len({kd.label for kd in details}) == len(details)


def test_party_names_from_parenthetical_roles():
    text = 'This lease is between Acme Rentals (the "Landlord") and Maria Lopez (the "Tenant").'
    details = _details(text)
    assert details["Landlord Name"] == "Acme Rentals"
    assert details["Tenant Name"] == "Maria Lopez"


def test_rent_from_per_month_amount_and_iso_dates():
    text = "Tenant pays $1,850 per month. Start date: 2025-03-01. End date: 2026-02-28. 30 days' notice applies."
    details = _details(text)
    assert details["Monthly Rent"] == "$1,850.00"
    assert details["Lease Start Date"] == "2025-03-01"
    assert details["Lease End Date"] == "2026-02-28"
    assert details["Notice Period"] == "30 days"


def test_rent_label_wins_over_earlier_amounts_near_rent():
    text = "The rent includes hydro. Parking costs $100. Monthly rent: $2,000. Security deposit: $1,000."
    details = _details(text)
    assert details["Monthly Rent"] == "$2,000.00"
    assert details["Security Deposit"] == "$1,000.00"
    result = analyze_with_keywords(text)
    assert "excessive-security-deposit" not in _flag_ids(result)
    assert result.overall_risk_score == 0


def test_monthly_fee_is_not_read_as_rent():
    text = "Pet fee of $50 per month applies. Security deposit: $1,000. The tenant keeps the unit clean."
    details = _details(text)
    assert details["Monthly Rent"] is None
    assert details["Security Deposit"] == "$1,000.00"
    assert "excessive-security-deposit" not in _flag_ids(analyze_with_keywords(text))


def test_other_charges_and_deposits_mixed_with_rent():
    text = (
        "Parking is $75 per month. Key deposit: $50. Monthly rent: $1,800, due on the first. "
        "Pet fee of $30 per month. Security deposit: $900. Pet deposit: $400."
    )
    details = _details(text)
    assert details["Monthly Rent"] == "$1,800.00"
    assert details["Security Deposit"] == "$900.00"
    assert details["Pet Deposit"] == "$400.00"
    result = analyze_with_keywords(text)
    assert not {"excessive-security-deposit", "excessive-pet-deposit"} & set(_flag_ids(result))
    assert result.overall_risk_score == 0


def test_unlabelled_monthly_amount_skips_parking_and_storage():
    text = (
        "Parking: $60 per month. Storage locker $25 monthly. "
        "Tenant pays $1,600 per month for the unit. A security deposit of $800 is due."
    )
    details = _details(text)
    assert details["Monthly Rent"] == "$1,600.00"
    assert details["Security Deposit"] == "$800.00"


def test_deposit_ratio_helper():
    assert deposit_ratio(1000, 2000) == 0.5
    assert deposit_ratio(None, 2000) is None
    assert deposit_ratio(1000, None) is None
    assert deposit_ratio(1000, 0) is None


# ---- Deposit ratio boundary ----

def test_deposit_at_half_month_rent_is_not_flagged():
    result = analyze_with_keywords("Monthly rent: $2,000 per month. Security deposit: $1,000, payable on signing.")
    assert "excessive-security-deposit" not in _flag_ids(result)
    assert result.overall_risk_score == 0


def test_deposit_above_half_month_rent_is_flagged_high():
    result = analyze_with_keywords("Monthly rent: $2,000 per month. Security deposit: $1,050, payable on signing.")
    flagged = {fc.clause.id: fc for fc in result.flagged_clauses}
    assert "excessive-security-deposit" in flagged
    assert flagged["excessive-security-deposit"].clause.severity == Severity.HIGH
    assert "$1,050" in flagged["excessive-security-deposit"].matched_text
    assert result.overall_risk_score == 30
    assert result.risk_level == RiskLevel.HIGH


def test_keyword_hit_suppressed_when_ratio_is_legal():
    text = "Rent: $2,000. A security deposit of $1,000 is due; it is the deposit equal to one month of utilities."
    result = analyze_with_keywords(text)
    assert "excessive-security-deposit" not in _flag_ids(result)


def test_keyword_hit_stands_when_ratio_unknown():
    result = analyze_with_keywords("Tenant shall pay a deposit equal to one month's rent before move-in.")
    assert "excessive-security-deposit" in _flag_ids(result)


def test_excessive_pet_deposit_flagged_medium():
    result = analyze_with_keywords("Monthly rent: $2,000. Pet deposit: $1,500 for one dog.")
    flagged = {fc.clause.id: fc for fc in result.flagged_clauses}
    assert flagged["excessive-pet-deposit"].clause.severity == Severity.MEDIUM


# ---- Late fee cap ----

def test_late_fee_at_cap_is_not_flagged():
    text = "Rent: $2,000 per month. A late fee of $25 applies to rent paid after the 1st."
    result = analyze_with_keywords(text)
    assert "excessive-late-fee" not in _flag_ids(result)
    assert result.overall_risk_score == 0


def test_late_fee_above_cap_is_flagged():
    text = "Rent: $2,000 per month. A late fee of $50 applies to rent paid after the 1st."
    result = analyze_with_keywords(text)
    assert "excessive-late-fee" in _flag_ids(result)
    assert result.overall_risk_score == 15


def test_daily_late_fee_is_flagged_even_when_small():
    result = analyze_with_keywords("Rent: $2,000. A late fee of $10 per day applies until rent is paid.")
    assert "excessive-late-fee" in _flag_ids(result)


def test_late_fee_without_amount_stands():
    result = analyze_with_keywords("Rent: $2,000. A late fee applies to rent paid after the 1st.")
    assert "excessive-late-fee" in _flag_ids(result)


def test_late_fee_amount_ignores_other_sentences():
    text = "Rent: $2,000 per month. A late fee of $20 applies."
    assert late_fee_amount(text, text.index("late fee")) == 20.0


# ---- Keyword matching ----

def test_high_severity_violations_are_flagged():
    text = (
        "The landlord may enter the unit at any time. "
        "Tenant waives all rights under the Residential Tenancy Act. "
        "The security deposit is non-refundable."
    )
    result = analyze_with_keywords(text)
    ids = _flag_ids(result)
    assert ids == ["unrestricted-entry", "waiver-of-rights", "non-refundable-deposit"]
    assert result.overall_risk_score == 90
    assert result.risk_level == RiskLevel.CRITICAL
    positions = [fc.position for fc in result.flagged_clauses]
    assert positions == sorted(positions)
    assert text[positions[0]:].lower().startswith("enter the unit at any time")


def test_matching_is_case_insensitive_and_whitespace_tolerant():
    result = analyze_with_keywords("A LATE   FEE of $50 per\nday applies. Guests are\n not permitted.")
    ids = _flag_ids(result)
    assert "excessive-late-fee" in ids


def test_keywords_respect_word_boundaries():
    result = analyze_with_keywords("The carpet and the petition were discussed.")
    assert "pet-policy" not in _flag_ids(result)


def test_informational_clauses_do_not_score():
    result = analyze_with_keywords("Utilities are not included. Subletting requires written consent. No pets.")
    ids = _flag_ids(result)
    assert {"utility-allocation", "subletting-policy", "pet-policy"} <= set(ids)
    assert result.overall_risk_score == 0
    assert result.risk_level == RiskLevel.LOW
    assert result.recommendations == [NO_VIOLATION_RECOMMENDATION]


def test_pattern_reported_once_at_leftmost_match():
    text = "Late fee applies. " + "x" * 50 + " Another late fee applies."
    result = analyze_with_keywords(text)
    late = [fc for fc in result.flagged_clauses if fc.clause.id == "excessive-late-fee"]
    assert len(late) == 1
    assert late[0].position == 0


def test_excerpt_is_bounded():
    text = "word " * 500
    assert len(excerpt(text, 1000)) <= 200


def test_recommendations_one_per_violation_category():
    text = "Late fee of $100. Rent may be increased at any time. Landlord may enter at any time."
    result = analyze_with_keywords(text)
    # rent (two patterns) + privacy, then the escalation line
    assert len(result.recommendations) == 3


# ---- Degenerate and general properties ----

@pytest.mark.parametrize("text", ["", "   \n\t  ", None])
def test_empty_text_yields_zero_result(text):
    result = analyze_with_keywords(text)
    assert result.overall_risk_score == 0
    assert result.risk_level == RiskLevel.LOW
    assert result.flagged_clauses == []
    assert result.analysis_method == AnalysisMethod.KEYWORD
    assert result.confidence == KEYWORD_CONFIDENCE


@pytest.mark.parametrize(
    "text",
    [
        "\x00\x01 �� $$$ ,,, 12/34/5678 deposit $ rent $",
        "Security deposit: $99,999,999. Rent: $0.",
        "non-refundable " * 200,
        "Tenant waives all rights. Landlord may change the locks. Structural repairs by tenant. "
        "Enter at any time. Non-refundable deposit. Late fee. No guests.",
    ],
)
def test_result_invariants_hold_for_any_text(text):
    result = analyze_with_keywords(text)
    assert 0 <= result.overall_risk_score <= 100
    assert result.risk_level == risk_level_for(result.overall_risk_score)
    ids = [fc.clause.id for fc in result.flagged_clauses]
    assert len(ids) == len(set(ids))
    labels = [kd.label for kd in result.key_details]
    assert len(labels) == len(set(labels))
    assert all(len(fc.matched_text) <= 200 for fc in result.flagged_clauses)


def test_fallback_is_deterministic(lease_text):
    text = lease_text + "Landlord may enter at any time. Late fee of $40."
    first = analyze_with_keywords(text)
    second = analyze_with_keywords(text)
    assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)
    assert first.processing_time is None
