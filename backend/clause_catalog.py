"""
Known rental-contract clause patterns, checked against the BC Residential
Tenancy Act (RTA).

Malicious entries are violations and feed the risk score. Informational
entries are standard clauses worth surfacing but never scored.
"""
from __future__ import annotations

from typing import Optional, Tuple

from models import ClauseCategory, ClausePattern, Severity

# Largest legal deposit (security or pet) as a fraction of one month's rent
MAX_DEPOSIT_TO_RENT_RATIO = 0.5

_C = ClauseCategory
_S = Severity

CLAUSE_PATTERNS: Tuple[ClausePattern, ...] = (
    # ---- Violations: high ----
    ClausePattern(
        id="excessive-security-deposit",
        category=_C.SECURITY_DEPOSIT,
        name="Excessive security deposit",
        description="Security deposit greater than half of one month's rent.",
        explanation=(
            "A landlord may not require a security deposit of more than half a month's rent. "
            "Anything above that is unlawful and must be returned or credited to the tenant."
        ),
        keywords=(
            "deposit equal to one month",
            "deposit equal to one full month",
            "deposit of one month",
            "one month's rent as a security deposit",
            "one month's rent as security deposit",
            "first and last month",
            "two months' rent as a deposit",
            "full month's rent as a deposit",
        ),
        is_malicious=True,
        severity=_S.HIGH,
        legal_reference="RTA Section 19",
    ),
    ClausePattern(
        id="non-refundable-deposit",
        category=_C.SECURITY_DEPOSIT,
        name="Non-refundable deposit",
        description="Deposit described as non-refundable or automatically forfeited.",
        explanation=(
            "Security and pet deposits must be refundable. A landlord can only keep part of a "
            "deposit with the tenant's written agreement or an order from the Residential Tenancy Branch."
        ),
        keywords=(
            "non-refundable deposit",
            "nonrefundable deposit",
            "non-refundable",
            "nonrefundable",
            "deposit will not be returned",
            "forfeit the deposit",
            "forfeit the security deposit",
        ),
        is_malicious=True,
        severity=_S.HIGH,
        legal_reference="RTA Sections 19 and 38",
    ),
    ClausePattern(
        id="immediate-eviction",
        category=_C.TERMINATION,
        name="Immediate or self-help eviction",
        description="Eviction without notice, lock changes or removal of the tenant's belongings.",
        explanation=(
            "A tenancy can only be ended with proper notice and reason, and the tenant may dispute it. "
            "Clauses allowing immediate eviction or lock-outs are unenforceable."
        ),
        keywords=(
            "immediate eviction",
            "evicted immediately",
            "evict immediately",
            "evict the tenant immediately",
            "evict without notice",
            "evicted without notice",
            "terminate this agreement immediately",
            "change the locks",
            "remove the tenant's belongings",
        ),
        is_malicious=True,
        severity=_S.HIGH,
        legal_reference="RTA Sections 44-55",
    ),
    ClausePattern(
        id="waiver-of-rights",
        category=_C.OTHER,
        name="Waiver of tenant rights",
        description="Tenant asked to give up rights under the Residential Tenancy Act.",
        explanation=(
            "Landlords and tenants cannot contract out of the Act. Any term that waives a tenant's "
            "statutory rights is void."
        ),
        keywords=(
            "waives all rights",
            "waive all rights",
            "waives any rights",
            "waive any rights",
            "waiver of rights",
            "gives up the right",
            "residential tenancy act does not apply",
            "not subject to the residential tenancy act",
        ),
        is_malicious=True,
        severity=_S.HIGH,
        legal_reference="RTA Section 5",
    ),
    ClausePattern(
        id="unrestricted-entry",
        category=_C.PRIVACY,
        name="Unrestricted landlord entry",
        description="Landlord may enter the unit at any time or without notice.",
        explanation=(
            "Except in an emergency, a landlord must give at least 24 hours' written notice stating the "
            "reason, and may only enter between 8 a.m. and 9 p.m."
        ),
        keywords=(
            "enter at any time",
            "enter the premises at any time",
            "enter the unit at any time",
            "enter the rental unit at any time",
            "access at any time",
            "unrestricted access",
            "enter without notice",
            "without prior notice",
        ),
        is_malicious=True,
        severity=_S.HIGH,
        legal_reference="RTA Section 29",
    ),
    ClausePattern(
        id="tenant-structural-repairs",
        category=_C.MAINTENANCE,
        name="Tenant pays structural repairs",
        description="Tenant made responsible for major or structural repairs.",
        explanation=(
            "The landlord must keep the rental unit in a state of repair that complies with health, "
            "safety and housing standards. Major and structural repairs are the landlord's responsibility."
        ),
        keywords=(
            "structural repairs",
            "tenant is responsible for all repairs",
            "tenant shall be responsible for all repairs",
            "tenant shall pay for all repairs",
            "tenant is responsible for major repairs",
            "repairs to the roof",
            "repairs to the foundation",
        ),
        is_malicious=True,
        severity=_S.HIGH,
        legal_reference="RTA Section 32",
    ),
    # ---- Violations: medium ----
    ClausePattern(
        id="excessive-late-fee",
        category=_C.RENT,
        name="Excessive late fees",
        description="Late payment fees or daily penalties on overdue rent.",
        explanation=(
            "Late fees are capped at $25 per late payment and must be set out in the tenancy agreement. "
            "Daily or percentage-based penalties are not allowed."
        ),
        keywords=(
            "late fee",
            "late fees",
            "late charge",
            "late payment fee",
            "late payment penalty",
            "per day late",
        ),
        is_malicious=True,
        severity=_S.MEDIUM,
        legal_reference="RTA Regulation Section 7",
    ),
    ClausePattern(
        id="guest-restrictions",
        category=_C.OTHER,
        name="Unreasonable guest restrictions",
        description="Guests banned, limited or charged for.",
        explanation=(
            "Tenants are entitled to quiet enjoyment, including having guests. A landlord may not "
            "unreasonably restrict guests or charge for them."
        ),
        keywords=(
            "no overnight guests",
            "no guests",
            "guests are not permitted",
            "guests are not allowed",
            "guest fee",
            "charge for guests",
            "visitors are prohibited",
        ),
        is_malicious=True,
        severity=_S.MEDIUM,
        legal_reference="RTA Section 30",
    ),
    ClausePattern(
        id="improper-rent-increase",
        category=_C.RENT,
        name="Improper rent increase",
        description="Rent increases at any time, without three months' notice, or above the allowed amount.",
        explanation=(
            "Rent may be increased only once every 12 months, with three full months' written notice on "
            "the approved form, and only up to the annual allowable amount."
        ),
        keywords=(
            "rent may be increased at any time",
            "increase the rent at any time",
            "raise the rent at any time",
            "increase rent without notice",
            "rent may increase at the landlord's discretion",
            "rent increase with 30 days",
        ),
        is_malicious=True,
        severity=_S.MEDIUM,
        legal_reference="RTA Sections 42-43",
    ),
    ClausePattern(
        id="excessive-pet-deposit",
        category=_C.PETS,
        name="Excessive or non-refundable pet deposit",
        description="Pet deposit above half a month's rent, or a non-refundable pet fee.",
        explanation=(
            "A pet damage deposit may not exceed half a month's rent, is separate from the security "
            "deposit, and must be refundable."
        ),
        keywords=(
            "pet deposit equal to one month",
            "pet deposit of one month",
            "non-refundable pet fee",
            "nonrefundable pet fee",
            "monthly pet fee",
        ),
        is_malicious=True,
        severity=_S.MEDIUM,
        legal_reference="RTA Section 19",
    ),
    ClausePattern(
        id="post-dated-cheques",
        category=_C.RENT,
        name="Required post-dated cheques",
        description="Tenant required to provide post-dated cheques or automatic payments.",
        explanation="The tenant chooses how to pay rent; a landlord cannot require post-dated cheques.",
        keywords=(
            "post-dated cheques",
            "post-dated checks",
            "postdated cheques",
            "postdated checks",
            "automatic withdrawal is required",
        ),
        is_malicious=True,
        severity=_S.MEDIUM,
        legal_reference="RTA Section 22",
    ),
    # ---- Standard clauses (informational) ----
    ClausePattern(
        id="standard-notice-period",
        category=_C.TERMINATION,
        name="Notice period",
        description="Notice required to end the tenancy.",
        explanation=(
            "On a month-to-month tenancy the tenant gives one full month's notice; a landlord needs "
            "two to four months depending on the reason."
        ),
        keywords=(
            "one month's notice",
            "one month notice",
            "30 days' notice",
            "30 days notice",
            "notice to end tenancy",
            "month-to-month",
        ),
        is_malicious=False,
        severity=_S.LOW,
        legal_reference="RTA Section 45",
    ),
    ClausePattern(
        id="utility-allocation",
        category=_C.UTILITIES,
        name="Utilities",
        description="Which utilities are included in rent and which the tenant pays.",
        explanation="Make sure the agreement clearly lists which utilities are included and who pays for the rest.",
        keywords=("utilities", "hydro", "electricity", "internet", "water and heat"),
        is_malicious=False,
        severity=_S.LOW,
    ),
    ClausePattern(
        id="subletting-policy",
        category=_C.SUBLETTING,
        name="Subletting and assignment",
        description="Rules for subletting or assigning the tenancy.",
        explanation=(
            "The tenant needs the landlord's written consent to sublet or assign, but the landlord "
            "cannot unreasonably withhold it on a fixed term of six months or more."
        ),
        keywords=("sublet", "sublease", "subletting", "assign this agreement", "assign the tenancy"),
        is_malicious=False,
        severity=_S.LOW,
        legal_reference="RTA Section 34",
    ),
    ClausePattern(
        id="pet-policy",
        category=_C.PETS,
        name="Pet policy",
        description="Whether pets are allowed and under what conditions.",
        explanation="A landlord may restrict or prohibit pets; a pet deposit is only allowed where pets are permitted.",
        keywords=("no pets", "pets", "pet", "animals"),
        is_malicious=False,
        severity=_S.LOW,
    ),
)

_BY_ID = {p.id: p for p in CLAUSE_PATTERNS}


def get_pattern(pattern_id: str) -> Optional[ClausePattern]:
    return _BY_ID.get(pattern_id)


def malicious_patterns() -> Tuple[ClausePattern, ...]:
    return tuple(p for p in CLAUSE_PATTERNS if p.is_malicious)


def informational_patterns() -> Tuple[ClausePattern, ...]:
    return tuple(p for p in CLAUSE_PATTERNS if not p.is_malicious)
