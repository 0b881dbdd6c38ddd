from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


MAX_MATCHED_TEXT_CHARS = 200


class ClauseCategory(str, Enum):
    SECURITY_DEPOSIT = "security_deposit"
    RENT = "rent"
    TERMINATION = "termination"
    MAINTENANCE = "maintenance"
    PRIVACY = "privacy"
    PETS = "pets"
    SUBLETTING = "subletting"
    UTILITIES = "utilities"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class AnalysisMethod(str, Enum):
    AI = "ai"
    KEYWORD = "keyword"


KEY_DETAIL_CATEGORIES = {
    "Property Address": ClauseCategory.OTHER,
    "Landlord Name": ClauseCategory.OTHER,
    "Tenant Name": ClauseCategory.OTHER,
    "Monthly Rent": ClauseCategory.RENT,
    "Security Deposit": ClauseCategory.SECURITY_DEPOSIT,
    "Pet Deposit": ClauseCategory.SECURITY_DEPOSIT,
    "Lease Start Date": ClauseCategory.TERMINATION,
    "Lease End Date": ClauseCategory.TERMINATION,
    "Notice Period": ClauseCategory.TERMINATION,
}


class _CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ClausePattern(_CamelModel):
    """
    A named rule used to detect one kind of rental-contract clause.

    - is_malicious: True for a legal violation, False for a standard clause
      that is only worth pointing out to the tenant
    - keywords: case-insensitive match terms, in priority order
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, frozen=True)

    id: str
    category: ClauseCategory
    name: str
    description: str
    explanation: str
    keywords: Tuple[str, ...] = ()
    is_malicious: bool
    severity: Severity
    legal_reference: Optional[str] = None


class KeyDetail(_CamelModel):
    """A fact pulled from the contract. value is None when it was not found."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, frozen=True)

    label: str
    value: Optional[str] = None
    category: ClauseCategory = ClauseCategory.OTHER


class FlaggedClause(_CamelModel):
    clause: ClausePattern
    matched_text: str = Field(default="", max_length=MAX_MATCHED_TEXT_CHARS)
    position: int = Field(ge=0, default=0)
    ai_insight: Optional[str] = None


class AnalysisResult(_CamelModel):
    """
    Canonical output of one contract analysis.

    Both analysis paths build this with the same field semantics. risk_level is
    derived from overall_risk_score and cannot be set; overall_risk_score must
    agree with the malicious flagged clauses.
    """

    summary: str
    key_details: List[KeyDetail] = Field(default_factory=list)
    flagged_clauses: List[FlaggedClause] = Field(default_factory=list)
    overall_risk_score: int = Field(ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)
    analysis_method: AnalysisMethod
    confidence: int = Field(ge=0, le=100)
    processing_time: Optional[int] = Field(default=None, ge=0, description="Milliseconds")

    @computed_field(alias="riskLevel")
    @property
    def risk_level(self) -> RiskLevel:
        from risk_scoring import risk_level_for

        return risk_level_for(self.overall_risk_score)

    @model_validator(mode="after")
    def check_invariants(self) -> "AnalysisResult":
        from risk_scoring import score

        ids = [fc.clause.id for fc in self.flagged_clauses]
        if len(ids) != len(set(ids)):
            raise ValueError("flagged clause ids must be unique")
        labels = [kd.label for kd in self.key_details]
        if len(labels) != len(set(labels)):
            raise ValueError("key detail labels must be unique")
        expected, _ = score(self.flagged_clauses)
        if self.overall_risk_score != expected:
            raise ValueError(
                f"overall_risk_score {self.overall_risk_score} does not match flagged clauses ({expected})"
            )
        return self

    @property
    def malicious_clauses(self) -> List[FlaggedClause]:
        return [fc for fc in self.flagged_clauses if fc.clause.is_malicious]


# ---- Raw AI payload (untrusted; validated before it becomes an AnalysisResult) ----


class AIKeyDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    monthlyRent: Optional[str] = None
    securityDeposit: Optional[str] = None
    petDeposit: Optional[str] = None
    leaseStartDate: Optional[str] = None
    leaseEndDate: Optional[str] = None
    propertyAddress: Optional[str] = None
    landlordName: Optional[str] = None
    tenantName: Optional[str] = None
    noticePeriod: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def stringify_scalars(cls, v):
        """Models sometimes return numbers for amounts; keep them as text."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class AIFlaggedClause(BaseModel):
    model_config = ConfigDict(extra="ignore")

    clauseText: str = ""
    category: ClauseCategory = ClauseCategory.OTHER
    severity: Severity
    isMalicious: bool
    violation: str = Field(min_length=1)
    legalReference: Optional[str] = None
    explanation: str = ""
    recommendation: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def unknown_category_is_other(cls, v):
        if isinstance(v, str) and v.strip().lower() in {c.value for c in ClauseCategory}:
            return v.strip().lower()
        return ClauseCategory.OTHER


class AIAnalysisPayload(BaseModel):
    """Top-level JSON object the model is instructed to return."""

    model_config = ConfigDict(extra="ignore")

    keyDetails: AIKeyDetails
    flaggedClauses: List[AIFlaggedClause]
    overallRiskScore: float = Field(ge=0, le=100, strict=True)
    riskLevel: RiskLevel
    summary: str = Field(min_length=1)
    recommendations: List[str]
