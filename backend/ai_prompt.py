"""
Prompt for the AI analysis path: RTA knowledge base + task instructions +
output schema + contract text.
"""
from __future__ import annotations

# Contract text beyond this many characters is not sent to the model. Clauses
# late in very long documents are therefore only seen by the keyword path.
MAX_CONTRACT_CHARS = 50_000

RTA_KNOWLEDGE = """
BC RESIDENTIAL TENANCY ACT KEY REGULATIONS:

SECURITY DEPOSITS (Section 19):
- Maximum: 0.5 months rent (half month's rent) - THIS IS LEGAL AND COMPLIANT
- ONLY flag as excessive if deposit is MORE THAN 0.5 months rent
- Examples:
  * $2,000 rent with $1,000 deposit = COMPLIANT (exactly 0.5)
  * $2,000 rent with $1,500 deposit = VIOLATION (0.75 months)
  * $2,100 rent with $1,050 deposit = COMPLIANT (exactly 0.5)
- Must be refundable
- Requires move-in and move-out condition inspection reports
- Cannot be labeled as "non-refundable"

PET DEPOSITS (Section 19):
- Maximum: 0.5 months rent (separate from security deposit) - THIS IS LEGAL
- ONLY flag as excessive if pet deposit is MORE THAN 0.5 months rent
- Must be refundable
- Only allowed if pets are permitted

RENT INCREASES (Sections 42-43):
- Frequency: once per 12 months maximum
- Notice: 3 months written notice required
- Amount: limited to the government-set annual percentage
- Cannot be retroactive
- Requires the approved RTB form

LATE FEES (Regulation Section 7):
- Maximum $25 per late payment, and only if set out in the agreement

TERMINATION & EVICTION (Sections 44-55):
- Landlord must follow proper legal process
- Cannot evict without proper notice and reason
- Tenant entitled to dispute resolution
- Immediate eviction clauses are illegal
- Fixed-term vacate clauses generally unenforceable (since 2017)

NOTICE PERIODS (Section 45):
- Month-to-month: 1 month notice from tenant
- Landlord ending tenancy: 2-4 months depending on reason
- Tenants cannot waive notice rights

MAINTENANCE & REPAIRS (Section 32):
- Landlord responsible for maintaining rental unit
- Landlord must keep unit in reasonable condition
- Major repairs are landlord's responsibility
- Tenant cannot be forced to pay for structural repairs

PRIVACY & ENTRY (Section 29):
- Landlord must give 24 hours written notice before entry
- Entry only allowed 8am-9pm unless emergency
- Must specify reason for entry
- Unlimited access clauses are illegal

TENANT RIGHTS (Section 5):
- Rights under RTA cannot be waived
- Any clause attempting to waive RTA rights is void
- Tenants have right to quiet enjoyment
- Reasonable guest policies only

POST-DATED CHEQUES (Section 22):
- Landlords cannot require post-dated cheques
- Cannot require automatic payment authorization
- Tenant chooses payment method

UTILITIES:
- Must be clearly specified who pays what
- Cannot change utility responsibility without agreement
- Landlord cannot charge more than actual cost

SUBLETTING (Section 34):
- Landlord cannot unreasonably refuse subletting
- Tenant must get landlord approval
""".strip()

OUTPUT_SCHEMA = """{
  "keyDetails": {
    "monthlyRent": "extracted value or null",
    "securityDeposit": "extracted value or null",
    "petDeposit": "extracted value or null",
    "leaseStartDate": "extracted value or null",
    "leaseEndDate": "extracted value or null",
    "propertyAddress": "extracted value or null",
    "landlordName": "extracted value or null",
    "tenantName": "extracted value or null",
    "noticePeriod": "extracted value or null"
  },
  "flaggedClauses": [
    {
      "clauseText": "exact text from contract (max 200 chars)",
      "category": "security_deposit|rent|termination|maintenance|privacy|pets|subletting|utilities|other",
      "severity": "low|medium|high",
      "isMalicious": true or false,
      "violation": "brief description of what law is violated",
      "legalReference": "BC RTA Section X",
      "explanation": "why this is concerning for the tenant",
      "recommendation": "what the tenant should do about this"
    }
  ],
  "overallRiskScore": 0-100,
  "riskLevel": "low|moderate|high|critical",
  "summary": "2-3 sentence overview of the contract",
  "recommendations": ["recommendation 1", "recommendation 2", "..."]
}"""

INSTRUCTIONS = """TASK:
Analyze the following rental contract and provide a comprehensive assessment. Extract key details, identify problematic clauses, and calculate an overall risk score.

IMPORTANT INSTRUCTIONS:
1. Be thorough but concise in your analysis
2. ONLY flag clauses that VIOLATE BC law as malicious - do NOT flag compliant clauses as violations
3. Security deposits at exactly 0.5 months rent are LEGAL and should NOT be flagged
4. Pet deposits at exactly 0.5 months rent are LEGAL and should NOT be flagged
5. Only flag deposits if they EXCEED 0.5 months rent (e.g., 0.75 months, 1 month, etc.)
6. Provide specific legal references from BC RTA
7. Calculate risk score based on severity of malicious clauses only: High=30 points, Medium=15 points, Low=5 points (max 100)
8. Provide actionable recommendations for the tenant
9. Extract exact text snippets for flagged clauses (keep under 200 characters)
10. If a contract is compliant, the flaggedClauses array should be EMPTY or contain only informational items (isMalicious false)
11. Use null for any key detail that is not in the contract; never guess"""

RISK_LEVEL_GUIDE = """RISK LEVEL GUIDELINES:
- low: 0 score, no violations found
- moderate: 1-29 score, minor concerns
- high: 30-59 score, significant violations
- critical: 60+ score, serious illegal clauses"""


def truncate_contract_text(contract_text: str) -> str:
    return contract_text[:MAX_CONTRACT_CHARS]


def build_analysis_prompt(contract_text: str) -> str:
    """Same text in, same prompt out."""
    return f"""You are an expert legal analyst specializing in BC (British Columbia) Residential Tenancy Act compliance. Your task is to analyze rental contracts and identify problematic clauses that violate BC tenancy laws.

{RTA_KNOWLEDGE}

{INSTRUCTIONS}

OUTPUT FORMAT:
Respond ONLY with valid JSON matching this exact structure (no markdown, no code blocks, just raw JSON):

{OUTPUT_SCHEMA}

{RISK_LEVEL_GUIDE}

CONTRACT TEXT TO ANALYZE:
---
{truncate_contract_text(contract_text)}
---

Remember: Respond with ONLY the JSON object, no additional text or formatting."""
