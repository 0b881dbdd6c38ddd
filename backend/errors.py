"""Error taxonomy for contract analysis. Only InvalidInputError leaves the core."""
from __future__ import annotations


class ContractAnalysisError(Exception):
    code = "ANALYSIS_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class ConfigurationError(ContractAnalysisError):
    """No usable credential. Never retried."""

    code = "NO_API_KEY"


class InvalidInputError(ContractAnalysisError):
    code = "INVALID_INPUT"


class TransientAIError(ContractAnalysisError):
    """Empty, unparseable or invalid AI output, or a network/rate-limit failure."""

    code = "TRANSIENT_ERROR"


class UnknownAIError(ContractAnalysisError):
    code = "UNKNOWN_ERROR"
