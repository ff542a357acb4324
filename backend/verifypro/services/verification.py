"""Verifier port and the simulated AI verifier.

The mock never inspects file content: it stands in for a real OCR/AI
pipeline and can be swapped out through ``dependencies.get_verifier``.
"""

import random
from dataclasses import dataclass, field
from typing import Protocol

from verifypro.catalog import DOCUMENT_TYPES
from verifypro.models.document import Document


@dataclass
class VerificationResult:
    status: str  # "verified" | "rejected"
    confidence_score: int
    details: dict = field(default_factory=dict)


class Verifier(Protocol):
    async def verify(self, document: Document) -> VerificationResult:
        ...


SECURITY_CHECKS = (
    "Document Authenticity",
    "Watermark Validation",
    "Font Consistency",
    "Layout Analysis",
    "Institution Verification",
)

_RISK_FACTORS = (
    "Minor inconsistency in font spacing detected",
    "Unable to verify institution seal completely",
)


def recommendation_for(score: int) -> str:
    if score >= 85:
        return "APPROVE"
    if score >= 70:
        return "REVIEW"
    return "REJECT"


def _check_status(score: int) -> str:
    if score >= 80:
        return "passed"
    if score >= 60:
        return "warning"
    return "failed"


class MockVerifier:
    """Marks every document verified with a score drawn from [min_score, max_score].

    Details hold extracted fields and per-check scores near the overall
    score. Risk factors are only reported for scores below 80.
    """

    def __init__(self, min_score: int = 70, max_score: int = 100, rng: random.Random | None = None):
        if not 0 <= min_score <= max_score <= 100:
            raise ValueError("Score range must satisfy 0 <= min_score <= max_score <= 100")
        self.min_score = min_score
        self.max_score = max_score
        self._rng = rng or random.Random()

    def _extracted_info(self, document: Document) -> dict:
        info = {
            "document_type": DOCUMENT_TYPES.get(document.doc_type, document.doc_type),
            "file_name": document.file_name,
        }
        if document.candidate is not None:
            info["name"] = document.candidate.name
        return info

    async def verify(self, document: Document) -> VerificationResult:
        score = self._rng.randint(self.min_score, self.max_score)
        checks = []
        for name in SECURITY_CHECKS:
            check_score = max(0, min(100, score + self._rng.randint(-10, 5)))
            checks.append({"check": name, "status": _check_status(check_score), "score": check_score})
        return VerificationResult(
            status="verified",
            confidence_score=score,
            details={
                "engine": "mock",
                "recommendation": recommendation_for(score),
                "extracted_info": self._extracted_info(document),
                "security_checks": checks,
                "risk_factors": list(_RISK_FACTORS) if score < 80 else [],
            },
        )
