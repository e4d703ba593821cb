"""Domain models for verification results."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from .base import DomainModel


class VerificationStatus(str, Enum):
    """Possible verification outcomes."""

    VERIFIED = "verified"  # Source confirms the claim
    FALSE = "false"  # Source contradicts the claim
    UNKNOWN = "unknown"  # Could not be determined


class VerificationSource(str, Enum):
    """Where a verification result came from."""

    OFFICIAL_API = "official_api"
    WEB_SEARCH = "web_search"
    CACHED = "cached"
    UNKNOWN = "unknown"


class VerificationResult(DomainModel):
    """Outcome of verifying one claim."""

    claim_id: str = Field(..., description="Id of the verified claim")
    status: VerificationStatus = Field(..., description="Verification status")
    confidence: int = Field(..., ge=0, le=100, description="Confidence 0-100")
    source: VerificationSource = Field(..., description="Result source")
    source_url: Optional[str] = Field(None, description="Supporting evidence URL")
    correct_value: Optional[str] = Field(None, description="Actual value when the claim is false")
    checked_at: datetime = Field(default_factory=datetime.utcnow, description="When verification completed")
    details: Optional[str] = Field(None, description="Rationale or error text")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "claim_id": "claim-1",
                "status": "false",
                "confidence": 95,
                "source": "official_api",
                "correct_value": "09:00-18:00",
                "details": "공식 API에서 운영시간 불일치",
            }
        }

    @model_validator(mode="after")
    def _correct_value_only_when_false(self) -> "VerificationResult":
        if self.correct_value is not None and self.status != VerificationStatus.FALSE:
            raise ValueError("correct_value may only be set when status is 'false'")
        return self

    @property
    def effective_confidence(self) -> int:
        """Confidence used for aggregation; meaningless for unknown results."""
        if self.status == VerificationStatus.UNKNOWN:
            return 0
        return self.confidence

    @property
    def is_determined(self) -> bool:
        return self.status != VerificationStatus.UNKNOWN

    def for_claim(self, claim_id: str) -> "VerificationResult":
        """Copy of this result attributed to another claim, served from cache."""
        return self.model_copy(
            update={"claim_id": claim_id, "source": VerificationSource.CACHED}
        )
