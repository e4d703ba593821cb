"""Domain model for factual claims extracted from generated posts."""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import DomainModel


class ClaimType(str, Enum):
    """Kinds of factual assertion the pipeline knows how to verify."""

    VENUE_EXISTS = "venue_exists"  # 장소 존재 여부
    LOCATION = "location"  # 주소/위치
    HOURS = "hours"  # 운영시간
    EVENT_PERIOD = "event_period"  # 전시/이벤트 기간
    PRICE = "price"  # 가격
    FACILITIES = "facilities"  # 시설 정보
    CONTACT = "contact"  # 연락처
    TRANSPORT = "transport"  # 교통/접근성
    GENERAL = "general"  # 일반 정보
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class ClaimSeverity(str, Enum):
    """How much damage a wrong claim does to a reader.

    - critical: venue existence, address (a wasted trip)
    - major: opening hours, event period (an inconvenience)
    - minor: price, facilities (checkable on site)
    """

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"

    @property
    def priority(self) -> int:
        return _SEVERITY_PRIORITY[self]


_SEVERITY_PRIORITY = {
    ClaimSeverity.CRITICAL: 0,
    ClaimSeverity.MAJOR: 1,
    ClaimSeverity.MINOR: 2,
}


class Claim(DomainModel):
    """A single factual assertion to be verified."""

    id: str = Field(..., description="Extractor-assigned claim id")
    type: ClaimType = Field(..., description="Claim type")
    value: str = Field(..., description="The asserted value, e.g. '09:00-18:00'")
    text: Optional[str] = Field(None, description="Sentence the value was extracted from")
    context: Optional[str] = Field(None, description="Surrounding text")
    severity: ClaimSeverity = Field(..., description="Fixed at extraction time")
    line_number: Optional[int] = Field(None, description="Source line number")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "id": "claim-1",
                "type": "hours",
                "value": "24시간 운영",
                "text": "이곳은 24시간 운영합니다.",
                "severity": "critical",
            }
        }

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        if isinstance(value, str) and not isinstance(value, ClaimType):
            return ClaimType(value.strip().lower())
        return value

    @property
    def cache_key(self) -> str:
        return f"{self.type.value}:{self.value}"

    @property
    def source_text(self) -> str:
        """Text the correction is applied to."""
        return self.text or self.value
