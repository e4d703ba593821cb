"""Domain models for quality gates and publish decisions."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from .base import DomainModel
from .fact_check_report import FactCheckReport
from .lifecycle import DocumentState
from .review_case import ReviewTrigger


class GateName(str, Enum):
    """The closed set of gates a document can be judged by."""

    FACTCHECK = "factcheck"
    SEO = "seo"
    CONTENT = "content"
    DUPLICATE = "duplicate"
    IMAGE = "image"
    READABILITY = "readability"
    TONE = "tone"
    STRUCTURE = "structure"
    KEYWORD_DENSITY = "keyword_density"
    GEO = "geo"
    IMAGE_COHERENCE = "image_coherence"


class Gate(DomainModel):
    """Uniform result emitted by any checker."""

    name: GateName
    score: int = Field(..., ge=0, le=100)
    passed: bool
    threshold: int = Field(..., ge=0, le=100)
    block_on_failure: bool = False
    details: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    needs_human_review: bool = False
    review_trigger: Optional[ReviewTrigger] = None

    @model_validator(mode="after")
    def _passed_matches_score(self) -> "Gate":
        # the factcheck gate may fail above its threshold (critical override)
        if self.name != GateName.FACTCHECK and self.passed != (self.score >= self.threshold):
            raise ValueError(
                f"gate {self.name.value}: passed={self.passed} contradicts "
                f"score {self.score} against threshold {self.threshold}"
            )
        return self

    @classmethod
    def evaluate(
        cls,
        name: GateName,
        score: int,
        threshold: int,
        block_on_failure: bool = False,
        details: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> "Gate":
        """Build a gate whose ``passed`` flag is ``score >= threshold``."""
        return cls(
            name=name,
            score=score,
            passed=score >= threshold,
            threshold=threshold,
            block_on_failure=block_on_failure,
            details=details,
            warnings=warnings or [],
        )

    @property
    def is_blocking_failure(self) -> bool:
        return not self.passed and self.block_on_failure


class ValidationResult(DomainModel):
    """Publish decision for one document."""

    file_path: Optional[str] = None
    title: Optional[str] = None
    validated_at: datetime = Field(default_factory=datetime.utcnow)
    gates: List[Gate] = Field(default_factory=list)
    overall_passed: bool
    block_publish: bool
    needs_human_review: bool
    review_trigger: Optional[ReviewTrigger] = None
    review_case_id: Optional[str] = None
    blocking_gates: List[GateName] = Field(default_factory=list)
    state: DocumentState = DocumentState.DECIDING
    fact_check_report: Optional[FactCheckReport] = None
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    def gate(self, name: GateName) -> Optional[Gate]:
        for gate in self.gates:
            if gate.name == name:
                return gate
        return None

    @property
    def mean_score(self) -> float:
        if not self.gates:
            return 100.0
        return sum(g.score for g in self.gates) / len(self.gates)
