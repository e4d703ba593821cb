"""Configuration models for fact checking and publish gating."""

from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from .base import DomainModel
from .claim import ClaimSeverity
from .gate import GateName

WEIGHT_TOLERANCE = 1e-6


class SeverityThresholds(DomainModel):
    """Minimum passing score per severity and overall."""

    critical: int = Field(default=100, ge=0, le=100, description="Critical items must all verify")
    major: int = Field(default=85, ge=0, le=100)
    minor: int = Field(default=70, ge=0, le=100)
    overall: int = Field(default=80, ge=0, le=100)

    def for_severity(self, severity: ClaimSeverity) -> int:
        return getattr(self, severity.value)


class SeverityWeights(DomainModel):
    """Weights of each severity in the overall score. Must sum to 1.0."""

    critical: float = Field(default=0.3, ge=0.0, le=1.0)
    major: float = Field(default=0.3, ge=0.0, le=1.0)
    minor: float = Field(default=0.4, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _sum_to_one(self) -> "SeverityWeights":
        total = self.critical + self.major + self.minor
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(
                f"severity weights must sum to 1.0, got {total:.4f} "
                f"(critical={self.critical}, major={self.major}, minor={self.minor})"
            )
        return self

    def for_severity(self, severity: ClaimSeverity) -> float:
        return getattr(self, severity.value)


class FactCheckConfig(DomainModel):
    """Verification engine and fact-check scoring configuration."""

    thresholds: SeverityThresholds = Field(default_factory=SeverityThresholds)
    weights: SeverityWeights = Field(default_factory=SeverityWeights)
    block_on_critical_failure: bool = Field(default=True, description="A false critical claim hard-blocks")
    block_on_failure: bool = Field(default=True, description="Failing fact-check gate blocks publishing")
    max_retries: int = Field(default=3, ge=1, description="Attempts per claim")
    retry_delay_ms: int = Field(default=1000, ge=0, description="Base backoff delay")
    cache_results: bool = Field(default=True)
    cache_ttl_hours: float = Field(default=24, gt=0)
    cache_maxsize: int = Field(default=10000, gt=0)
    inter_call_delay_ms: int = Field(default=500, ge=0, description="Throttle between sequential calls")
    request_timeout: float = Field(default=10.0, gt=0, description="Per source call timeout in seconds")
    concurrency: int = Field(default=1, ge=1, description="Workers per severity group")
    rate_limit_per_second: Optional[float] = Field(default=None, gt=0, description="Token bucket refill rate")
    rate_limit_burst: int = Field(default=1, ge=1, description="Token bucket capacity")


class GateConfig(DomainModel):
    """Threshold and blocking policy for one non-fact-check gate."""

    min_score: int = Field(default=70, ge=0, le=100)
    block_on_failure: bool = False
    enabled: bool = True


def _default_gates() -> Dict[GateName, GateConfig]:
    return {
        GateName.SEO: GateConfig(min_score=70),
        GateName.CONTENT: GateConfig(min_score=70),
        GateName.DUPLICATE: GateConfig(min_score=100),
        GateName.IMAGE: GateConfig(min_score=70),
        GateName.READABILITY: GateConfig(min_score=70),
        GateName.TONE: GateConfig(min_score=70),
        GateName.STRUCTURE: GateConfig(min_score=70),
        GateName.KEYWORD_DENSITY: GateConfig(min_score=70),
        GateName.GEO: GateConfig(min_score=60),
        GateName.IMAGE_COHERENCE: GateConfig(min_score=40),
    }


class PublishRequirements(DomainModel):
    """Which gates are hard requirements and which are advisory."""

    required_gates: List[GateName] = Field(default_factory=lambda: [GateName.FACTCHECK])
    warning_gates: List[GateName] = Field(
        default_factory=lambda: [GateName.SEO, GateName.CONTENT, GateName.DUPLICATE]
    )

    @field_validator("required_gates", "warning_gates", mode="before")
    @classmethod
    def _drop_unknown_gates(cls, value):
        if not isinstance(value, list):
            return value
        known = {g.value for g in GateName}
        return [v for v in value if isinstance(v, GateName) or v in known]


class ScoreRange(DomainModel):
    """Closed-open score interval [min, max)."""

    min: int = Field(default=50, ge=0, le=100)
    max: int = Field(default=70, ge=0, le=100)

    @model_validator(mode="after")
    def _ordered(self) -> "ScoreRange":
        if self.min > self.max:
            raise ValueError(f"review band min ({self.min}) exceeds max ({self.max})")
        return self

    def contains(self, score: float) -> bool:
        return self.min <= score < self.max


class HumanReviewConfig(DomainModel):
    """Human-review routing and queue retention."""

    score_range: ScoreRange = Field(default_factory=ScoreRange)
    high_unknown_ratio: float = Field(default=50.0, ge=0, le=100, description="Percent of unknown claims")
    retention_days: int = Field(default=30, ge=1)
    queue_path: str = Field(default="data/human-review-queue.json")


class QualityGatesConfig(DomainModel):
    """Top-level configuration loaded once per run."""

    version: str = "1.0.0"
    factcheck: FactCheckConfig = Field(default_factory=FactCheckConfig)
    gates: Dict[GateName, GateConfig] = Field(default_factory=_default_gates)
    publish_requirements: PublishRequirements = Field(default_factory=PublishRequirements)
    human_review: HumanReviewConfig = Field(default_factory=HumanReviewConfig)

    @model_validator(mode="before")
    @classmethod
    def _lift_factcheck_section(cls, data):
        # config files keep fact-check settings under gates.factcheck
        if isinstance(data, dict) and "factcheck" not in data:
            gates = data.get("gates")
            if isinstance(gates, dict) and isinstance(gates.get("factcheck"), dict):
                data = dict(data)
                data["factcheck"] = gates["factcheck"]
        return data

    @field_validator("gates", mode="before")
    @classmethod
    def _merge_gate_defaults(cls, value):
        if not isinstance(value, dict):
            return value
        merged: Dict[GateName, GateConfig] = _default_gates()
        known = {g.value for g in GateName}
        for name, gate in value.items():
            key = name.value if isinstance(name, GateName) else name
            if key not in known or key == GateName.FACTCHECK.value:
                continue
            base = merged.get(GateName(key), GateConfig())
            override = gate if isinstance(gate, GateConfig) else GateConfig.model_validate(gate)
            merged[GateName(key)] = base.model_copy(
                update={f: getattr(override, f) for f in override.model_fields_set}
            )
        return merged

    def gate_config(self, name: GateName) -> GateConfig:
        return self.gates.get(name, GateConfig())
