"""Input document for validation."""

from typing import List, Optional

from pydantic import Field

from .base import DomainModel
from .claim import Claim
from .gate import Gate


class ValidationDocument(DomainModel):
    """A generated post with its pre-extracted claims and sibling gate results."""

    file_path: str = Field(..., description="Path of the post being validated")
    title: Optional[str] = Field(None, description="Post title")
    claims: List[Claim] = Field(default_factory=list, description="Claims from the extractor")
    gates: List[Gate] = Field(default_factory=list, description="Results from the other scorers")
    content: Optional[str] = Field(None, description="Post body, scanned for sensitive topics")

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "example": {
                "filePath": "blog/posts/2025-02-01-museum.md",
                "title": "국립중앙박물관 관람 가이드",
                "claims": [
                    {
                        "id": "claim-1",
                        "type": "venue_exists",
                        "value": "국립중앙박물관",
                        "severity": "critical",
                    }
                ],
                "gates": [
                    {"name": "seo", "score": 82, "passed": True, "threshold": 70}
                ],
            }
        }
