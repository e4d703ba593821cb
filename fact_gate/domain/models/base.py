"""Shared pydantic base for domain models."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True
