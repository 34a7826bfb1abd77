"""
Per-entity fuzzy search configuration.

A FuzzyConfig is built once per entity type and handed to the indexer and
matcher; it is immutable so that indexing and querying can never disagree
on attributes or normalization.
"""

from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .normalize import as_normalizer
from .scoring import DEFAULT_THRESHOLD


class FuzzyConfig(BaseModel):
    """Searchable attributes, normalizer and threshold of one entity type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, validate_default=True)

    name: str
    attributes: Tuple[str, ...]
    normalizer: Any = None
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0, le=100)
    # Default visibility predicate handed to the index backend (e.g. "not soft-deleted")
    visible: Any = None

    @field_validator("attributes", mode="before")
    @classmethod
    def _attributes_tuple(cls, value):
        if isinstance(value, str):
            return (value,)
        return tuple(value)

    @field_validator("attributes")
    @classmethod
    def _attributes_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("at least one searchable attribute is required")
        if len(set(value)) != len(value):
            raise ValueError("searchable attributes must be unique")
        return value

    @field_validator("normalizer", mode="before")
    @classmethod
    def _normalizer(cls, value):
        return as_normalizer(value)


def fuzzy_search_attributes(
    name: str,
    *attributes: str,
    normalizer: Any = None,
    threshold: float = DEFAULT_THRESHOLD,
    visible: Optional[Any] = None,
) -> FuzzyConfig:
    """
    Declare the searchable attributes of an entity type.
    Raises ConfigurationError instead of pydantic's ValidationError.
    """
    try:
        return FuzzyConfig(
            name=name,
            attributes=attributes,
            normalizer=normalizer,
            threshold=threshold,
            visible=visible,
        )
    except (ValidationError, TypeError) as exc:
        raise ConfigurationError(f"Invalid fuzzy search configuration for {name!r}: {exc}") from exc
