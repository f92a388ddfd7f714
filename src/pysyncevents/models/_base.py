"""Base model for daemon REST payloads.

Every payload model inherits from :class:`SyncBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class SyncBaseModel(BaseModel):
    """Frozen, alias-aware base for payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API payload."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        # Only auto-stash raw when validating an API dict; an explicit raw=
        # keyword from the caller is kept as given.
        if not isinstance(values, dict) or "raw" in values:
            return values
        merged = dict(values)
        merged["raw"] = dict(values)
        return merged
