"""Base model for Dreo cloud payloads.

Every payload model inherits from :class:`DreoBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase cloud keys (``deviceName``)
  map automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and empty
  string values so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class DreoBaseModel(BaseModel):
    """Base for Dreo payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        # Keep a caller-supplied raw= as is.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
