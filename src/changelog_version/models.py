# SPDX-License-Identifier: MIT
"""Pydantic models for the changelog API payloads consumed by the selector."""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class DateTemplate(BaseModel):
    """A version template: a format string plus a human label."""

    model_config = ConfigDict(frozen=True)

    format: str = Field(min_length=1, description="Format string with {TOKEN} placeholders")
    label: str = Field(min_length=1, description="Name shown next to the resolved value")

    @field_validator("format", "label")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class TimezoneConfig(BaseModel):
    """Response of ``GET /api/config/timezone``."""

    model_config = ConfigDict(populate_by_name=True)

    timezone: str = "UTC"
    source: Literal["user", "system"] = "system"
    allow_user_timezone: bool = Field(default=True, alias="allowUserTimezone")
    custom_date_templates: Optional[list[DateTemplate]] = Field(
        default=None, alias="customDateTemplates"
    )

    @field_validator("source", mode="before")
    @classmethod
    def _known_source(cls, value: Any) -> Any:
        if value is None:
            return "system"
        if value not in ("user", "system"):
            logger.warning("Unknown time zone source %r, assuming system", value)
            return "system"
        return value

    @field_validator("custom_date_templates", mode="before")
    @classmethod
    def _drop_invalid_templates(cls, value: Any) -> Any:
        """Keep the usable templates when some stored entries are malformed."""
        if value is None:
            return None
        if not isinstance(value, list):
            logger.warning("Ignoring customDateTemplates of type %s", type(value).__name__)
            return None
        kept: list[DateTemplate] = []
        for item in value:
            try:
                kept.append(DateTemplate.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping invalid date template %r: %s", item, e)
        return kept

    @property
    def has_admin_templates(self) -> bool:
        """True when the admin configured at least one template."""
        return bool(self.custom_date_templates)


class VersionListResponse(BaseModel):
    """Response of ``GET /api/projects/{project_id}/versions``."""

    versions: list[str] = Field(default_factory=list)
