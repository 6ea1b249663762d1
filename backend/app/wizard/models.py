from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

PackageType = Literal["plugin", "theme"]
InstallPhase = Literal["pending", "completed"]


def _reject_option_like(value: Optional[str]) -> Optional[str]:
    # slug and download_url end up as positional WP-CLI arguments
    if value and value.lstrip().startswith("-"):
        raise ValueError("must not start with '-'")
    return value


# ------------------------------------------------------------------------------
# Queue + status records (persisted in the option store)
# ------------------------------------------------------------------------------

class QueueItem(BaseModel):
    """
    One pending plugin/theme install, identified by `id` within the queue.

    Extra keys sent by the wizard UI are kept as-is.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    type: PackageType
    slug: str
    download_url: Optional[str] = None

    @field_validator("slug", "download_url")
    @classmethod
    def check_target(cls, value: Optional[str]) -> Optional[str]:
        return _reject_option_like(value)


class InstallationStatus(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: InstallPhase = "pending"
    errors: List[str] = Field(default_factory=list)


# ------------------------------------------------------------------------------
# API models
# ------------------------------------------------------------------------------

class InstallRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    type: PackageType
    slug: str
    download_url: Optional[str] = None

    @field_validator("slug", "download_url")
    @classmethod
    def check_target(cls, value: Optional[str]) -> Optional[str]:
        return _reject_option_like(value)

    @property
    def target(self) -> str:
        """What WP-CLI installs: the download URL when given, else the slug."""
        return self.download_url or self.slug


class EnqueueRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: List[QueueItem] = Field(default_factory=list)


class WizardResponse(BaseModel):
    """
    JSON envelope returned by every wizard endpoint.

    Failures are still HTTP 200; `success` carries the outcome.
    """
    success: bool
    data: Optional[Any] = None

    @classmethod
    def ok(cls, data: Any = None) -> "WizardResponse":
        return cls(success=True, data=data)

    @classmethod
    def error(cls, data: Any = None) -> "WizardResponse":
        return cls(success=False, data=data)
