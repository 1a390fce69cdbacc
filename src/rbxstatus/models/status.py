"""Status data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class StatusState(str, Enum):
    """Discrete status classification."""

    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    PARTIAL = "partial"
    OUTAGE = "outage"


class Component(BaseModel):
    """One monitored Roblox sub-service."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    category: str = ""
    status: str
    weight: int = Field(ge=0, le=100)
    updated: str | None = None

    @model_serializer(mode="wrap")
    def _drop_empty_fields(self, handler):
        data = handler(self)
        if not self.category:
            data.pop("category", None)
        if self.updated is None:
            data.pop("updated", None)
        return data


class HealthSummary(BaseModel):
    """Aggregate health score derived from component weights."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    percent: int = Field(ge=0, le=100)
    emoji: str
    state: StatusState


class IncidentSummary(BaseModel):
    """Active incident signal."""

    model_config = ConfigDict(frozen=True)

    active: bool
    count: int = Field(ge=0)
    message: str


class StatusSummary(BaseModel):
    """Final status shown to callers."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    text: str
    emoji: str
    state: StatusState


class Timestamp(BaseModel):
    """Snapshot of "now" rendered for one timezone."""

    model_config = ConfigDict(frozen=True)

    time: str
    timezone: str
    full: str
    iso: str
    unix: int


class ResultMeta(BaseModel):
    """Provenance of a status result."""

    model_config = ConfigDict(frozen=True)

    official: bool = True
    source: str
    scrape_duration: int | None = Field(default=None, serialization_alias="scrapeDuration")


class StatusResult(BaseModel):
    """Normalized status snapshot, cached and wrapped in an envelope."""

    model_config = ConfigDict(frozen=True)

    status: StatusSummary
    health: HealthSummary
    components: list[Component]
    incidents: IncidentSummary
    updated: Timestamp
    meta: ResultMeta
