"""Pydantic models for JSON flow import documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from flowregistry.domain.model import EntityKind  # noqa: TC001


class FlowFileBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class EntityReferencePayload(FlowFileBaseModel):
    kind: EntityKind
    id: int = Field(gt=0)


class FlowPayload(FlowFileBaseModel):
    source: EntityReferencePayload
    target: EntityReferencePayload
    provenance: str | None = Field(default=None, min_length=1, max_length=64)


class FlowFileDocument(FlowFileBaseModel):
    flows: list[FlowPayload] = Field(default_factory=list["FlowPayload"])
