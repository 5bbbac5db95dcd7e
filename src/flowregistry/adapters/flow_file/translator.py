"""Translate validated flow import documents into domain flows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowregistry.domain.model import (
    DEFAULT_PROVENANCE,
    EntityReference,
    LogicalFlow,
    utcnow,
)

if TYPE_CHECKING:
    from datetime import datetime

    from .schema import EntityReferencePayload, FlowFileDocument, FlowPayload


def translate_reference(payload: EntityReferencePayload) -> EntityReference:
    return EntityReference(kind=payload.kind, id=payload.id)


def translate_flow(payload: FlowPayload, *, user: str, at: datetime) -> LogicalFlow:
    return LogicalFlow(
        source=translate_reference(payload.source),
        target=translate_reference(payload.target),
        last_updated_by=user,
        last_updated_at=at,
        provenance=payload.provenance or DEFAULT_PROVENANCE,
    )


def translate_flow_file(
    document: FlowFileDocument,
    *,
    user: str,
    at: datetime | None = None,
) -> list[LogicalFlow]:
    """Build flows for every entry, stamped with one user and one timestamp."""

    stamp = at or utcnow()
    return [translate_flow(payload, user=user, at=stamp) for payload in document.flows]
