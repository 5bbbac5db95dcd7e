"""Flow import documents (JSON)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .schema import EntityReferencePayload, FlowFileDocument, FlowPayload
from .translator import translate_flow, translate_flow_file, translate_reference

if TYPE_CHECKING:
    from pathlib import Path


def load_flow_file(path: Path) -> FlowFileDocument:
    """Read and validate a flow import document.

    Raises ``pydantic.ValidationError`` when the document is malformed.
    """

    return FlowFileDocument.model_validate_json(path.read_text(encoding="utf-8"))


__all__ = [
    "EntityReferencePayload",
    "FlowFileDocument",
    "FlowPayload",
    "load_flow_file",
    "translate_flow",
    "translate_flow_file",
    "translate_reference",
]
