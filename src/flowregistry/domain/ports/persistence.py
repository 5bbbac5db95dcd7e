"""Ports for persisting logical flows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from sqlalchemy import Select

    from flowregistry.domain.model import EntityReference, LogicalFlow

type EndpointPair = tuple[EntityReference, EntityReference]


@runtime_checkable
class LogicalFlowRepository(Protocol):
    """Persistence contract for logical flows.

    Lookups return ``None`` or an empty list when nothing matches; batch
    operations given an empty collection return ``[]`` without touching the
    store.
    """

    def find_by_entity_reference(self, ref: EntityReference) -> list[LogicalFlow]: ...

    def get_by_source_and_target(
        self, source: EntityReference, target: EntityReference
    ) -> LogicalFlow | None: ...

    def find_by_sources_and_targets(self, pairs: Sequence[EndpointPair]) -> list[LogicalFlow]: ...

    def find_upstream_flows_for_entity_references(
        self, refs: Sequence[EntityReference]
    ) -> list[LogicalFlow]: ...

    def remove_flow(self, flow_id: int, user: str) -> int: ...

    def add_flow(self, flow: LogicalFlow) -> LogicalFlow: ...

    def add_flows(self, flows: Sequence[LogicalFlow], user: str) -> list[LogicalFlow]: ...

    def restore_flow(self, flow_id: int, user: str) -> bool: ...

    def get_by_flow_id(self, flow_id: int) -> LogicalFlow | None: ...

    def find_all_active(self) -> list[LogicalFlow]: ...

    def find_active_by_flow_ids(self, flow_ids: Collection[int]) -> list[LogicalFlow]: ...

    def find_all_by_flow_ids(self, flow_ids: Collection[int]) -> list[LogicalFlow]: ...

    def find_by_selector(self, selector: Select[Any]) -> list[LogicalFlow]: ...

    def cleanup_orphans(self) -> int: ...

    def cleanup_self_referencing_flows(self) -> int: ...
