"""Endpoint-pair matching for batch add/restore.

A flow's dedup key is its ``(source, target)`` identity, where each endpoint is
identified by ``(kind, id)``. Surrogate ids, timestamps, lifecycle and resolved
names play no part in matching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from flowregistry.domain.model import EntityIdentity, EntityReference, LogicalFlow

type EndpointKey = tuple[EntityIdentity, EntityIdentity]


def endpoint_key(source: EntityReference, target: EntityReference) -> EndpointKey:
    return (source.identity, target.identity)


def flow_key(flow: LogicalFlow) -> EndpointKey:
    return endpoint_key(flow.source, flow.target)


def same_endpoints(first: LogicalFlow, second: LogicalFlow) -> bool:
    return flow_key(first) == flow_key(second)


def index_by_endpoints(flows: Iterable[LogicalFlow]) -> dict[EndpointKey, LogicalFlow]:
    """Key flows by endpoint pair; a later flow with the same pair wins."""

    return {flow_key(flow): flow for flow in flows}


def exclude_matching(
    flows: Iterable[LogicalFlow],
    existing: Collection[EndpointKey],
) -> list[LogicalFlow]:
    """Return the flows whose endpoint pair is not in ``existing``, keeping order."""

    return [flow for flow in flows if flow_key(flow) not in existing]
