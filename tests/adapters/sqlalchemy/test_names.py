from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from flowregistry.adapters.sqlalchemy.mappings import logical_flow_table
from flowregistry.adapters.sqlalchemy.names import entity_name_field
from flowregistry.domain.model import EntityKind, EntityReference
from tests.helpers.flows import actor_ref, app_ref, insert_actor, insert_application, make_flow

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from flowregistry.adapters.sqlalchemy.repositories import SqlAlchemyLogicalFlowRepository


def test_flows_are_read_with_endpoint_names(
    flow_repository: SqlAlchemyLogicalFlowRepository,
    sqlite_session: Session,
) -> None:
    insert_application(sqlite_session, 1, "Payments")
    insert_actor(sqlite_session, 2, "Ops Desk")
    flow_repository.add_flow(make_flow(app_ref(1), actor_ref(2)))

    (flow,) = flow_repository.find_by_entity_reference(app_ref(1))

    assert flow.source.name == "Payments"
    assert flow.target.name == "Ops Desk"


def test_names_are_resolved_by_kind(
    flow_repository: SqlAlchemyLogicalFlowRepository,
    sqlite_session: Session,
) -> None:
    insert_application(sqlite_session, 3, "Ledger")
    insert_actor(sqlite_session, 3, "Auditor")
    flow_repository.add_flow(make_flow(actor_ref(3), app_ref(3)))

    (flow,) = flow_repository.find_all_active()

    assert flow.source.name == "Auditor"
    assert flow.target.name == "Ledger"


def test_unknown_entities_and_unnamed_kinds_have_no_name(
    flow_repository: SqlAlchemyLogicalFlowRepository,
) -> None:
    end_user_app = EntityReference(kind=EntityKind.END_USER_APPLICATION, id=1)
    flow_repository.add_flow(make_flow(app_ref(404), end_user_app))

    (flow,) = flow_repository.find_all_active()

    assert flow.source.name is None
    assert flow.target.name is None


def test_name_field_restricted_to_listed_kinds(
    flow_repository: SqlAlchemyLogicalFlowRepository,
    sqlite_session: Session,
) -> None:
    insert_application(sqlite_session, 1, "Payments")
    insert_actor(sqlite_session, 2, "Ops Desk")
    flow_repository.add_flow(make_flow(app_ref(1), actor_ref(2)))
    flow = logical_flow_table.c

    stmt = select(
        entity_name_field(flow.source_entity_id, flow.source_entity_kind, [EntityKind.ACTOR]),
        entity_name_field(flow.target_entity_id, flow.target_entity_kind, [EntityKind.ACTOR]),
    )

    assert sqlite_session.execute(stmt).one() == (None, "Ops Desk")
