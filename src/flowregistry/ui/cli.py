from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from flowregistry.app import (
    cleanup_orphan_flows,
    cleanup_self_referencing_flows,
    import_flows,
    list_flows,
    reconcile,
    remove_flow,
    restore_flow,
)
from flowregistry.config import configure_logging
from flowregistry.domain.model import EntityReference

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage logical flows between entities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Add flows from a JSON document")
    import_cmd.add_argument("path", type=Path, help="Path to the flow import document")
    import_cmd.add_argument("--user", type=str, required=True, help="User recorded on the flows")

    remove = subparsers.add_parser("remove", help="Mark a flow as removed")
    remove.add_argument("flow_id", type=int, help="Id of the flow to remove")
    remove.add_argument("--user", type=str, required=True, help="User recorded on the flow")

    restore = subparsers.add_parser("restore", help="Reactivate a removed flow")
    restore.add_argument("flow_id", type=int, help="Id of the flow to restore")
    restore.add_argument("--user", type=str, required=True, help="User recorded on the flow")

    list_cmd = subparsers.add_parser("list", help="List active flows touching an entity")
    list_cmd.add_argument(
        "entity",
        type=str,
        help="Entity reference as KIND:ID, e.g. APPLICATION:12",
    )

    subparsers.add_parser("cleanup-orphans", help="Remove flows to inactive applications")
    subparsers.add_parser("cleanup-self-references", help="Remove self-referencing flows")
    subparsers.add_parser("reconcile", help="Run every cleanup sweep")

    return parser.parse_args(list(argv))


def _run(parsed_args: argparse.Namespace) -> None:
    command = parsed_args.command
    if command == "import":
        stored = import_flows(parsed_args.path, user=parsed_args.user)
        log.info("Imported %s flow(s)", len(stored))
    elif command == "remove":
        removed = remove_flow(parsed_args.flow_id, user=parsed_args.user)
        log.info("Flow %s removed: %s", parsed_args.flow_id, removed)
    elif command == "restore":
        restored = restore_flow(parsed_args.flow_id, user=parsed_args.user)
        log.info("Flow %s restored: %s", parsed_args.flow_id, restored)
    elif command == "list":
        reference = EntityReference.parse(parsed_args.entity)
        for flow in list_flows(reference):
            log.info(
                "%s: %s (%s) -> %s (%s) [%s]",
                flow.id,
                flow.source,
                flow.source.name or "?",
                flow.target,
                flow.target.name or "?",
                flow.provenance,
            )
    elif command == "cleanup-orphans":
        cleanup_orphan_flows()
    elif command == "cleanup-self-references":
        cleanup_self_referencing_flows()
    elif command == "reconcile":
        reconcile()
    else:
        raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        _run(parsed_args)
    except ValueError:
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
