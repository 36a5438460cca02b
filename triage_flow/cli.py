"""Command-line driver: validate, store and walk triage protocols."""

from __future__ import annotations

import argparse
import logging
import sys
import warnings
from typing import Callable, List, Optional, TextIO

from triage_flow.adapters.local import LocalIdentity
from triage_flow.core.authoring import AuthoringSession
from triage_flow.core.errors import AmbiguousRootWarning, TriageFlowError
from triage_flow.core.graph import validate_structure
from triage_flow.core.models import ProtocolGraph
from triage_flow.core.serialization import dump_graph, load_demo_protocol, load_graph
from triage_flow.core.traversal import (
    DeadEnd,
    OutcomeReached,
    Session,
    choose,
    restart,
    start_session,
    step_back,
)
from triage_flow.storage.sqlite import SQLiteGraphStore

logger = logging.getLogger(__name__)

DEFAULT_DB = "triageflow.db"


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="triageflow", description="Validate, store and walk triage protocols."
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite protocol store path.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Report structural problems in a JSON protocol.")
    validate.add_argument("file")

    imp = sub.add_parser("import", help="Save a JSON protocol into the store.")
    imp.add_argument("file")
    imp.add_argument("--id", dest="graph_id", default=None, help="Replace this stored protocol.")

    sub.add_parser("list", help="List stored protocols.")

    export = sub.add_parser("export", help="Write a stored protocol to a JSON file.")
    export.add_argument("graph_id")
    export.add_argument("file")

    nav = sub.add_parser("navigate", help="Walk a protocol interactively.")
    source = nav.add_mutually_exclusive_group(required=True)
    source.add_argument("file", nargs="?", default=None)
    source.add_argument("--id", dest="graph_id", default=None)
    source.add_argument(
        "--demo", action="store_true", help="Walk the bundled fever and respiratory protocol."
    )

    return parser.parse_args(argv)


# ── Commands ─────────────────────────────────────────────────────────


def cmd_validate(args: argparse.Namespace, out: TextIO) -> int:
    graph = load_graph(args.file)
    result = validate_structure(graph)
    for violation in result.violations:
        print(f"{violation.severity.upper():8} {violation.kind}: {violation.message}", file=out)
    status = "OK" if result.ok else "INVALID"
    print(
        f"{status}: {len(result.errors)} error(s), {len(result.warnings)} warning(s)",
        file=out,
    )
    return 0 if result.ok else 1


def cmd_import(args: argparse.Namespace, out: TextIO) -> int:
    graph = load_graph(args.file)
    result = validate_structure(graph)
    if not result.ok:
        for violation in result.errors:
            print(f"ERROR    {violation.kind}: {violation.message}", file=out)
        return 1
    store = SQLiteGraphStore(args.db)
    try:
        graph_id = AuthoringSession(graph=graph).save(store, LocalIdentity(), args.graph_id)
    finally:
        store.close()
    print(f"Saved '{graph.name}' as {graph_id}", file=out)
    return 0


def cmd_list(args: argparse.Namespace, out: TextIO) -> int:
    store = SQLiteGraphStore(args.db)
    try:
        summaries = store.list_summaries()
    finally:
        store.close()
    if not summaries:
        print("No protocols stored.", file=out)
    for summary in summaries:
        print(
            f"{summary.id}  {summary.name}  ({summary.node_count} nodes, "
            f"created {summary.created_at:%Y-%m-%d})",
            file=out,
        )
    return 0


def cmd_export(args: argparse.Namespace, out: TextIO) -> int:
    store = SQLiteGraphStore(args.db)
    try:
        graph = store.get(args.graph_id)
    finally:
        store.close()
    dump_graph(graph, args.file)
    print(f"Exported '{graph.name}' to {args.file}", file=out)
    return 0


def cmd_navigate(
    args: argparse.Namespace,
    out: TextIO,
    read: Optional[Callable[[str], str]] = None,
) -> int:
    if args.demo:
        graph = load_demo_protocol()
    elif args.file:
        graph = load_graph(args.file)
    else:
        store = SQLiteGraphStore(args.db)
        try:
            graph = store.get(args.graph_id)
        finally:
            store.close()
    return navigate(graph, out, read or input)


def navigate(graph: ProtocolGraph, out: TextIO, read: Callable[[str], str]) -> int:
    """Interactive loop.

    Returns 0 when the user leaves after an outcome or mid-assessment, 2 when
    they leave while stuck on a question without answers. At the outcome
    screen the user can still restart or step back.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", AmbiguousRootWarning)
        session = start_session(graph)
    if session.root_ambiguous:
        print(
            f"Warning: no unique first question, starting at '{session.current_node.id}'.",
            file=out,
        )

    while True:
        _render(session, out)
        if isinstance(session.state, OutcomeReached):
            print("r (restart), b (back) or q (quit)", file=out)
        try:
            answer = read("> ").strip().lower()
        except EOFError:
            answer = "q"
        if answer == "q":
            stuck = isinstance(session.state, DeadEnd) or session.is_stuck
            return 2 if stuck else 0
        if answer == "b":
            session = step_back(session)
        elif answer == "r":
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", AmbiguousRootWarning)
                session = restart(session)
        elif answer.isdigit() and not session.is_terminal:
            try:
                session = choose(session, int(answer) - 1)
            except TriageFlowError as exc:
                print(str(exc), file=out)
        else:
            print("Choose an option number, b (back), r (restart) or q (quit).", file=out)


def _render(session: Session, out: TextIO) -> None:
    node = session.current_node
    if isinstance(session.state, OutcomeReached):
        print(f"== {node.priority.headline} ({node.priority.value}) ==", file=out)
        print(f"Decision: {node.label}", file=out)
        return
    print(f"[{session.graph.name}] Step {session.step_number}", file=out)
    print(node.label, file=out)
    if isinstance(session.state, DeadEnd) or session.is_stuck:
        print("Warning: this question has no answers. The flow is broken.", file=out)
        return
    for number, edge in enumerate(session.options, start=1):
        print(f"  {number}. {edge.label or f'Option {number}'}", file=out)


_COMMANDS = {
    "validate": cmd_validate,
    "import": cmd_import,
    "list": cmd_list,
    "export": cmd_export,
    "navigate": cmd_navigate,
}


def main(argv: List[str] | None = None, out: Optional[TextIO] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    out = out or sys.stdout
    try:
        return _COMMANDS[args.command](args, out)
    except (TriageFlowError, ValueError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=out)
        return 1


if __name__ == "__main__":
    sys.exit(main())
