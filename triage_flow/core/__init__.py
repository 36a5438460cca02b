from triage_flow.core.authoring import AuthoringSession, PendingEdge
from triage_flow.core.config import ProtocolConfig
from triage_flow.core.graph import ValidationResult, Violation, validate_structure
from triage_flow.core.models import Edge, Node, Outcome, ProtocolGraph
from triage_flow.core.root import find_root, resolve_root
from triage_flow.core.traversal import Session, advance, start_session, step_back

__all__ = [
    "AuthoringSession",
    "Edge",
    "Node",
    "Outcome",
    "PendingEdge",
    "ProtocolConfig",
    "ProtocolGraph",
    "Session",
    "ValidationResult",
    "Violation",
    "advance",
    "find_root",
    "resolve_root",
    "start_session",
    "step_back",
    "validate_structure",
]
