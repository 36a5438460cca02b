"""triageflow: author branching triage protocols and walk them one answer at a time."""

__version__ = "0.1.0"

from triage_flow.core.models import Edge, Node, Outcome, ProtocolGraph
from triage_flow.core.authoring import AuthoringSession
from triage_flow.core.traversal import Session, advance, start_session, step_back

__all__ = [
    "AuthoringSession",
    "Edge",
    "Node",
    "Outcome",
    "ProtocolGraph",
    "Session",
    "__version__",
    "advance",
    "start_session",
    "step_back",
]
