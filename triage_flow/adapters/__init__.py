from triage_flow.adapters.base import BaseIdentityContext
from triage_flow.adapters.local import LocalIdentity

__all__ = ["BaseIdentityContext", "LocalIdentity"]
