"""Abstract base class for identity contexts.

An identity context tells the core who is performing an authoring action
and whether that action is allowed. Roles, tokens and tenant scoping live
behind this interface; the core only asks the question.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class BaseIdentityContext(ABC):
    """Interface that all identity adapters must implement."""

    @property
    @abstractmethod
    def principal(self) -> str:
        """Name of the user or service acting, used in logs and errors."""

    @abstractmethod
    def can_save(self, graph_id: Optional[str]) -> bool:
        """Return True if the principal may save the protocol.

        ``graph_id`` is None when a new protocol is being created.
        """
