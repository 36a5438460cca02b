"""Identity of the local operating-system user, for command-line use."""

from __future__ import annotations

import getpass
from typing import Optional

from triage_flow.adapters.base import BaseIdentityContext


class LocalIdentity(BaseIdentityContext):
    """The user running the process.

    Args:
        principal: Name to act as. Defaults to the login name.
        read_only: Refuse every save when True.
    """

    def __init__(self, principal: Optional[str] = None, read_only: bool = False) -> None:
        self._principal = principal or getpass.getuser()
        self._read_only = read_only

    @property
    def principal(self) -> str:
        return self._principal

    def can_save(self, graph_id: Optional[str]) -> bool:
        return not self._read_only
