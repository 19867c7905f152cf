"""Per-connection session state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass
class Session:
    """State kept for one client connection.

    ``trx_multi_operation_mode`` tells whether the current transaction
    spans several statements; when false each statement commits on its own.
    """

    current_db: str = ""
    trx_multi_operation_mode: bool = False

    _default: ClassVar[Optional[Session]] = None

    @classmethod
    def default_session(cls) -> Session:
        """The shared session that new connections are copied from."""
        if cls._default is None:
            cls._default = cls()
        return cls._default

    def copy(self) -> Session:
        """A new session on the same database, in single-statement mode."""
        return Session(current_db=self.current_db)