"""Events passed between the stages that handle one client request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .querydefs import Query
from .server import SOCKET_BUFFER_SIZE, Connection


class SessionEvent:
    """A request received on a client connection, with the response to send back."""

    def __init__(self, client: Connection, request: str = "") -> None:
        self.client = client
        self.request = request
        self._response = ""

    @property
    def request_limit(self) -> int:
        """The most bytes a request may occupy, terminator included."""
        return SOCKET_BUFFER_SIZE

    @property
    def response(self) -> str:
        """The response text set so far."""
        return self._response

    def set_response(self, response: Union[str, bytes]) -> None:
        """Replace the response; bytes are taken as UTF-8."""
        if isinstance(response, (bytes, bytearray)):
            response = bytes(response).decode("utf-8", errors="replace")
        self._response = response

    def response_bytes(self) -> bytes:
        """The response as it goes over the wire, without a terminator."""
        return self._response.encode("utf-8")

    def __repr__(self) -> str:
        return f"SessionEvent(client={self.client!r}, request={self.request!r})"


@dataclass
class SQLStageEvent:
    """The SQL text of a session request on its way through the stages."""

    session_event: Optional[SessionEvent]
    sql: str


@dataclass
class ExecutionPlanEvent:
    """A parsed query ready to be executed for an SQL event."""

    sql_event: Optional[SQLStageEvent]
    sqls: Optional[Query]


@dataclass
class StorageEvent:
    """A request handed from execution to the storage layer."""

    exe_event: Optional[ExecutionPlanEvent]