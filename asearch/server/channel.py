"""Message channel between the search panel and the name index.

Panel -> core messages are a closed tagged union keyed by ``command``; each
kind has its own handler that returns the replies to post back and, for
``open``, the location the host should open. Unknown or malformed messages
are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .state import StateManager

logger = logging.getLogger(__name__)


class DoSearchMessage(BaseModel):
    command: Literal["doSearch"]
    text: str = ""


class OpenMessage(BaseModel):
    command: Literal["open"]
    path: str


class AckMessage(BaseModel):
    command: Literal["ok"]


class FilesFoundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    command: Literal["filesFound"] = "filesFound"
    files_found: List[str] = Field(default_factory=list, alias="filesFound")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


IncomingMessage = Annotated[
    Union[DoSearchMessage, OpenMessage, AckMessage],
    Field(discriminator="command"),
]

_incoming = TypeAdapter(IncomingMessage)


@dataclass
class ChannelResult:
    replies: List[dict] = field(default_factory=list)
    open: Optional[str] = None

    def to_payload(self) -> dict:
        return {"replies": self.replies, "open": self.open}


def parse_message(payload: Any) -> Optional[BaseModel]:
    try:
        return _incoming.validate_python(payload)
    except ValidationError as exc:
        logger.debug("Ignoring channel message %r: %s", payload, exc.errors()[0].get("msg"))
        return None


def _on_search(state: StateManager, message: DoSearchMessage) -> ChannelResult:
    found = state.search(message.text)
    return ChannelResult(replies=[FilesFoundMessage(files_found=found).to_wire()])


def _on_open(state: StateManager, message: OpenMessage) -> ChannelResult:
    return ChannelResult(open=message.path)


def _on_ack(state: StateManager, message: AckMessage) -> ChannelResult:
    return ChannelResult()


_HANDLERS: Dict[type, Callable[[StateManager, Any], ChannelResult]] = {
    DoSearchMessage: _on_search,
    OpenMessage: _on_open,
    AckMessage: _on_ack,
}


def handle_message(state: StateManager, payload: Any) -> ChannelResult:
    message = parse_message(payload)
    if message is None:
        return ChannelResult()
    return _HANDLERS[type(message)](state, message)
