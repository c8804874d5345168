"""Voice agent messages and the browser-side SDK bridge.

The voice call itself runs in the browser SDK. The backend drives it over a
WebSocket: it sends ``start``/``stop``/``navigate`` frames and receives the
SDK's lifecycle events (``call-start``, ``call-end``, ``speech-start``,
``speech-end``, ``message``, ``error``) as JSON frames.
"""
import logging
import os
from enum import Enum
from typing import Annotated, Any, Literal, Protocol, Union

from fastapi import WebSocket
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

logger = logging.getLogger(__name__)


class MessageRole(str, Enum):
    USER = "user"
    SYSTEM = "system"
    ASSISTANT = "assistant"


class TranscriptType(str, Enum):
    PARTIAL = "partial"
    FINAL = "final"


class _SdkMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TranscriptMessage(_SdkMessage):
    type: Literal["transcript"]
    role: MessageRole
    transcript_type: TranscriptType = Field(alias="transcriptType")
    transcript: str


class FunctionCall(BaseModel):
    name: str
    parameters: Any = None


class FunctionCallMessage(_SdkMessage):
    type: Literal["function-call"]
    function_call: FunctionCall = Field(alias="functionCall")


class FunctionCallResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    forward_to_client_enabled: bool | None = Field(default=None, alias="forwardToClientEnabled")
    result: Any = None


class FunctionCallResultMessage(_SdkMessage):
    type: Literal["function-call-result"]
    function_call_result: FunctionCallResult = Field(alias="functionCallResult")


Message = Annotated[
    Union[TranscriptMessage, FunctionCallMessage, FunctionCallResultMessage],
    Field(discriminator="type"),
]

MESSAGE_TYPES = {"transcript", "function-call", "function-call-result"}

_message_adapter = TypeAdapter(Message)


def parse_message(raw: dict) -> TranscriptMessage | FunctionCallMessage | FunctionCallResultMessage | None:
    """Parse an SDK message, returning None for kinds this app does not handle."""
    if raw.get("type") not in MESSAGE_TYPES:
        return None
    return _message_adapter.validate_python(raw)


class VoiceAgent(Protocol):
    async def start(
        self,
        *,
        assistant: dict | None = None,
        workflow_id: str | None = None,
        variable_values: dict | None = None,
    ) -> None: ...

    async def stop(self) -> None: ...

    async def navigate(self, path: str) -> None: ...


class BrowserVoiceAgent:
    """VoiceAgent that forwards commands to the browser SDK over a WebSocket."""

    def __init__(self, ws: WebSocket):
        self._ws = ws
        self.connected = True

    async def start(
        self,
        *,
        assistant: dict | None = None,
        workflow_id: str | None = None,
        variable_values: dict | None = None,
    ) -> None:
        await self._send({
            "type": "start",
            "webToken": os.getenv("VAPI_WEB_TOKEN") or os.getenv("NEXT_PUBLIC_VAPI_WEB_TOKEN"),
            "assistant": assistant,
            "workflowId": workflow_id,
            "assistantOverrides": {"variableValues": variable_values or {}},
        })

    async def stop(self) -> None:
        await self._send({"type": "stop"})

    async def navigate(self, path: str) -> None:
        await self._send({"type": "navigate", "path": path})

    async def _send(self, frame: dict) -> None:
        if not self.connected:
            logger.info("[WS] Client gone, dropping %s frame", frame["type"])
            return
        await self._ws.send_json(frame)
