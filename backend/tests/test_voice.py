import pytest
from pydantic import ValidationError

from voice import (
    FunctionCallMessage,
    FunctionCallResultMessage,
    MessageRole,
    TranscriptMessage,
    TranscriptType,
    parse_message,
)


def test_parse_transcript():
    message = parse_message({"type": "transcript", "role": "user", "transcriptType": "final", "transcript": "Hi"})
    assert isinstance(message, TranscriptMessage)
    assert message.role == MessageRole.USER
    assert message.transcript_type == TranscriptType.FINAL
    assert message.transcript == "Hi"


def test_parse_function_call():
    message = parse_message({"type": "function-call", "functionCall": {"name": "generate", "parameters": {"amount": 5}}})
    assert isinstance(message, FunctionCallMessage)
    assert message.function_call.name == "generate"
    assert message.function_call.parameters == {"amount": 5}


def test_parse_function_call_result_keeps_extra_fields():
    message = parse_message({
        "type": "function-call-result",
        "functionCallResult": {"forwardToClientEnabled": True, "result": "ok", "name": "generate"},
    })
    assert isinstance(message, FunctionCallResultMessage)
    assert message.function_call_result.forward_to_client_enabled is True
    assert message.function_call_result.model_extra == {"name": "generate"}


def test_unknown_kinds_are_ignored():
    assert parse_message({"type": "status-update", "status": "ended"}) is None
    assert parse_message({}) is None


def test_invalid_transcript_raises():
    with pytest.raises(ValidationError):
        parse_message({"type": "transcript", "role": "robot", "transcriptType": "final", "transcript": "x"})
