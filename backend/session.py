import logging
import os
from enum import Enum
from typing import Awaitable, Callable

from pydantic import ValidationError

from constants import INTERVIEWER_ASSISTANT
from feedback import CreateFeedbackParams, TranscriptTurn
from voice import FunctionCallMessage, TranscriptMessage, TranscriptType, VoiceAgent, parse_message

logger = logging.getLogger(__name__)


class CallStatus(str, Enum):
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class SessionMode(str, Enum):
    GENERATE = "generate"
    INTERVIEW = "interview"


FeedbackSubmitter = Callable[[CreateFeedbackParams], Awaitable[dict]]


def format_questions(questions: list[str]) -> str:
    return "\n".join(f"- {q}" for q in questions)


class SessionOrchestrator:
    """Drives a single voice call from start to feedback."""

    def __init__(
        self,
        agent: VoiceAgent,
        *,
        mode: SessionMode,
        user_name: str,
        user_id: str,
        submit_feedback: FeedbackSubmitter,
        interview_id: str | None = None,
        feedback_id: str | None = None,
        questions: list[str] | None = None,
    ):
        if mode == SessionMode.INTERVIEW and not interview_id:
            raise ValueError("interview mode requires an interview_id")
        self.agent = agent
        self.mode = mode
        self.user_name = user_name
        self.user_id = user_id
        self.interview_id = interview_id
        self.feedback_id = feedback_id
        self.questions = questions or []
        self._submit_feedback = submit_feedback

        self.status = CallStatus.INACTIVE
        self.messages: list[TranscriptTurn] = []
        self.is_speaking = False
        self.feedback_result: dict | None = None

    @property
    def finished(self) -> bool:
        return self.status == CallStatus.FINISHED

    @property
    def last_message(self) -> str | None:
        return self.messages[-1].content if self.messages else None

    async def start(self) -> None:
        if self.status != CallStatus.INACTIVE:
            raise RuntimeError(f"Cannot start a session in state {self.status.value}")
        self.status = CallStatus.CONNECTING

        if self.mode == SessionMode.GENERATE:
            await self.agent.start(
                workflow_id=os.getenv("VAPI_WORKFLOW_ID"),
                variable_values={"username": self.user_name, "userid": self.user_id},
            )
        else:
            await self.agent.start(
                assistant=INTERVIEWER_ASSISTANT,
                variable_values={"questions": format_questions(self.questions)},
            )

    async def stop(self) -> None:
        if self.finished:
            return
        await self.agent.stop()
        await self._finish(navigate=True)

    async def handle_disconnect(self) -> None:
        """The client went away mid-call; finish without navigating."""
        await self._finish(navigate=False)

    async def handle_event(self, event: dict) -> None:
        kind = event.get("type")
        if kind == "call-start":
            if self.status == CallStatus.CONNECTING:
                self.status = CallStatus.ACTIVE
        elif kind == "call-end":
            await self._finish(navigate=True)
        elif kind == "speech-start":
            self.is_speaking = True
        elif kind == "speech-end":
            self.is_speaking = False
        elif kind == "message":
            self._handle_message(event.get("message") or {})
        elif kind == "error":
            logger.error("[SESSION] Voice agent error: %s", event.get("error"))
            await self._finish(navigate=True)
        else:
            logger.debug("[SESSION] Ignoring event type=%s", kind)

    def _handle_message(self, raw) -> None:
        if not isinstance(raw, dict):
            logger.warning("[SESSION] Ignoring message that is not an object: %r", raw)
            return
        try:
            message = parse_message(raw)
        except ValidationError as e:
            logger.warning("[SESSION] Malformed %s message: %s", raw.get("type"), e)
            return

        if isinstance(message, TranscriptMessage):
            if message.transcript_type == TranscriptType.FINAL:
                self.messages.append(TranscriptTurn(role=message.role.value, content=message.transcript))
        elif isinstance(message, FunctionCallMessage):
            logger.info("[SESSION] Agent called function %s", message.function_call.name)
        elif message is not None:
            logger.debug("[SESSION] Function call result received")

    async def _finish(self, navigate: bool) -> None:
        if self.finished:
            return
        self.status = CallStatus.FINISHED
        logger.info(
            "[SESSION] Call finished mode=%s user=%s turns=%d",
            self.mode.value, self.user_id, len(self.messages),
        )

        if self.mode == SessionMode.GENERATE:
            if navigate:
                await self.agent.navigate("/")
            return

        self.feedback_result = await self._submit_feedback(
            CreateFeedbackParams(
                interview_id=self.interview_id,
                user_id=self.user_id,
                transcript=list(self.messages),
                feedback_id=self.feedback_id,
            )
        )
        if not navigate:
            return
        if self.feedback_result.get("success") and self.feedback_result.get("feedbackId"):
            await self.agent.navigate(f"/interview/{self.interview_id}/feedback")
        else:
            logger.warning("[SESSION] Error saving feedback for interview=%s", self.interview_id)
            await self.agent.navigate("/")
