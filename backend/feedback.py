import logging
import os

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from generation import DEFAULT_MODEL, GenerationService
from models import Feedback, new_document_id, utcnow
from prompts import FEEDBACK_SYSTEM_PROMPT, FeedbackAssessment, build_feedback_prompt, format_transcript

logger = logging.getLogger(__name__)


class TranscriptTurn(BaseModel):
    role: str
    content: str


class CreateFeedbackParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    interview_id: str
    user_id: str
    transcript: list[TranscriptTurn]
    feedback_id: str | None = None


async def create_feedback(db: AsyncSession, generator: GenerationService, params: CreateFeedbackParams) -> dict:
    try:
        formatted = format_transcript([turn.model_dump() for turn in params.transcript])
        assessment = await generator.generate_object(
            build_feedback_prompt(formatted),
            FeedbackAssessment,
            model=os.getenv("FEEDBACK_MODEL", DEFAULT_MODEL),
            system=FEEDBACK_SYSTEM_PROMPT,
        )

        feedback = Feedback(
            id=params.feedback_id or new_document_id(),
            interview_id=params.interview_id,
            user_id=params.user_id,
            total_score=assessment.total_score,
            category_scores=[c.model_dump() for c in assessment.category_scores],
            strengths=assessment.strengths,
            areas_for_improvement=assessment.areas_for_improvement,
            final_assessment=assessment.final_assessment,
            created_at=utcnow(),
        )
        # merge() overwrites an existing row with the same id, or inserts
        feedback = await db.merge(feedback)
        await db.commit()
        logger.info("[FEEDBACK] Saved feedback id=%s for interview=%s", feedback.id, params.interview_id)
        return {"success": True, "feedbackId": feedback.id}
    except Exception:
        logger.exception("[FEEDBACK] Error saving feedback for interview=%s", params.interview_id)
        await db.rollback()
        return {"success": False}


async def get_feedback_by_interview_id(db: AsyncSession, interview_id: str, user_id: str) -> Feedback | None:
    result = await db.execute(
        select(Feedback)
        .where(Feedback.interview_id == interview_id, Feedback.user_id == user_id)
        .limit(1)
    )
    return result.scalars().first()
