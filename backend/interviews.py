import json
import logging
import os

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from generation import DEFAULT_MODEL, GenerationService
from models import Interview, utcnow
from prompts import build_question_prompt
from utils import get_random_interview_cover, split_techstack

logger = logging.getLogger(__name__)


class QuestionParseError(ValueError):
    pass


def parse_questions(text: str) -> list[str]:
    """Parse generated text that must be a bare JSON array of strings."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise QuestionParseError(f"Generated questions are not valid JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(q, str) for q in data):
        raise QuestionParseError("Generated questions must be a JSON array of strings")
    return data


async def generate_interview(
    db: AsyncSession,
    generator: GenerationService,
    *,
    type: str,
    role: str,
    level: str,
    techstack: str,
    amount,
    userid: str,
) -> Interview:
    prompt = build_question_prompt(role=role, level=level, techstack=techstack, focus=type, amount=amount)
    text = await generator.generate_text(prompt, model=os.getenv("QUESTION_MODEL", DEFAULT_MODEL))
    questions = parse_questions(text)

    interview = Interview(
        role=role,
        type=type,
        level=level,
        techstack=split_techstack(techstack),
        questions=questions,
        user_id=userid,
        finalized=True,
        cover_image=get_random_interview_cover(),
        created_at=utcnow(),
    )
    db.add(interview)
    await db.commit()
    await db.refresh(interview)
    logger.info("[GENERATE] Saved interview id=%s with %d questions for user=%s", interview.id, len(questions), userid)
    return interview


async def get_interview_by_id(db: AsyncSession, interview_id: str) -> Interview | None:
    return await db.get(Interview, interview_id)


async def get_latest_interviews(db: AsyncSession, user_id: str, limit: int = 20) -> list[Interview]:
    result = await db.execute(
        select(Interview)
        .where(Interview.finalized.is_(True), Interview.user_id != user_id)
        .order_by(Interview.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_interviews_by_user_id(db: AsyncSession, user_id: str) -> list[Interview]:
    result = await db.execute(
        select(Interview)
        .where(Interview.user_id == user_id)
        .order_by(Interview.created_at.desc())
    )
    return list(result.scalars().all())
