import datetime
import re

from constants import DEFAULT_BADGE, INTERVIEW_TYPE_BADGES
from models import Feedback, Interview
from utils import get_random_interview_cover, get_tech_logos

_MIX_RE = re.compile("mix", re.IGNORECASE)

NOT_TAKEN_MESSAGE = "You haven't taken this interview yet. Take it now to improve your skills."


def normalize_type(interview_type: str) -> str:
    """Collapse any "mix"-style type ("mix", "MIXED", "Mixed focus") into "Mixed"."""
    return "Mixed" if _MIX_RE.search(interview_type or "") else interview_type


def badge_color(interview_type: str) -> str:
    return INTERVIEW_TYPE_BADGES.get(normalize_type(interview_type), DEFAULT_BADGE)


def format_date(value: datetime.datetime | None) -> str:
    value = value or datetime.datetime.now(datetime.timezone.utc)
    return f"{value:%b} {value.day}, {value.year}"


def _isoformat(value: datetime.datetime | None) -> str | None:
    return value.isoformat() if value else None


def feedback_to_dict(feedback: Feedback) -> dict:
    return {
        "id": feedback.id,
        "interviewId": feedback.interview_id,
        "userId": feedback.user_id,
        "totalScore": feedback.total_score,
        "categoryScores": feedback.category_scores,
        "strengths": feedback.strengths,
        "areasForImprovement": feedback.areas_for_improvement,
        "finalAssessment": feedback.final_assessment,
        "createdAt": _isoformat(feedback.created_at),
    }


def interview_to_dict(interview: Interview) -> dict:
    return {
        "id": interview.id,
        "role": interview.role,
        "level": interview.level,
        "type": interview.type,
        "techstack": interview.techstack,
        "questions": interview.questions,
        "userId": interview.user_id,
        "finalized": interview.finalized,
        "coverImage": interview.cover_image,
        "createdAt": _isoformat(interview.created_at),
    }


def interview_card(interview: Interview, feedback: Feedback | None = None) -> dict:
    display_type = normalize_type(interview.type)
    if feedback:
        href = f"/interview/{interview.id}/feedback"
        label = "Check Feedback"
    else:
        href = f"/interview/{interview.id}"
        label = "View Interview"

    return {
        "interviewId": interview.id,
        "role": interview.role,
        "type": display_type,
        "badgeColor": badge_color(display_type),
        "coverImage": interview.cover_image or get_random_interview_cover(),
        "date": format_date(feedback.created_at if feedback else interview.created_at),
        "score": feedback.total_score if feedback and feedback.total_score else "---",
        "summary": feedback.final_assessment if feedback else NOT_TAKEN_MESSAGE,
        "techIcons": get_tech_logos(interview.techstack or [])[:3],
        "action": {"label": label, "href": href},
    }


def interview_detail(interview: Interview) -> dict:
    return {
        **interview_to_dict(interview),
        "type": normalize_type(interview.type),
        "techIcons": get_tech_logos(interview.techstack or []),
    }


def feedback_detail(interview: Interview, feedback: Feedback) -> dict:
    return {
        **feedback_to_dict(feedback),
        "role": interview.role,
        "date": format_date(feedback.created_at),
        "retakeHref": f"/interview/{interview.id}",
    }
