from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from constants import FEEDBACK_CATEGORIES

CategoryName = Literal[
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
]


class CategoryScore(BaseModel):
    name: CategoryName
    score: int = Field(ge=0, le=100)
    comment: str


class FeedbackAssessment(BaseModel):
    """Structured output requested from the generation service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_score: int = Field(ge=0, le=100)
    category_scores: list[CategoryScore]
    strengths: list[str]
    areas_for_improvement: list[str]
    final_assessment: str

    @field_validator("category_scores")
    @classmethod
    def _fixed_categories(cls, value: list[CategoryScore]) -> list[CategoryScore]:
        names = tuple(c.name for c in value)
        if names != FEEDBACK_CATEGORIES:
            raise ValueError(f"expected categories {list(FEEDBACK_CATEGORIES)}, got {list(names)}")
        return value


FEEDBACK_SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories"
)


def build_question_prompt(role: str, level: str, techstack: str, focus: str, amount) -> str:
    return f"""Prepare questions for a job interview.
The job role is {role}.
The job experience level is {level}.
The tech stack used in the job is: {techstack}.
The focus between behavioural and technical questions should lean towards: {focus}.
The amount of questions required is: {amount}.
Please return only the questions, without any additional text.
The questions are going to be read by a voice assistant so do not use "/" or "*" or any other special characters which might break the voice assistant.
Return the questions formatted like this:
["Question 1", "Question 2", "Question 3"]

Thank you! <3
"""


def format_transcript(transcript: list[dict]) -> str:
    return "".join(f"- {turn['role']}: {turn['content']}\n" for turn in transcript)


def build_feedback_prompt(formatted_transcript: str) -> str:
    return f"""You are an AI interviewer analyzing a mock interview. Your task is to evaluate the candidate based on structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. If there are mistakes or areas for improvement, point them out.
Transcript:
{formatted_transcript}

Please score the candidate from 0 to 100 in the following areas. Do not add categories other than the ones provided:
- **Communication Skills**: Clarity, articulation, structured responses.
- **Technical Knowledge**: Understanding of key concepts for the role.
- **Problem-Solving**: Ability to analyze problems and propose solutions.
- **Cultural & Role Fit**: Alignment with company values and job role.
- **Confidence & Clarity**: Confidence in responses, engagement, and clarity.
"""
