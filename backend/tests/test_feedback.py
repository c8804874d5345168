import datetime

from sqlalchemy import select

from conftest import register_and_sign_in
from feedback import CreateFeedbackParams, create_feedback, get_feedback_by_interview_id
from generation import GenerationError
from models import Feedback, Interview

TRANSCRIPT = [
    {"role": "assistant", "content": "Hi"},
    {"role": "user", "content": "Hello"},
]


def _params(feedback_id=None):
    return CreateFeedbackParams(
        interview_id="int-1",
        user_id="u1",
        transcript=TRANSCRIPT,
        feedback_id=feedback_id,
    )


def _all_feedback(run_db):
    async def load(db):
        return (await db.execute(select(Feedback))).scalars().all()

    return run_db(load)


def test_create_feedback_formats_transcript_and_saves(run_db, generator):
    result = run_db(create_feedback, generator, _params())

    assert result["success"] is True
    [call] = generator.calls
    assert "- assistant: Hi\n- user: Hello\n" in call["prompt"]
    assert call["system"].startswith("You are a professional interviewer")

    [row] = _all_feedback(run_db)
    assert row.id == result["feedbackId"]
    assert row.total_score == 72
    assert [c["name"] for c in row.category_scores] == [
        "Communication Skills",
        "Technical Knowledge",
        "Problem Solving",
        "Cultural Fit",
        "Confidence and Clarity",
    ]
    assert row.areas_for_improvement == ["Go deeper on trade-offs"]


def test_same_feedback_id_overwrites(run_db, generator):
    first = run_db(create_feedback, generator, _params(feedback_id="fb-1"))
    generator.assessment = dict(generator.assessment, totalScore=90, finalAssessment="Much better.")
    second = run_db(create_feedback, generator, _params(feedback_id="fb-1"))

    assert first == second == {"success": True, "feedbackId": "fb-1"}
    [row] = _all_feedback(run_db)
    assert row.total_score == 90
    assert row.final_assessment == "Much better."


def test_missing_feedback_id_creates_new_rows(run_db, generator):
    first = run_db(create_feedback, generator, _params())
    second = run_db(create_feedback, generator, _params())

    assert first["feedbackId"] != second["feedbackId"]
    assert len(_all_feedback(run_db)) == 2


def test_generation_failure_reports_unsuccessful(run_db, generator):
    generator.error = GenerationError("quota exceeded")
    assert run_db(create_feedback, generator, _params()) == {"success": False}
    assert _all_feedback(run_db) == []


def test_invalid_structured_output_reports_unsuccessful(run_db, generator):
    generator.assessment = dict(generator.assessment, categoryScores=[])
    assert run_db(create_feedback, generator, _params()) == {"success": False}


def test_get_feedback_by_interview_and_user(run_db, generator):
    run_db(create_feedback, generator, _params(feedback_id="fb-1"))

    found = run_db(get_feedback_by_interview_id, "int-1", "u1")
    assert found.id == "fb-1"
    assert run_db(get_feedback_by_interview_id, "int-1", "someone-else") is None


def _seed_interview(run_db, user_id):
    async def insert(db):
        db.add(Interview(
            id="int-1",
            role="Backend Engineer",
            level="Senior",
            type="Mix",
            techstack=["Go", "Postgres"],
            questions=["Q1", "Q2"],
            user_id=user_id,
            finalized=True,
            cover_image="/covers/amazon.png",
            created_at=datetime.datetime(2024, 4, 1, 10, 0),
        ))
        await db.commit()

    run_db(insert)


def test_feedback_route_uses_session_user(client, generator, run_db):
    uid = register_and_sign_in(client)
    _seed_interview(run_db, uid)

    response = client.post("/api/feedback", json={"interviewId": "int-1", "transcript": TRANSCRIPT, "userId": "spoofed"})
    assert response.json()["success"] is True

    [row] = _all_feedback(run_db)
    assert row.user_id == uid

    detail = client.get("/api/interviews/int-1/feedback").json()
    assert detail["totalScore"] == 72
    assert detail["role"] == "Backend Engineer"

    dashboard = client.get("/api/dashboard").json()
    [card] = dashboard["userInterviews"]
    assert card["type"] == "Mixed"
    assert card["score"] == 72
    assert card["action"]["label"] == "Check Feedback"
    assert dashboard["latestInterviews"] == []


def test_feedback_route_requires_auth(client):
    response = client.post("/api/feedback", json={"interviewId": "int-1", "transcript": TRANSCRIPT})
    assert response.status_code == 401


def test_interview_page_not_found(client):
    register_and_sign_in(client)
    assert client.get("/api/interviews/missing").status_code == 404
    assert client.get("/api/interviews/missing/feedback").status_code == 404
