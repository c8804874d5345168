from fastapi import FastAPI, Depends, HTTPException, Request, Response, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, Union
import json
import logging
import os
from dotenv import load_dotenv

load_dotenv()

from database import init_db, get_db
from models import User
from auth import (
    SESSION_COOKIE_NAME,
    get_current_user,
    session_cookie_options,
    sign_in,
    sign_up,
    user_to_dict,
)
from identity import EmailAlreadyExistsError, IdentityProvider, InvalidCredentialsError, get_identity
from generation import GenerationService, get_generator
from interviews import generate_interview, get_interview_by_id, get_interviews_by_user_id, get_latest_interviews
from feedback import CreateFeedbackParams, TranscriptTurn, create_feedback, get_feedback_by_interview_id
from session import SessionMode, SessionOrchestrator
from views import feedback_detail, interview_card, interview_detail
from voice import BrowserVoiceAgent

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] %(levelname)s %(name)s :: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="MockMate API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[os.getenv("FRONTEND_URL", "http://localhost:3000")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    await init_db()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


async def require_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
) -> User:
    user = await get_current_user(db, identity, request.cookies.get(SESSION_COOKIE_NAME))
    if not user:
        raise HTTPException(401, "Not authenticated")
    return user


# ── Identity (client-side credential step) ──────────────

class CredentialsRequest(BaseModel):
    email: str
    password: str


@app.post("/api/identity/accounts")
async def create_account(
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
):
    try:
        account = await identity.create_user(db, body.email, body.password)
    except EmailAlreadyExistsError:
        raise HTTPException(409, "This email is already in use")
    return {"uid": account.uid}


@app.post("/api/identity/tokens")
async def issue_id_token(
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
):
    try:
        id_token = await identity.sign_in_with_password(db, body.email, body.password)
    except InvalidCredentialsError:
        raise HTTPException(401, "Invalid email or password")
    return {"idToken": id_token}


# ── Auth ─────────────────────────────────────────────────

class SignUpRequest(BaseModel):
    uid: str
    name: str
    email: str


class SignInRequest(CamelModel):
    email: str
    id_token: str


@app.post("/api/auth/sign-up")
async def auth_sign_up(body: SignUpRequest, db: AsyncSession = Depends(get_db)):
    return await sign_up(db, body.uid, body.name, body.email)


@app.post("/api/auth/sign-in")
async def auth_sign_in(
    body: SignInRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
):
    result, cookie = await sign_in(db, identity, body.email, body.id_token)
    if cookie:
        response.set_cookie(SESSION_COOKIE_NAME, cookie, **session_cookie_options())
    return result


@app.post("/api/auth/sign-out")
async def auth_sign_out(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"success": True}


@app.get("/api/auth/session")
async def auth_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
):
    user = await get_current_user(db, identity, request.cookies.get(SESSION_COOKIE_NAME))
    return {"authenticated": user is not None, "user": user_to_dict(user) if user else None}


# ── Question generation (voice workflow tool) ───────────

class GenerateRequest(BaseModel):
    type: str
    role: str
    level: str
    techstack: str
    amount: Union[int, str]
    userid: str


@app.post("/api/vapi/generate")
async def vapi_generate(
    body: GenerateRequest,
    db: AsyncSession = Depends(get_db),
    generator: GenerationService = Depends(get_generator),
):
    try:
        await generate_interview(
            db,
            generator,
            type=body.type,
            role=body.role,
            level=body.level,
            techstack=body.techstack,
            amount=body.amount,
            userid=body.userid,
        )
    except Exception as e:
        logger.exception("[GENERATE] Question generation failed")
        await db.rollback()
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)
    return {"success": True}


@app.get("/api/vapi/generate")
async def vapi_generate_check():
    return {"success": True, "data": "Thank you!"}


# ── Feedback ─────────────────────────────────────────────

class FeedbackRequest(CamelModel):
    interview_id: str
    transcript: list[TranscriptTurn]
    feedback_id: Optional[str] = None


@app.post("/api/feedback")
async def submit_feedback(
    body: FeedbackRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    generator: GenerationService = Depends(get_generator),
):
    params = CreateFeedbackParams(
        interview_id=body.interview_id,
        user_id=user.id,
        transcript=body.transcript,
        feedback_id=body.feedback_id,
    )
    return await create_feedback(db, generator, params)


# ── Interviews (view models) ─────────────────────────────

@app.get("/api/dashboard")
async def dashboard(user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    own = await get_interviews_by_user_id(db, user.id)
    latest = await get_latest_interviews(db, user.id, limit=20)

    async def cards(interviews):
        out = []
        for interview in interviews:
            fb = await get_feedback_by_interview_id(db, interview.id, user.id)
            out.append(interview_card(interview, fb))
        return out

    return {
        "userInterviews": await cards(own),
        "latestInterviews": await cards(latest),
    }


@app.get("/api/interviews/{interview_id}")
async def interview_page(
    interview_id: str,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    interview = await get_interview_by_id(db, interview_id)
    if not interview:
        raise HTTPException(404, "Interview not found")
    return interview_detail(interview)


@app.get("/api/interviews/{interview_id}/feedback")
async def feedback_page(
    interview_id: str,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    interview = await get_interview_by_id(db, interview_id)
    if not interview:
        raise HTTPException(404, "Interview not found")
    fb = await get_feedback_by_interview_id(db, interview_id, user.id)
    if not fb:
        raise HTTPException(404, "Feedback not found")
    return feedback_detail(interview, fb)


# ── Voice session relay ──────────────────────────────────

@app.websocket("/ws/interview")
async def interview_session(
    ws: WebSocket,
    mode: SessionMode = SessionMode.GENERATE,
    interviewId: Optional[str] = None,
    feedbackId: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    generator: GenerationService = Depends(get_generator),
):
    """Browser voice SDK <-> SessionOrchestrator."""
    # close codes only reach the browser once the handshake has completed
    await ws.accept()

    user = await get_current_user(db, identity, ws.cookies.get(SESSION_COOKIE_NAME))
    if not user:
        await ws.close(code=4401, reason="Not authenticated")
        return

    questions = None
    if mode == SessionMode.INTERVIEW:
        interview = await get_interview_by_id(db, interviewId) if interviewId else None
        if not interview:
            await ws.close(code=4404, reason="Interview not found")
            return
        questions = interview.questions

    agent = BrowserVoiceAgent(ws)

    async def submit(params: CreateFeedbackParams) -> dict:
        return await create_feedback(db, generator, params)

    orchestrator = SessionOrchestrator(
        agent,
        mode=mode,
        user_name=user.name,
        user_id=user.id,
        interview_id=interviewId,
        feedback_id=feedbackId,
        questions=questions,
        submit_feedback=submit,
    )
    await orchestrator.start()
    logger.info("[WS] Session started mode=%s user=%s", mode.value, user.id)

    try:
        while not orchestrator.finished:
            event = _parse_frame(await ws.receive_text())
            if event is None:
                continue
            if event.get("type") == "hang-up":
                await orchestrator.stop()
            else:
                await orchestrator.handle_event(event)
    except WebSocketDisconnect:
        logger.info("[WS] Client disconnected status=%s", orchestrator.status.value)
        agent.connected = False
        await orchestrator.handle_disconnect()
        return
    except Exception:
        logger.exception("[WS] Session relay failed status=%s", orchestrator.status.value)
        await orchestrator.handle_disconnect()
        await ws.close(code=1011)
        return

    await ws.close()


def _parse_frame(text: str) -> Optional[dict]:
    try:
        event = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("[WS] Dropping non-JSON frame: %.80s", text)
        return None
    if not isinstance(event, dict):
        logger.warning("[WS] Dropping frame that is not a JSON object")
        return None
    return event
