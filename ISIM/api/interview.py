from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ISIM.api.dependencies import get_interview_flow, get_session_engine
from ISIM.api.schemas import (
    ActiveSessionResponse,
    AnswerSubmitRequest,
    CommandResponse,
    MessageRequest,
    ScratchAnswerRequest,
    SessionResponse,
    WelcomeBackResponse,
    map_session,
)
from packages.isim_core.errors import ExtractionError, InvalidTransitionError
from packages.isim_core.logging import get_logger
from packages.isim_service.interview_flow import IntervieweeFlow
from packages.isim_session.engine import InterviewSessionEngine

router = APIRouter(prefix="/interview", tags=["Interview"])
logger = get_logger("ISIM.api.interview")

def _active_response(flow: IntervieweeFlow, engine: InterviewSessionEngine):
    session = flow.active
    if session is None:
        return None
    return map_session(session, remaining_seconds=engine.remaining_seconds())

def _command(accepted: bool, flow: IntervieweeFlow, engine: InterviewSessionEngine) -> CommandResponse:
    return CommandResponse(accepted=accepted, session=_active_response(flow, engine))

@router.get("", response_model=ActiveSessionResponse)
async def get_active_session(
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    """
    Current state of the active session.
    Samples the timer first, so an expired question is submitted before it is shown.
    """
    try:
        await flow.tick()
    except BlockingIOError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e))
    return ActiveSessionResponse(session=_active_response(flow, engine))

@router.post("/upload", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def upload_resume(
    file: UploadFile = File(...),
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    """
    Start a session from an uploaded résumé (PDF, DOCX or DOC).
    An unreadable file creates no session.
    """
    content = await file.read()
    try:
        session = await flow.start_from_upload(content, file.content_type or "")
    except ExtractionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": e.code, "message": e.message}
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except BlockingIOError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e))
    return map_session(session, engine.remaining_seconds())

@router.post("/sample", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_sample(
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    """Start a demo session from the built-in sample résumé."""
    try:
        session = await flow.start_from_sample()
    except BlockingIOError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e))
    return map_session(session, engine.remaining_seconds())

@router.post("/messages", response_model=CommandResponse)
async def post_message(
    request: MessageRequest,
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    try:
        accepted = await flow.handle_user_input(request.text)
    except BlockingIOError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e))
    return _command(accepted, flow, engine)

@router.put("/answer", response_model=CommandResponse)
async def update_answer(
    request: ScratchAnswerRequest,
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    """Replace the in-progress answer of the current question."""
    accepted = engine.update_scratch_answer(request.text)
    return _command(accepted, flow, engine)

@router.post("/answer/submit", response_model=CommandResponse)
async def submit_answer(
    request: AnswerSubmitRequest,
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    """
    Submit the current question.
    A rejected submission (already answered, empty, not interviewing) is a 409.
    """
    try:
        accepted = await flow.submit_current_answer(request.text)
    except BlockingIOError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e))
    if not accepted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Submission rejected")
    return _command(accepted, flow, engine)

@router.post("/new", response_model=CommandResponse)
async def start_new(
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    """Leave the active session in the roster and clear the active pointer."""
    flow.start_new()
    return _command(True, flow, engine)

@router.post("/continue", response_model=CommandResponse)
async def continue_session(
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    try:
        session = await flow.continue_session()
    except BlockingIOError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e))
    return _command(session is not None, flow, engine)

@router.get("/welcome-back", response_model=WelcomeBackResponse)
async def welcome_back(flow: IntervieweeFlow = Depends(get_interview_flow)):
    session = flow.welcome_back()
    if session is None:
        return WelcomeBackResponse(pending=False)
    return WelcomeBackResponse(
        pending=True,
        candidate_id=session.id,
        name=session.name,
        status=session.status.value
    )

@router.post("/{candidate_id}/activate", response_model=CommandResponse)
async def activate_candidate(
    candidate_id: str,
    flow: IntervieweeFlow = Depends(get_interview_flow),
    engine: InterviewSessionEngine = Depends(get_session_engine)
):
    if not flow.activate(candidate_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")
    return _command(True, flow, engine)

@router.delete("/data", status_code=status.HTTP_204_NO_CONTENT)
async def reset_all_data(
    confirm: bool = Query(False, description="Must be true to erase every session"),
    flow: IntervieweeFlow = Depends(get_interview_flow)
):
    if not confirm:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pass confirm=true to erase all data")
    logger.warning("Resetting all interview data")
    flow.reset_all()
