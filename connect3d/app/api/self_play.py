from fastapi import APIRouter, Depends, HTTPException, Request

from connect3d.app.schemas.game_schema import SelfPlayCreate, SelfPlayResponse
from connect3d.app.services.self_play_runner import SelfPlayRunner

router = APIRouter()

def get_runner(request: Request) -> SelfPlayRunner:
    return request.app.state.self_play_runner

def _load(runner: SelfPlayRunner, session_id: str):
    try:
        return runner.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")

@router.post("", response_model=SelfPlayResponse)
async def create_session(payload: SelfPlayCreate, runner: SelfPlayRunner = Depends(get_runner)):
    try:
        session = runner.create_session(payload.win_length, payload.delay, payload.genotype)
    except ValueError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return session.to_response()

@router.get("/{session_id}", response_model=SelfPlayResponse)
async def get_session(session_id: str, runner: SelfPlayRunner = Depends(get_runner)):
    return _load(runner, session_id).to_response()

@router.post("/{session_id}/start")
async def start_session(session_id: str, runner: SelfPlayRunner = Depends(get_runner)):
    session = _load(runner, session_id)
    if session.is_finished:
        raise HTTPException(status_code=400, detail="Session already finished")
    await runner.start(session_id)
    return {"message": "Self-play started"}

@router.post("/{session_id}/stop")
async def stop_session(session_id: str, runner: SelfPlayRunner = Depends(get_runner)):
    """Takes effect before the next move request, not mid-search."""
    _load(runner, session_id)
    runner.stop(session_id)
    return {"message": "Self-play stopping"}

@router.post("/{session_id}/step", response_model=SelfPlayResponse)
async def step_session(session_id: str, runner: SelfPlayRunner = Depends(get_runner)):
    _load(runner, session_id)
    try:
        session = await runner.step(session_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_response()
