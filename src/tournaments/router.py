from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from tournaments.exceptions import (
    PermissionDenied, StorageError, TournamentNotFound, ValidationError,
)
from tournaments.permissions import (
    PermissionChecker, User, get_current_user, get_permission_checker,
)
from tournaments.schemas import MatchOut, TournamentOut
from tournaments.service import TournamentManager
from tournaments.store import TournamentStore

router = APIRouter(prefix='/tournaments', tags=['Tournaments'])


def get_manager(
    session: AsyncSession = Depends(get_session),
    permissions: PermissionChecker = Depends(get_permission_checker),
) -> TournamentManager:
    return TournamentManager(TournamentStore(session), permissions)


# Routes

@router.post("/create", status_code=201)
async def create_tournament(
    data: dict = Body(...),
    user: User = Depends(get_current_user),
    manager: TournamentManager = Depends(get_manager),
):
    try:
        tid = await manager.create_tournament(data, user)
    except PermissionDenied as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to create tournament")
    return {"tournament_id": tid}


@router.get("/{tid}", response_model=TournamentOut)
async def tournament_view(tid: str, manager: TournamentManager = Depends(get_manager)):
    try:
        t = await manager.get_tournament(tid)
    except TournamentNotFound:
        raise HTTPException(status_code=404, detail="Tournament not found")

    return TournamentOut(
        id=t.id, name=t.name, description=t.description,
        format=t.format, type=t.type, status=t.status.value,
        player_ids=t.player_ids, created_by=t.created_by,
        available_courts=t.available_courts, max_rounds=t.max_rounds,
        estimated_duration=t.estimated_duration,
        club_id=t.club_id, is_quick_play=t.is_quick_play, current_round=t.current_round,
        matches=[
            MatchOut(
                id=m.id, round=m.round, match_number=m.match_number,
                side1=m.side1, side2=m.side2, court=m.court, status=m.status.value,
            )
            for m in t.matches
        ],
    )


@router.post("/{tid}/delete")
async def delete_tournament(
    tid: str,
    user: User = Depends(get_current_user),
    manager: TournamentManager = Depends(get_manager),
):
    try:
        await manager.delete_tournament(tid, user)
    except PermissionDenied as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except TournamentNotFound:
        raise HTTPException(status_code=404, detail="Tournament not found")
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to delete tournament")
    return JSONResponse({"deleted": tid})


@router.post("/{tid}/rounds/add", status_code=201)
async def add_round(
    tid: str,
    user: User = Depends(get_current_user),
    manager: TournamentManager = Depends(get_manager),
):
    try:
        round_number = await manager.add_round(tid, user)
    except PermissionDenied as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except TournamentNotFound:
        raise HTTPException(status_code=404, detail="Tournament not found")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to add round")
    return {"round": round_number}


@router.post("/{tid}/rounds/{round_number}/delete")
async def delete_round(
    tid: str,
    round_number: int,
    user: User = Depends(get_current_user),
    manager: TournamentManager = Depends(get_manager),
):
    try:
        await manager.delete_round(tid, round_number, user)
    except PermissionDenied as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except TournamentNotFound:
        raise HTTPException(status_code=404, detail="Tournament not found")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to delete round")
    return {"deleted_round": round_number}
