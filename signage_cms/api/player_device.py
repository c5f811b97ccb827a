from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from signage_cms.api.deps import get_clock, require_player_id
from signage_cms.db import get_db
from signage_cms.errors import NotFoundError
from signage_cms.models.player import Player
from signage_cms.schemas.resolution import CurrentLayoutOut
from signage_cms.services.player_schedule import current_layout_for_player
from signage_cms.services.store import ScheduleStore

router = APIRouter(prefix="/player-device", tags=["player-device"])


@router.get("/current-layout", response_model=CurrentLayoutOut)
def current_layout(
    player_id: int = Depends(require_player_id),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
):
    return current_layout_for_player(ScheduleStore(db), player_id, now)


@router.post("/heartbeat")
def heartbeat(
    player_id: int = Depends(require_player_id),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
):
    player = db.get(Player, player_id)
    if not player:
        raise NotFoundError("Player not found")
    player.last_seen = now.replace(tzinfo=None)
    db.commit()
    return {"ok": True}
