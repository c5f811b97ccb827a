import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from signage_cms.api.deps import get_clock, require_customer_id
from signage_cms.api.layout import find_layout_or_404
from signage_cms.api.site import find_site_or_404
from signage_cms.db import get_db
from signage_cms.errors import NotFoundError, ValidationError
from signage_cms.models.player import Player
from signage_cms.models.site import Site
from signage_cms.schemas.directory import PlayerIn, PlayerOut, PlayerUpdateIn
from signage_cms.schemas.resolution import CurrentLayoutOut
from signage_cms.services.player_schedule import current_layout_for_player
from signage_cms.services.store import ScheduleStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/players", tags=["players"])


def find_player_or_404(db: Session, player_id: int, customer_id: int) -> Player:
    player = (
        db.query(Player)
        .join(Site, Player.site_id == Site.id)
        .filter(Player.id == player_id, Site.customer_id == customer_id)
        .first()
    )
    if not player:
        raise NotFoundError("Player not found")
    return player


@router.post("", response_model=PlayerOut, status_code=status.HTTP_201_CREATED)
def create_player(
    payload: PlayerIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    find_site_or_404(db, payload.site_id, customer_id)
    if payload.default_layout_id is not None:
        find_layout_or_404(db, payload.default_layout_id, customer_id)
    player = Player(
        site_id=payload.site_id,
        name=payload.name.strip(),
        player_code=payload.player_code.strip(),
        default_layout_id=payload.default_layout_id,
        is_active=True,
    )
    db.add(player)
    db.commit()
    db.refresh(player)
    return player


@router.get("", response_model=list[PlayerOut])
def list_players(
    site_id: int | None = None,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    query = db.query(Player).join(Site, Player.site_id == Site.id).filter(Site.customer_id == customer_id)
    if site_id is not None:
        query = query.filter(Player.site_id == site_id)
    return query.order_by(Player.name.asc()).all()


@router.get("/{player_id}", response_model=PlayerOut)
def get_player(
    player_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return find_player_or_404(db, player_id, customer_id)


@router.patch("/{player_id}", response_model=PlayerOut)
def update_player(
    player_id: int,
    payload: PlayerUpdateIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    player = find_player_or_404(db, player_id, customer_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    for field in ("site_id", "name", "player_code", "is_active"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be cleared")

    if "site_id" in changes:
        find_site_or_404(db, changes["site_id"], customer_id)
    if changes.get("default_layout_id") is not None:
        find_layout_or_404(db, changes["default_layout_id"], customer_id)
    for field in ("name", "player_code"):
        if field in changes:
            changes[field] = changes[field].strip()

    for field, value in changes.items():
        setattr(player, field, value)
    db.commit()
    db.refresh(player)
    logger.info("Updated player %s (%s)", player.id, ", ".join(sorted(changes)))
    return player


@router.delete("/{player_id}")
def delete_player(
    player_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    player = find_player_or_404(db, player_id, customer_id)
    db.delete(player)
    db.commit()
    return {"ok": True}


@router.get("/{player_id}/resolved-schedule", response_model=CurrentLayoutOut)
def preview_resolved_schedule(
    player_id: int,
    at: datetime | None = None,
    customer_id: int = Depends(require_customer_id),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
):
    """What the player would show at ``at`` (defaults to now); naive values are UTC."""
    find_player_or_404(db, player_id, customer_id)
    return current_layout_for_player(ScheduleStore(db), player_id, at or now)
