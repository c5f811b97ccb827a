import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from signage_cms.api.deps import require_customer_id
from signage_cms.api.layout import find_layout_or_404
from signage_cms.db import get_db
from signage_cms.errors import ConflictError, NotFoundError, ValidationError
from signage_cms.models.player import Player
from signage_cms.models.site import Site
from signage_cms.schemas.directory import SiteIn, SiteOut, SiteUpdateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites", tags=["sites"])


def find_site_or_404(db: Session, site_id: int, customer_id: int) -> Site:
    site = db.get(Site, site_id)
    if not site or site.customer_id != customer_id:
        raise NotFoundError("Site not found")
    return site


def _validate_time_zone(value: str) -> str:
    zone = (value or "").strip() or "UTC"
    try:
        ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown time zone: {zone}") from exc
    return zone


@router.post("", response_model=SiteOut, status_code=status.HTTP_201_CREATED)
def create_site(
    payload: SiteIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    if payload.default_layout_id is not None:
        find_layout_or_404(db, payload.default_layout_id, customer_id)
    site = Site(
        customer_id=customer_id,
        name=payload.name.strip(),
        site_code=payload.site_code.strip(),
        time_zone=_validate_time_zone(payload.time_zone),
        default_layout_id=payload.default_layout_id,
        is_active=True,
    )
    db.add(site)
    db.commit()
    db.refresh(site)
    return site


@router.get("", response_model=list[SiteOut])
def list_sites(customer_id: int = Depends(require_customer_id), db: Session = Depends(get_db)):
    return db.query(Site).filter(Site.customer_id == customer_id).order_by(Site.name.asc()).all()


@router.get("/{site_id}", response_model=SiteOut)
def get_site(
    site_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return find_site_or_404(db, site_id, customer_id)


@router.patch("/{site_id}", response_model=SiteOut)
def update_site(
    site_id: int,
    payload: SiteUpdateIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    site = find_site_or_404(db, site_id, customer_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    for field in ("name", "site_code", "time_zone", "is_active"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be cleared")

    if "time_zone" in changes:
        changes["time_zone"] = _validate_time_zone(changes["time_zone"])
    if changes.get("default_layout_id") is not None:
        find_layout_or_404(db, changes["default_layout_id"], customer_id)
    for field in ("name", "site_code"):
        if field in changes:
            changes[field] = changes[field].strip()

    for field, value in changes.items():
        setattr(site, field, value)
    db.commit()
    db.refresh(site)
    logger.info("Updated site %s (%s)", site.id, ", ".join(sorted(changes)))
    return site


@router.delete("/{site_id}")
def delete_site(
    site_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    site = find_site_or_404(db, site_id, customer_id)
    if db.query(Player.id).filter(Player.site_id == site.id).first():
        raise ConflictError("Site still has players")
    db.delete(site)
    db.commit()
    return {"ok": True}
