from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from signage_cms.api.deps import require_customer_id
from signage_cms.db import get_db
from signage_cms.errors import ConflictError, NotFoundError, ValidationError
from signage_cms.models.layout import Layout
from signage_cms.models.schedule import Schedule
from signage_cms.schemas.directory import LayoutIn, LayoutOut

router = APIRouter(prefix="/layouts", tags=["layouts"])


def find_layout_or_404(db: Session, layout_id: int, customer_id: int) -> Layout:
    layout = db.get(Layout, layout_id)
    if not layout or layout.customer_id != customer_id:
        raise NotFoundError("Layout not found")
    return layout


def _normalize_color(value: str) -> str:
    color = (value or "").strip()
    digits = color[1:] if color.startswith("#") else ""
    if len(digits) not in (3, 6) or any(ch not in "0123456789abcdefABCDEF" for ch in digits):
        raise ValidationError("background_color must be a hex color like #000000")
    return color.upper()


@router.post("", response_model=LayoutOut, status_code=status.HTTP_201_CREATED)
def create_layout(
    payload: LayoutIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    layout = Layout(
        customer_id=customer_id,
        name=payload.name.strip(),
        description=(payload.description or "").strip() or None,
        width=payload.width,
        height=payload.height,
        background_color=_normalize_color(payload.background_color),
        is_active=True,
    )
    db.add(layout)
    db.commit()
    db.refresh(layout)
    return layout


@router.get("", response_model=list[LayoutOut])
def list_layouts(customer_id: int = Depends(require_customer_id), db: Session = Depends(get_db)):
    return db.query(Layout).filter(Layout.customer_id == customer_id).order_by(Layout.name.asc()).all()


@router.get("/{layout_id}", response_model=LayoutOut)
def get_layout(
    layout_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return find_layout_or_404(db, layout_id, customer_id)


@router.delete("/{layout_id}")
def delete_layout(
    layout_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    layout = find_layout_or_404(db, layout_id, customer_id)
    in_use = db.query(Schedule.id).filter(Schedule.layout_id == layout.id).first()
    if in_use:
        raise ConflictError("Layout is referenced by a schedule")
    db.delete(layout)
    db.commit()
    return {"ok": True}
