from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from signage_cms.api.deps import optional_user_id, require_customer_id
from signage_cms.db import get_db
from signage_cms.schemas.schedule import (
    AssignmentCreateIn,
    AssignmentOut,
    ScheduleCreateIn,
    ScheduleDetailOut,
    ScheduleOut,
    SchedulePageOut,
    ScheduleUpdateIn,
)
from signage_cms.services.schedules import DEFAULT_PAGE_LIMIT, ScheduleManager

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreateIn,
    customer_id: int = Depends(require_customer_id),
    user_id: int | None = Depends(optional_user_id),
    db: Session = Depends(get_db),
):
    return ScheduleManager(db).create(customer_id, payload, created_by=user_id)


@router.get("", response_model=SchedulePageOut)
def list_schedules(
    page: int = 1,
    limit: int = DEFAULT_PAGE_LIMIT,
    search: str | None = None,
    is_active: bool | None = None,
    layout_id: int | None = None,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return ScheduleManager(db).list_schedules(
        customer_id,
        page=page,
        limit=limit,
        search=search,
        is_active=is_active,
        layout_id=layout_id,
    )


@router.get("/{schedule_id}", response_model=ScheduleDetailOut)
def get_schedule(
    schedule_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return ScheduleManager(db).get_with_assignments(schedule_id, customer_id)


@router.patch("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdateIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return ScheduleManager(db).update(schedule_id, customer_id, payload)


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    ScheduleManager(db).delete(schedule_id, customer_id)
    return {"ok": True}


@router.get("/{schedule_id}/assignments", response_model=list[AssignmentOut])
def list_assignments(
    schedule_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return ScheduleManager(db).list_assignments(schedule_id, customer_id)


@router.post(
    "/{schedule_id}/assignments",
    response_model=AssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    schedule_id: int,
    payload: AssignmentCreateIn,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    return ScheduleManager(db).create_assignment(schedule_id, customer_id, payload)


@router.delete("/{schedule_id}/assignments/{assignment_id}")
def delete_assignment(
    schedule_id: int,
    assignment_id: int,
    customer_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    ScheduleManager(db).delete_assignment(schedule_id, assignment_id, customer_id)
    return {"ok": True}
