import logging
import math
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from signage_cms.errors import NotFoundError, ValidationError
from signage_cms.models.customer import Customer
from signage_cms.models.layout import Layout
from signage_cms.models.player import Player
from signage_cms.models.schedule import Schedule, ScheduleAssignment
from signage_cms.models.site import Site
from signage_cms.schemas.resolution import ScheduleSnapshot
from signage_cms.schemas.schedule import AssignmentCreateIn, ScheduleCreateIn, ScheduleUpdateIn
from signage_cms.services.store import ScheduleStore
from signage_cms.services.time_window import DAY_TOKENS, parse_days_of_week, parse_hms

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 50
MIN_PRIORITY = 0
MAX_PRIORITY = 100
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

_TARGET_FIELD = {
    "Customer": "target_customer_id",
    "Site": "target_site_id",
    "Player": "target_player_id",
}


def _normalize_name(value: str | None) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError("Schedule name is required")
    return name


def _normalize_priority(value: int | None) -> int:
    if value is None:
        return DEFAULT_PRIORITY
    if value < MIN_PRIORITY or value > MAX_PRIORITY:
        raise ValidationError(f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")
    return value


def _normalize_time_hms(value: str | None, field: str) -> str | None:
    raw = (value or "").strip()
    if not raw:
        return None
    parsed = parse_hms(raw)
    if parsed is None:
        raise ValidationError(f"Invalid {field}. Use HH:MM or HH:MM:SS.")
    return parsed.strftime("%H:%M:%S")


def _normalize_days_of_week(value: str | None) -> str | None:
    days = parse_days_of_week(value)
    if days is None:
        raise ValidationError(f"days_of_week must be comma-separated tokens from {','.join(DAY_TOKENS)}")
    if not days:
        return None
    return ",".join(token for token in DAY_TOKENS if token in days)


def _validate_date_range(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError("end_date must not be before start_date")


class ScheduleManager:
    """Tenant-scoped schedule and assignment lifecycle.

    Every lookup filters by ``customer_id``; rows of another tenant behave exactly
    like missing rows. Each write commits on its own.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.store = ScheduleStore(db)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _find_layout_or_404(self, layout_id: int, customer_id: int) -> Layout:
        layout = self.db.get(Layout, layout_id)
        if not layout or layout.customer_id != customer_id:
            raise NotFoundError("Layout not found")
        return layout

    def get(self, schedule_id: int, customer_id: int) -> Schedule:
        schedule = (
            self.db.query(Schedule)
            .filter(Schedule.id == schedule_id, Schedule.customer_id == customer_id)
            .first()
        )
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def get_with_assignments(self, schedule_id: int, customer_id: int) -> Schedule:
        schedule = (
            self.db.query(Schedule)
            .options(selectinload(Schedule.assignments))
            .filter(Schedule.id == schedule_id, Schedule.customer_id == customer_id)
            .first()
        )
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def list_schedules(
        self,
        customer_id: int,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        search: str | None = None,
        is_active: bool | None = None,
        layout_id: int | None = None,
    ) -> dict:
        safe_page = max(1, page)
        safe_limit = max(1, min(limit, MAX_PAGE_LIMIT))

        query = self.db.query(Schedule).filter(Schedule.customer_id == customer_id)
        if is_active is not None:
            query = query.filter(Schedule.is_active.is_(is_active))
        if layout_id is not None:
            query = query.filter(Schedule.layout_id == layout_id)
        if search:
            keyword = f"%{search.strip().lower()}%"
            if keyword != "%%":
                query = query.filter(func.lower(Schedule.name).like(keyword))

        total = query.count()
        items = (
            query.order_by(Schedule.priority.desc(), Schedule.name.asc())
            .offset((safe_page - 1) * safe_limit)
            .limit(safe_limit)
            .all()
        )
        logger.info("Listed %d schedules for customer %s", len(items), customer_id)
        return {
            "data": items,
            "total": total,
            "page": safe_page,
            "limit": safe_limit,
            "total_pages": math.ceil(total / safe_limit) if total else 0,
        }

    def create(self, customer_id: int, data: ScheduleCreateIn, created_by: int | None = None) -> Schedule:
        name = _normalize_name(data.name)
        self._find_layout_or_404(data.layout_id, customer_id)
        _validate_date_range(data.start_date, data.end_date)

        schedule = Schedule(
            customer_id=customer_id,
            name=name,
            layout_id=data.layout_id,
            priority=_normalize_priority(data.priority),
            start_date=data.start_date,
            end_date=data.end_date,
            start_time=_normalize_time_hms(data.start_time, "start_time"),
            end_time=_normalize_time_hms(data.end_time, "end_time"),
            days_of_week=_normalize_days_of_week(data.days_of_week),
            is_active=True,
            created_by=created_by,
        )
        self.db.add(schedule)
        self._commit()
        self.db.refresh(schedule)
        logger.info("Created schedule %s for customer %s", schedule.id, customer_id)
        return schedule

    def update(self, schedule_id: int, customer_id: int, data: ScheduleUpdateIn) -> Schedule:
        schedule = self.get(schedule_id, customer_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")
        for field in ("name", "layout_id", "priority", "is_active"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be cleared")

        updates: dict = {}
        if "name" in changes:
            updates["name"] = _normalize_name(changes["name"])
        if "layout_id" in changes:
            self._find_layout_or_404(changes["layout_id"], customer_id)
            updates["layout_id"] = changes["layout_id"]
        if "priority" in changes:
            updates["priority"] = _normalize_priority(changes["priority"])
        if "start_date" in changes or "end_date" in changes:
            new_start = changes["start_date"] if "start_date" in changes else schedule.start_date
            new_end = changes["end_date"] if "end_date" in changes else schedule.end_date
            _validate_date_range(new_start, new_end)
            updates["start_date"] = new_start
            updates["end_date"] = new_end
        if "start_time" in changes:
            updates["start_time"] = _normalize_time_hms(changes["start_time"], "start_time")
        if "end_time" in changes:
            updates["end_time"] = _normalize_time_hms(changes["end_time"], "end_time")
        if "days_of_week" in changes:
            updates["days_of_week"] = _normalize_days_of_week(changes["days_of_week"])
        if "is_active" in changes:
            updates["is_active"] = changes["is_active"]

        for field, value in updates.items():
            setattr(schedule, field, value)
        schedule.updated_at = datetime.utcnow()
        self._commit()
        self.db.refresh(schedule)
        logger.info("Updated schedule %s", schedule_id)
        return schedule

    def delete(self, schedule_id: int, customer_id: int) -> None:
        schedule = self.get(schedule_id, customer_id)
        self.db.delete(schedule)
        self._commit()
        logger.info("Deleted schedule %s", schedule_id)

    def list_assignments(self, schedule_id: int, customer_id: int) -> list[ScheduleAssignment]:
        return list(self.get_with_assignments(schedule_id, customer_id).assignments)

    def _validate_target_in_tenant(self, data: AssignmentCreateIn, customer_id: int) -> None:
        if data.assignment_type == "Customer":
            customer = self.db.get(Customer, data.target_customer_id)
            if not customer or customer.id != customer_id:
                raise NotFoundError("Customer not found")
        elif data.assignment_type == "Site":
            site = self.db.get(Site, data.target_site_id)
            if not site or site.customer_id != customer_id:
                raise NotFoundError("Site not found")
        elif data.assignment_type == "Player":
            row = (
                self.db.query(Player)
                .join(Site, Player.site_id == Site.id)
                .filter(Player.id == data.target_player_id, Site.customer_id == customer_id)
                .first()
            )
            if not row:
                raise NotFoundError("Player not found")

    def create_assignment(self, schedule_id: int, customer_id: int, data: AssignmentCreateIn) -> ScheduleAssignment:
        self.get(schedule_id, customer_id)

        expected = _TARGET_FIELD.get(data.assignment_type)
        if expected is None:
            raise ValidationError("Invalid assignment type")
        provided = [field for field in _TARGET_FIELD.values() if getattr(data, field) is not None]
        if provided != [expected]:
            raise ValidationError(
                f"Exactly one target must be specified: {data.assignment_type} assignments take {expected} only"
            )
        self._validate_target_in_tenant(data, customer_id)

        assignment = ScheduleAssignment(
            schedule_id=schedule_id,
            assignment_type=data.assignment_type,
            target_customer_id=data.target_customer_id,
            target_site_id=data.target_site_id,
            target_player_id=data.target_player_id,
        )
        self.db.add(assignment)
        self._commit()
        self.db.refresh(assignment)
        logger.info("Created %s assignment %s for schedule %s", data.assignment_type, assignment.id, schedule_id)
        return assignment

    def delete_assignment(self, schedule_id: int, assignment_id: int, customer_id: int) -> None:
        self.get(schedule_id, customer_id)
        assignment = (
            self.db.query(ScheduleAssignment)
            .filter(ScheduleAssignment.id == assignment_id, ScheduleAssignment.schedule_id == schedule_id)
            .first()
        )
        if not assignment:
            raise NotFoundError("Schedule assignment not found")
        self.db.delete(assignment)
        self._commit()
        logger.info("Deleted assignment %s from schedule %s", assignment_id, schedule_id)

    def list_active_schedules_for_player(self, player_id: int, customer_id: int) -> list[ScheduleSnapshot]:
        return self.store.fetch_active_schedules_for_player(player_id, customer_id)
