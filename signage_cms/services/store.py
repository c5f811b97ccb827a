from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload

from signage_cms.errors import NotFoundError
from signage_cms.models.player import Player
from signage_cms.models.schedule import Schedule, ScheduleAssignment
from signage_cms.models.site import Site
from signage_cms.schemas.resolution import AssignmentSnapshot, PlayerIdentity, ScheduleSnapshot


def _assignment_snapshot(row: ScheduleAssignment) -> AssignmentSnapshot:
    return AssignmentSnapshot(
        assignment_id=row.id,
        schedule_id=row.schedule_id,
        assignment_type=row.assignment_type,
        target_customer_id=row.target_customer_id,
        target_site_id=row.target_site_id,
        target_player_id=row.target_player_id,
    )


def schedule_snapshot(row: Schedule) -> ScheduleSnapshot:
    return ScheduleSnapshot(
        schedule_id=row.id,
        customer_id=row.customer_id,
        layout_id=row.layout_id,
        priority=row.priority if row.priority is not None else 50,
        start_date=row.start_date,
        end_date=row.end_date,
        start_time=row.start_time,
        end_time=row.end_time,
        days_of_week=row.days_of_week,
        is_active=bool(row.is_active),
        assignments=tuple(_assignment_snapshot(item) for item in row.assignments),
    )


class ScheduleStore:
    """Read side used by schedule resolution.

    Rows leave this class as validated snapshot records; the resolver never sees
    ORM objects.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _player_row(self, player_id: int) -> tuple[Player, Site]:
        row = (
            self.db.query(Player, Site)
            .join(Site, Player.site_id == Site.id)
            .filter(Player.id == player_id)
            .first()
        )
        if row is None:
            raise NotFoundError("Player not found")
        return row

    def fetch_player(self, player_id: int) -> PlayerIdentity:
        player, site = self._player_row(player_id)
        return PlayerIdentity(player_id=player.id, site_id=site.id, customer_id=site.customer_id)

    def fetch_site_time_zone(self, site_id: int) -> str:
        site = self.db.get(Site, site_id)
        if site is None:
            raise NotFoundError("Site not found")
        return site.time_zone or "UTC"

    def fetch_default_layout_id(self, identity: PlayerIdentity) -> int | None:
        player, site = self._player_row(identity.player_id)
        return player.default_layout_id or site.default_layout_id

    def fetch_active_schedules_for_player(self, player_id: int, customer_id: int) -> list[ScheduleSnapshot]:
        identity = self.fetch_player(player_id)
        if identity.customer_id != customer_id:
            raise NotFoundError("Player not found")

        scope_filter = or_(
            and_(
                ScheduleAssignment.assignment_type == "Customer",
                ScheduleAssignment.target_customer_id == identity.customer_id,
            ),
            and_(
                ScheduleAssignment.assignment_type == "Site",
                ScheduleAssignment.target_site_id == identity.site_id,
            ),
            and_(
                ScheduleAssignment.assignment_type == "Player",
                ScheduleAssignment.target_player_id == identity.player_id,
            ),
        )
        rows = (
            self.db.query(Schedule)
            .options(selectinload(Schedule.assignments))
            .filter(
                Schedule.customer_id == customer_id,
                Schedule.is_active.is_(True),
                Schedule.assignments.any(scope_filter),
            )
            .order_by(Schedule.priority.desc(), Schedule.id.asc())
            .all()
        )
        return [schedule_snapshot(row) for row in rows]
