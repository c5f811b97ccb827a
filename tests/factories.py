"""Builders for resolver snapshots used by the pure resolution tests."""

from signage_cms.schemas.resolution import AssignmentSnapshot, ScheduleSnapshot

_TARGET_FIELD = {"Customer": "target_customer_id", "Site": "target_site_id", "Player": "target_player_id"}


def snapshot_assignment(kind: str, target: int, assignment_id: int = 1, schedule_id: int = 1) -> AssignmentSnapshot:
    return AssignmentSnapshot(
        assignment_id=assignment_id,
        schedule_id=schedule_id,
        assignment_type=kind,
        **{_TARGET_FIELD[kind]: target},
    )


def make_schedule(schedule_id: int = 1, layout_id: int = 100, assignments=(), **fields) -> ScheduleSnapshot:
    return ScheduleSnapshot(
        schedule_id=schedule_id,
        customer_id=fields.pop("customer_id", 1),
        layout_id=layout_id,
        assignments=tuple(assignments),
        **fields,
    )
