from signage_cms.schemas.resolution import AssignmentSnapshot, PlayerIdentity, ScheduleSnapshot

# Higher is more specific.
SCOPE_RANK = {"Customer": 1, "Site": 2, "Player": 3}


def matches(assignment: AssignmentSnapshot, player: PlayerIdentity) -> bool:
    kind = assignment.assignment_type
    if kind == "Customer":
        return assignment.target_customer_id == player.customer_id
    if kind == "Site":
        return assignment.target_site_id == player.site_id
    if kind == "Player":
        return assignment.target_player_id == player.player_id
    return False


def schedule_matches(schedule: ScheduleSnapshot, player: PlayerIdentity) -> bool:
    return any(matches(item, player) for item in schedule.assignments)


def match_specificity(schedule: ScheduleSnapshot, player: PlayerIdentity) -> int:
    """Rank of the most specific assignment of ``schedule`` that applies to ``player``, 0 if none."""
    ranks = [SCOPE_RANK[item.assignment_type] for item in schedule.assignments if matches(item, player)]
    return max(ranks, default=0)


def scope_name(rank: int) -> str | None:
    for name, value in SCOPE_RANK.items():
        if value == rank:
            return name
    return None
