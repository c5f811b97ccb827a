"""Pick the schedule a player should be showing at a given local instant.

Resolution is a pure function over a snapshot: no I/O, no mutation. Candidates are
re-checked against the player's scope even when the storage query already
filtered them, and their input order is never relied on.
"""

import logging
from datetime import datetime
from typing import Iterable

from signage_cms.schemas.resolution import PlayerIdentity, Resolution, ScheduleSnapshot
from signage_cms.services.scope import match_specificity, schedule_matches, scope_name
from signage_cms.services.time_window import is_active

logger = logging.getLogger(__name__)


def _ranking_key(item: tuple[ScheduleSnapshot, int]) -> tuple[int, int, int]:
    schedule, specificity = item
    # Highest priority, then most specific scope, then the oldest schedule.
    return (-schedule.priority, -specificity, schedule.schedule_id)


def resolve(
    candidates: Iterable[ScheduleSnapshot],
    player: PlayerIdentity,
    now: datetime,
) -> Resolution | None:
    survivors: list[tuple[ScheduleSnapshot, int]] = []
    for schedule in candidates:
        if not schedule_matches(schedule, player):
            continue
        if not is_active(schedule, now):
            continue
        survivors.append((schedule, match_specificity(schedule, player)))

    if not survivors:
        logger.debug("No active schedule for player %s at %s", player.player_id, now.isoformat())
        return None

    winner, specificity = min(survivors, key=_ranking_key)
    logger.debug(
        "Player %s resolved to schedule %s (layout %s) out of %d active",
        player.player_id,
        winner.schedule_id,
        winner.layout_id,
        len(survivors),
    )
    return Resolution(
        schedule_id=winner.schedule_id,
        layout_id=winner.layout_id,
        priority=winner.priority,
        scope=scope_name(specificity),
    )


def resolve_layout_id(
    candidates: Iterable[ScheduleSnapshot],
    player: PlayerIdentity,
    now: datetime,
) -> int | None:
    resolution = resolve(candidates, player, now)
    return resolution.layout_id if resolution else None
