from datetime import datetime, timezone

from signage_cms.schemas.resolution import CurrentLayoutOut
from signage_cms.services.resolver import resolve
from signage_cms.services.store import ScheduleStore
from signage_cms.services.time_window import local_now


def current_layout_for_player(
    store: ScheduleStore,
    player_id: int,
    now_utc: datetime | None = None,
) -> CurrentLayoutOut:
    """Resolve what ``player_id`` should display at ``now_utc`` in its site's time zone.

    With no active schedule the player's default layout is used, then the site's;
    both may be unset. Storage failures propagate to the caller.
    """
    instant = now_utc or datetime.now(timezone.utc)
    identity = store.fetch_player(player_id)
    zone_name = store.fetch_site_time_zone(identity.site_id)
    candidates = store.fetch_active_schedules_for_player(identity.player_id, identity.customer_id)
    local = local_now(zone_name, instant)
    # An unloadable stored zone was replaced by the default one.
    zone_used = local.tzinfo.key

    resolution = resolve(candidates, identity, local)
    if resolution is not None:
        return CurrentLayoutOut(
            layout_id=resolution.layout_id,
            schedule_id=resolution.schedule_id,
            time_zone=zone_used,
            resolved_at=local,
        )
    return CurrentLayoutOut(
        layout_id=store.fetch_default_layout_id(identity),
        schedule_id=None,
        time_zone=zone_used,
        resolved_at=local,
    )
