"""Tests for scope matching and schedule resolution."""

from datetime import datetime

from signage_cms.schemas.resolution import PlayerIdentity
from signage_cms.services.resolver import resolve, resolve_layout_id
from signage_cms.services.scope import match_specificity, matches, schedule_matches, scope_name

from tests.factories import make_schedule, snapshot_assignment

NOON = datetime(2025, 1, 6, 12, 0)


class TestScope:
    def test_each_kind_matches_its_own_target(self, player_identity):
        assert matches(snapshot_assignment("Customer", 1), player_identity)
        assert matches(snapshot_assignment("Site", 21), player_identity)
        assert matches(snapshot_assignment("Player", 11), player_identity)

    def test_other_targets_do_not_match(self, player_identity):
        assert not matches(snapshot_assignment("Customer", 2), player_identity)
        assert not matches(snapshot_assignment("Site", 22), player_identity)
        assert not matches(snapshot_assignment("Player", 12), player_identity)

    def test_kind_decides_which_target_is_read(self, player_identity):
        # A Site assignment pointing at the player id is still a Site assignment.
        assert not matches(snapshot_assignment("Site", 11), player_identity)

    def test_specificity_takes_most_specific_match(self, player_identity):
        schedule = make_schedule(
            assignments=[
                snapshot_assignment("Customer", 1, assignment_id=1),
                snapshot_assignment("Player", 11, assignment_id=2),
                snapshot_assignment("Site", 99, assignment_id=3),
            ]
        )
        assert match_specificity(schedule, player_identity) == 3
        assert scope_name(3) == "Player"

    def test_no_assignments_means_no_match(self, player_identity):
        assert match_specificity(make_schedule(), player_identity) == 0
        assert not schedule_matches(make_schedule(), player_identity)

    def test_any_matching_assignment_is_enough(self, player_identity):
        schedule = make_schedule(
            assignments=[
                snapshot_assignment("Site", 99, assignment_id=1),
                snapshot_assignment("Customer", 1, assignment_id=2),
            ]
        )
        assert schedule_matches(schedule, player_identity)
        assert not schedule_matches(make_schedule(assignments=[snapshot_assignment("Site", 99)]), player_identity)


class TestResolve:
    def test_higher_priority_wins(self, player_identity):
        low = make_schedule(1, layout_id=100, priority=10, assignments=[snapshot_assignment("Customer", 1)])
        high = make_schedule(2, layout_id=200, priority=20, assignments=[snapshot_assignment("Customer", 1)])
        result = resolve([low, high], player_identity, NOON)
        assert result.schedule_id == 2
        assert result.layout_id == 200
        assert result.scope == "Customer"

    def test_input_order_is_irrelevant(self, player_identity):
        low = make_schedule(1, layout_id=100, priority=10, assignments=[snapshot_assignment("Customer", 1)])
        high = make_schedule(2, layout_id=200, priority=20, assignments=[snapshot_assignment("Customer", 1)])
        assert resolve([high, low], player_identity, NOON) == resolve([low, high], player_identity, NOON)

    def test_more_specific_scope_breaks_priority_tie(self, player_identity):
        broad = make_schedule(1, layout_id=100, assignments=[snapshot_assignment("Customer", 1)])
        site = make_schedule(2, layout_id=200, assignments=[snapshot_assignment("Site", 21)])
        direct = make_schedule(3, layout_id=300, assignments=[snapshot_assignment("Player", 11)])
        assert resolve([broad, site], player_identity, NOON).schedule_id == 2
        assert resolve([direct, broad, site], player_identity, NOON).scope == "Player"

    def test_priority_beats_specificity(self, player_identity):
        broad = make_schedule(1, layout_id=100, priority=90, assignments=[snapshot_assignment("Customer", 1)])
        direct = make_schedule(2, layout_id=200, priority=10, assignments=[snapshot_assignment("Player", 11)])
        assert resolve([direct, broad], player_identity, NOON).schedule_id == 1

    def test_lowest_id_breaks_full_tie(self, player_identity):
        first = make_schedule(7, layout_id=100, assignments=[snapshot_assignment("Site", 21)])
        second = make_schedule(9, layout_id=200, assignments=[snapshot_assignment("Site", 21)])
        assert resolve([second, first], player_identity, NOON).schedule_id == 7

    def test_inactive_schedule_never_selected(self, player_identity):
        off = make_schedule(1, priority=100, is_active=False, assignments=[snapshot_assignment("Player", 11)])
        on = make_schedule(2, priority=0, layout_id=200, assignments=[snapshot_assignment("Customer", 1)])
        assert resolve([off, on], player_identity, NOON).schedule_id == 2
        assert resolve([off], player_identity, NOON) is None

    def test_out_of_window_schedule_skipped(self, player_identity):
        evening = make_schedule(
            1, priority=90, start_time="18:00:00", end_time="23:00:00",
            assignments=[snapshot_assignment("Customer", 1)],
        )
        all_day = make_schedule(2, layout_id=200, assignments=[snapshot_assignment("Customer", 1)])
        assert resolve([evening, all_day], player_identity, NOON).schedule_id == 2

    def test_candidates_are_rechecked_for_scope(self, player_identity):
        elsewhere = make_schedule(1, priority=100, assignments=[snapshot_assignment("Site", 99)])
        assert resolve([elsewhere], player_identity, NOON) is None

    def test_unassigned_schedule_never_selected(self, player_identity):
        assert resolve([make_schedule(1, priority=100)], player_identity, NOON) is None

    def test_malformed_schedule_does_not_block_others(self, player_identity):
        broken = make_schedule(1, priority=100, days_of_week="Someday", assignments=[snapshot_assignment("Customer", 1)])
        fine = make_schedule(2, layout_id=200, assignments=[snapshot_assignment("Customer", 1)])
        assert resolve([broken, fine], player_identity, NOON).schedule_id == 2

    def test_empty_candidates(self, player_identity):
        assert resolve([], player_identity, NOON) is None
        assert resolve_layout_id([], player_identity, NOON) is None

    def test_store_hours_scenario(self):
        """Customer-wide all-day schedule under a higher-priority site A business-hours schedule."""
        s1 = make_schedule(1, layout_id=100, priority=50, assignments=[snapshot_assignment("Customer", 1)])
        s2 = make_schedule(
            2, layout_id=200, priority=80, start_time="09:00:00", end_time="17:00:00",
            assignments=[snapshot_assignment("Site", 21, schedule_id=2)],
        )
        p1 = PlayerIdentity(player_id=11, site_id=21, customer_id=1)
        p3 = PlayerIdentity(player_id=13, site_id=22, customer_id=1)
        ten = datetime(2025, 1, 6, 10, 0)
        eight_pm = datetime(2025, 1, 6, 20, 0)
        assert resolve_layout_id([s1, s2], p1, ten) == 200
        assert resolve_layout_id([s1, s2], p3, ten) == 100
        assert resolve_layout_id([s1, s2], p1, eight_pm) == 100
