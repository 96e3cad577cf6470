import pytest

from scorebook.errors import ValidationError
from scorebook.innings import (
    current_batter,
    current_inning,
    is_cell_locked,
    is_half_inning_over,
    outs_by_inning,
    outs_in_half_inning,
)

LINEUP = list(range(101, 110))  # player ids in batting order


class TestOutAccounting:
    def test_counts_out_results_and_runner_outs(self, make_at_bat):
        at_bats = [
            make_at_bat(101, result="strikeout"),
            make_at_bat(102, result="single", outs={"second": True}),
            make_at_bat(103, result="walk"),
        ]
        assert outs_in_half_inning(at_bats, 1, "home") == 2

    def test_row_with_result_and_runner_out_counts_once(self, make_at_bat):
        at_bats = [make_at_bat(101, result="ground_out", outs={"first": True, "second": True})]
        assert outs_in_half_inning(at_bats, 1, "home") == 1

    def test_partitioned_by_inning_and_side(self, make_at_bat):
        at_bats = [
            make_at_bat(101, inning=1, result="strikeout"),
            make_at_bat(102, inning=2, result="strikeout"),
            make_at_bat(201, inning=1, result="fly_out", team_side="opponent"),
        ]
        assert outs_in_half_inning(at_bats, 1, "home") == 1
        assert outs_in_half_inning(at_bats, 1, "opponent") == 1
        assert outs_in_half_inning(at_bats, 2, "opponent") == 0

    def test_legacy_rows_count_as_home_only(self, make_at_bat):
        at_bats = [make_at_bat(101, result="strikeout", team_side=None)]
        assert outs_in_half_inning(at_bats, 1, "home") == 1
        assert outs_in_half_inning(at_bats, 1, "opponent") == 0

    def test_three_outs_close_the_half_inning(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="pop_out") for pid in LINEUP[:3]]
        assert is_half_inning_over(at_bats, 1, "home")
        at_bats.append(make_at_bat(LINEUP[3], result="line_out"))
        assert is_half_inning_over(at_bats, 1, "home")

    def test_two_outs_leave_it_open(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="strikeout") for pid in LINEUP[:2]]
        assert not is_half_inning_over(at_bats, 1, "home")

    def test_outs_by_inning(self, make_at_bat):
        at_bats = [
            make_at_bat(101, inning=1, result="strikeout"),
            make_at_bat(102, inning=1, result="single"),
            make_at_bat(103, inning=2, result="walk"),
        ]
        assert outs_by_inning(at_bats, "home") == {1: 1, 2: 0}


class TestCellLocking:
    def test_locks_players_who_did_not_bat(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="strikeout") for pid in LINEUP[:3]]
        assert is_cell_locked(at_bats, LINEUP[4], 1, "home")
        assert not is_cell_locked(at_bats, LINEUP[0], 1, "home")
        assert not is_cell_locked(at_bats, LINEUP[4], 2, "home")

    def test_open_inning_never_locked(self, make_at_bat):
        at_bats = [make_at_bat(LINEUP[0], result="strikeout")]
        assert not is_cell_locked(at_bats, LINEUP[5], 1, "home")


class TestCurrentBatter:
    def test_empty_history_is_leadoff_in_first(self):
        batter = current_batter(LINEUP, [], "home")
        assert (batter.player_id, batter.inning, batter.batting_order) == (101, 1, 1)

    def test_next_in_order_within_inning(self, make_at_bat):
        at_bats = [make_at_bat(101), make_at_bat(102, result="strikeout")]
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning) == (103, 1)

    def test_wraps_to_top_of_order_in_same_inning(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="walk") for pid in LINEUP]
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning, batter.occurrence) == (101, 1, 2)

    def test_second_time_through_keeps_advancing(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="walk") for pid in LINEUP]
        at_bats.append(make_at_bat(101, result="single", occurrence=2))
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning) == (102, 1)

    def test_three_outs_move_to_next_inning(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="walk") for pid in LINEUP[:6]]
        at_bats += [make_at_bat(pid, result="strikeout") for pid in LINEUP[6:]]
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning) == (101, 2)

    def test_new_inning_starts_at_leadoff_spot(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="ground_out") for pid in LINEUP[:3]]
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning, batter.batting_order) == (101, 2, 1)

    def test_continues_in_current_inning_after_closed_ones(self, make_at_bat):
        at_bats = [make_at_bat(pid, result="ground_out") for pid in LINEUP[:3]]
        at_bats += [make_at_bat(101, inning=2), make_at_bat(102, inning=2, result="fly_out")]
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning) == (103, 2)

    def test_sides_are_partitioned(self, make_at_bat):
        opponent = list(range(201, 210))
        at_bats = [make_at_bat(pid, inning=4, result="strikeout", team_side="opponent")
                   for pid in opponent[:3]]
        at_bats.append(make_at_bat(101, inning=1))
        home = current_batter(LINEUP, at_bats, "home")
        away = current_batter(opponent, at_bats, "opponent")
        assert (home.player_id, home.inning) == (102, 1)
        assert (away.player_id, away.inning) == (201, 5)

    def test_ignores_players_outside_lineup(self, make_at_bat):
        at_bats = [make_at_bat(999)]
        batter = current_batter(LINEUP, at_bats, "home")
        assert (batter.player_id, batter.inning) == (101, 1)

    def test_accepts_lineup_dicts_and_ten_man_lineups(self, make_at_bat):
        lineup = [{"player_id": pid} for pid in LINEUP + [110]]
        at_bats = [make_at_bat(pid, result="walk") for pid in LINEUP]
        assert current_batter(lineup, at_bats, "home").player_id == 110

    def test_empty_lineup_rejected(self):
        with pytest.raises(ValidationError):
            current_batter([], [], "home")

    def test_current_inning(self, make_at_bat):
        assert current_inning([], "home") == 1
        at_bats = [make_at_bat(pid, inning=3, result="strikeout") for pid in LINEUP[:3]]
        assert current_inning(at_bats, "home") == 4
