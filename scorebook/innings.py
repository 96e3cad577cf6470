"""Outs, half-inning closure and the current batter, derived from the ledger.

Nothing here is stored: every value is recomputed from the list of at-bats,
so correcting a past at-bat changes everything downstream of it.

Rows are partitioned by team side before anything else, including when
looking for the latest inning; a row without a side counts as home.
"""

from typing import NamedTuple

from scorebook.base_runners import has_runner_out
from scorebook.errors import ValidationError
from scorebook.models import TeamSide
from scorebook.notation import is_out

OUTS_PER_HALF_INNING = 3


class CurrentBatter(NamedTuple):
    player_id: int
    inning: int
    batting_order: int  # 1-based
    occurrence: int     # at_bat_number the next save for this batter should use


def _side_rows(at_bats, team_side):
    side = TeamSide.from_stored(team_side)
    return [ab for ab in at_bats if ab.side == side]


def records_out(at_bat):
    """An at-bat counts as one out if any runner was put out or the result is an out."""
    return has_runner_out(at_bat.base_runner_outs) or is_out(at_bat.result)


def outs_in_half_inning(at_bats, inning, team_side=TeamSide.HOME):
    # distinct qualifying rows, not distinct flags
    return sum(1 for ab in _side_rows(at_bats, team_side)
               if ab.inning == inning and records_out(ab))


def is_half_inning_over(at_bats, inning, team_side=TeamSide.HOME):
    return outs_in_half_inning(at_bats, inning, team_side) >= OUTS_PER_HALF_INNING


def outs_by_inning(at_bats, team_side=TeamSide.HOME):
    outs = {}
    for ab in _side_rows(at_bats, team_side):
        outs.setdefault(ab.inning, 0)
        if records_out(ab):
            outs[ab.inning] += 1
    return outs


def has_batted(at_bats, player_id, inning, team_side=TeamSide.HOME):
    return any(ab.player_id == player_id and ab.inning == inning
               for ab in _side_rows(at_bats, team_side))


def is_cell_locked(at_bats, player_id, inning, team_side=TeamSide.HOME):
    """A scorebook cell is closed once its half-inning has 3 outs and the player never came up."""
    return (is_half_inning_over(at_bats, inning, team_side)
            and not has_batted(at_bats, player_id, inning, team_side))


def lineup_player_ids(lineup):
    """Player ids in batting order from ids, lineup rows or dicts."""
    ids = []
    for entry in lineup:
        if isinstance(entry, int):
            ids.append(entry)
        elif isinstance(entry, dict):
            ids.append(entry["player_id"])
        else:
            ids.append(entry.player_id)
    return ids


def next_occurrence(at_bats, player_id, inning, team_side=TeamSide.HOME):
    occurrences = [ab.occurrence for ab in _side_rows(at_bats, team_side)
                   if ab.player_id == player_id and ab.inning == inning]
    return max(occurrences, default=0) + 1


def current_inning(at_bats, team_side=TeamSide.HOME):
    rows = _side_rows(at_bats, team_side)
    if not rows:
        return 1
    max_inning = max(ab.inning for ab in rows)
    if is_half_inning_over(rows, max_inning, team_side):
        return max_inning + 1
    return max_inning


def current_batter(lineup, at_bats, team_side=TeamSide.HOME) -> CurrentBatter:
    """Who is up for ``team_side``, and in which inning.

    The batter after the latest appearance (by occurrence, then batting
    order) in the current inning; the leadoff spot when that inning has no
    at-bats yet.
    """
    order = lineup_player_ids(lineup)
    if not order:
        raise ValidationError("Lineup is empty")
    side = TeamSide.from_stored(team_side)
    rows = _side_rows(at_bats, side)
    inning = current_inning(rows, side)

    index = {pid: i for i, pid in enumerate(order)}
    in_inning = [ab for ab in rows if ab.inning == inning and ab.player_id in index]
    if not in_inning:
        next_index = 0
    else:
        last = max(in_inning, key=lambda ab: (ab.occurrence, index[ab.player_id]))
        next_index = (index[last.player_id] + 1) % len(order)

    player_id = order[next_index]
    return CurrentBatter(
        player_id=player_id,
        inning=inning,
        batting_order=next_index + 1,
        occurrence=next_occurrence(rows, player_id, inning, side),
    )
