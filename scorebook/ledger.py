"""The at-bat ledger: one row per (player, inning, team side, occurrence).

``save_at_bat`` is an upsert. Saving a cell that already has a row updates
that row in place, so submitting the same cell twice never duplicates it.
After every write the game score is recomputed from the full ledger and
overwritten (see :mod:`scorebook.score`). The two steps are separate
commits; a failure in the second leaves the first in place.
"""

import logging

from scorebook.base_runners import BaseRunnerState, normalize_out_types, runner_outs
from scorebook.errors import GameLockedError, NotFoundError, ValidationError
from scorebook.models import AtBat, AtBatKey, TeamSide
from scorebook.notation import interpret
from scorebook.score import reconcile_game_score

logger = logging.getLogger(__name__)

FIELD_LOCATION_KEYS = ("field_area", "field_zone", "hit_distance", "hit_angle")


def index_by_key(at_bats):
    """Map AtBatKey -> row. On duplicate legacy keys the earliest row wins."""
    index = {}
    for ab in sorted(at_bats, key=lambda ab: ab.id or 0):
        index.setdefault(ab.key, ab)
    return index


def resolve_key(at_bats, player_id, inning, team_side, occurrence=None):
    """Pick the ledger key a save should write to, and the row already there.

    Without an explicit occurrence the save targets the batter's latest
    appearance in that half-inning (or the first, if there is none). An
    explicit occurrence may name an existing appearance or the next one.
    """
    side = TeamSide.from_stored(team_side)
    index = index_by_key(at_bats)
    taken = [key.occurrence for key in index
             if key.player_id == player_id and key.inning == inning and key.team_side == side]
    latest = max(taken, default=0)

    if occurrence is None:
        occurrence = latest or 1
    else:
        occurrence = _int_field(occurrence, "occurrence", minimum=1)
        if occurrence > latest + 1:
            raise ValidationError(
                f"occurrence {occurrence} skips ahead; player {player_id} has {latest} "
                f"appearance(s) in inning {inning}"
            )

    key = AtBatKey(player_id, inning, side, occurrence)
    return key, index.get(key)


def _int_field(value, name, minimum=0):
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer") from None
    if number < minimum:
        raise ValidationError(f"{name} must be >= {minimum}")
    return number


def _team_side(value):
    try:
        return TeamSide.from_stored(value)
    except ValueError:
        raise ValidationError(f"team_side must be 'home' or 'opponent', got {value!r}") from None


def _field_location(data):
    if not data:
        return {key: "" for key in FIELD_LOCATION_KEYS}
    if not isinstance(data, dict):
        raise ValidationError("field_location must be an object")
    return {key: str(data.get(key) or "") for key in FIELD_LOCATION_KEYS}


def save_at_bat(store, game_id, player_id, inning, team_side, notation,
                base_runners=None, base_runner_outs=None, out_types=None, rbi=0,
                field_location=None, run_scored=False, occurrence=None):
    """Record or correct one plate appearance and reconcile the game score.

    Raises GameLockedError, without touching the ledger or the score, when
    the game is completed.
    """
    game = store.get_game(game_id)
    if game.is_completed:
        raise GameLockedError(f"Game {game_id} is completed; its scorebook is read-only")

    player_id = _int_field(player_id, "player_id", minimum=1)
    inning = _int_field(inning, "inning", minimum=1)
    rbi = _int_field(rbi if rbi is not None else 0, "rbi")
    side = _team_side(team_side)
    if base_runners is None:
        runners = BaseRunnerState.for_hit(notation)
    else:
        runners = BaseRunnerState.from_dict(base_runners)
    if run_scored or runners.home:
        runners = runners.score_run()
    types = normalize_out_types(out_types)
    outs = runner_outs(base_runner_outs, types)
    location = _field_location(field_location)
    if store.get_player(player_id) is None:
        raise NotFoundError(f"Player {player_id} not found")

    result = interpret(notation)
    key, record = resolve_key(store.list_at_bats(game_id), player_id, inning, side, occurrence)
    created = record is None
    if created:
        record = AtBat(game_id=game_id, player_id=player_id, inning=inning,
                       at_bat_number=key.occurrence, stolen_bases=0)

    record.team_side = side.value
    record.notation = str(notation or "").strip()
    record.result = result.value
    record.runs_scored = runners.runs_scored
    record.rbi = rbi
    record.base_runners = runners.to_dict()
    record.base_runner_outs = outs.to_dict()
    record.out_types = types
    for name, value in location.items():
        setattr(record, name, value)

    store.upsert_at_bat(record)
    logger.info("%s at-bat game=%s player=%s inning=%d side=%s occurrence=%d result=%s runs=%d",
                "Created" if created else "Updated", game_id, player_id, inning,
                side.value, key.occurrence, result.value, record.runs_scored)

    reconcile_game_score(store, game_id, at_bat=record)
    return record


def at_bats_for_side(at_bats, team_side):
    side = TeamSide.from_stored(team_side)
    return [ab for ab in at_bats if ab.side == side]