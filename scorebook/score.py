import logging

from scorebook.errors import PersistenceError, ScoreReconcileError
from scorebook.models import TeamSide

logger = logging.getLogger(__name__)


def recompute_score(at_bats, team_side=None):
    """Sum of ``runs_scored`` over the ledger, optionally for one side only."""
    if team_side is not None:
        side = TeamSide.from_stored(team_side)
        at_bats = [ab for ab in at_bats if ab.side == side]
    return sum(ab.runs_scored or 0 for ab in at_bats)


def reconcile_game_score(store, game_id, at_bat=None):
    """Re-read the ledger and overwrite both scores of the game.

    Home rows (legacy rows without a side included) feed ``our_score`` and
    opponent rows feed ``opponent_score``. The scores are always replaced
    with fresh sums, never incremented, so editing an earlier at-bat can
    never double count.

    A failure here leaves the triggering ledger write committed; it surfaces
    as ScoreReconcileError carrying that at-bat.
    """
    try:
        rows = store.list_at_bats(game_id)
        ours = recompute_score(rows, TeamSide.HOME)
        theirs = recompute_score(rows, TeamSide.OPPONENT)
        store.update_game(game_id, our_score=ours, opponent_score=theirs)
    except PersistenceError as exc:
        logger.error("Score reconcile failed for game %s: %s", game_id, exc.message)
        raise ScoreReconcileError(
            "At-bat saved but the game score could not be updated", at_bat=at_bat,
        ) from exc
    logger.info("Game %s score reconciled to %d-%d", game_id, ours, theirs)
    return ours, theirs
