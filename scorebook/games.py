import logging

from scorebook.errors import ValidationError
from scorebook.lineups import lineups_ready
from scorebook.models import Game, GameStatus, TeamSide

logger = logging.getLogger(__name__)

TRANSITIONS = {
    GameStatus.SCHEDULED: {GameStatus.IN_PROGRESS},
    GameStatus.IN_PROGRESS: {GameStatus.COMPLETED},
    GameStatus.COMPLETED: set(),
}

RESET_FIELDS = {
    "our_score": 0,
    "opponent_score": 0,
    "innings_played": 0,
    "game_status": GameStatus.SCHEDULED.value,
    "lineup_template_id": None,
    "opponent_lineup_template_id": None,
}


def create_game(store, opponent, game_date, game_time=None, stadium=None,
                batting_first=TeamSide.HOME, team_id=None):
    opponent = (opponent or "").strip()
    if not opponent:
        raise ValidationError("Opponent is required")
    if not game_date:
        raise ValidationError("Game date is required")
    try:
        batting_first = TeamSide.from_stored(batting_first)
    except ValueError:
        raise ValidationError("batting_first must be 'home' or 'opponent'") from None
    game = Game(opponent=opponent, game_date=game_date, game_time=game_time, stadium=stadium,
                team_id=team_id, our_score=0, opponent_score=0, innings_played=0,
                game_status=GameStatus.SCHEDULED.value, batting_first=batting_first.value)
    store.add(game, action="create game")
    logger.info("Created game %s vs %s on %s", game.id, opponent, game_date)
    return game


def transition(store, game_id, status):
    """Move a game along scheduled -> in_progress -> completed."""
    try:
        target = GameStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown game status {status!r}") from None
    game = store.get_game(game_id)
    current = GameStatus(game.game_status)
    if target not in TRANSITIONS[current]:
        raise ValidationError(f"Cannot move game from {current.value} to {target.value}")
    if target is GameStatus.IN_PROGRESS and not lineups_ready(game):
        raise ValidationError("Both team lineups must be saved before the game starts")
    store.update_game(game_id, game_status=target.value)
    logger.info("Game %s moved from %s to %s", game_id, current.value, target.value)
    return game


def clear_game_data(store, game_id):
    """Remove every at-bat, then reset the game row to its initial state.

    The at-bat delete is committed before the game row is touched so that
    the score is never reset while ledger rows remain.
    """
    store.get_game(game_id)
    removed = store.delete_at_bats(game_id)
    game = store.update_game(game_id, **RESET_FIELDS)
    logger.info("Cleared game %s (%d at-bats removed)", game_id, removed)
    return game


def delete_game(store, game_id):
    game = store.get_game(game_id)
    store.delete_at_bats(game_id)
    with store.transaction("delete game") as session:
        session.delete(game)
    logger.info("Deleted game %s", game_id)
