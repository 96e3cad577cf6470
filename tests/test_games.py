import pytest

from scorebook.errors import NotFoundError, ValidationError
from scorebook.games import clear_game_data, create_game, delete_game, transition
from scorebook.ledger import save_at_bat
from scorebook.models import AtBat, Game


class TestCreateGame:
    def test_defaults(self, store):
        game = create_game(store, opponent=" Tigers ", game_date="2024-06-02")
        assert game.id is not None
        assert game.opponent == "Tigers"
        assert game.game_status == "scheduled"
        assert game.batting_first == "home"
        assert (game.our_score, game.opponent_score, game.innings_played) == (0, 0, 0)

    @pytest.mark.parametrize("kwargs", [
        {"opponent": "", "game_date": "2024-06-02"},
        {"opponent": "Tigers", "game_date": None},
        {"opponent": "Tigers", "game_date": "2024-06-02", "batting_first": "away"},
    ])
    def test_invalid(self, store, kwargs):
        with pytest.raises(ValidationError):
            create_game(store, **kwargs)


class TestTransitions:
    def test_full_lifecycle(self, store, ready_game):
        assert transition(store, ready_game.id, "in_progress").game_status == "in_progress"
        game = transition(store, ready_game.id, "completed")
        assert game.is_completed

    def test_cannot_start_without_lineups(self, store, game):
        with pytest.raises(ValidationError):
            transition(store, game.id, "in_progress")
        assert store.get_game(game.id).game_status == "scheduled"

    def test_cannot_skip_or_reverse(self, store, ready_game):
        with pytest.raises(ValidationError):
            transition(store, ready_game.id, "completed")
        transition(store, ready_game.id, "in_progress")
        transition(store, ready_game.id, "completed")
        with pytest.raises(ValidationError):
            transition(store, ready_game.id, "in_progress")

    def test_unknown_status(self, store, ready_game):
        with pytest.raises(ValidationError):
            transition(store, ready_game.id, "postponed")


class TestClearAndDelete:
    def test_clear_removes_ledger_and_resets_game(self, store, ready_game, players):
        save_at_bat(store, ready_game.id, players[0].id, 1, "home", "HR",
                    base_runners={"home": True})
        transition(store, ready_game.id, "in_progress")

        game = clear_game_data(store, ready_game.id)
        assert store.list_at_bats(ready_game.id) == []
        assert game.our_score == 0
        assert game.game_status == "scheduled"
        assert game.lineup_template_id is None
        assert game.opponent_lineup_template_id is None

    def test_clear_unknown_game(self, store):
        with pytest.raises(NotFoundError):
            clear_game_data(store, 404)

    def test_delete_removes_game_and_at_bats(self, store, ready_game, players):
        save_at_bat(store, ready_game.id, players[0].id, 1, "home", "K")
        game_id = ready_game.id
        delete_game(store, game_id)
        assert store.session.get(Game, game_id) is None
        assert AtBat.query.filter_by(game_id=game_id).count() == 0
