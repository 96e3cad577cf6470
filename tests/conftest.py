import pytest

from scorebook.app import create_app
from scorebook.games import create_game
from scorebook.lineups import assign_lineup, create_lineup_template, create_opponent_lineup
from scorebook.models import AtBat, Player, Team, db
from scorebook.store import SqlAlchemyStore

POSITIONS = ["CF", "SS", "1B", "LF", "RF", "3B", "C", "2B", "P"]


@pytest.fixture
def app():
    app = create_app({"SQLALCHEMY_DATABASE_URI": "sqlite://", "TESTING": True})
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return SqlAlchemyStore()


@pytest.fixture
def team(store):
    team = Team(name="Dodgers", city="Los Angeles")
    store.add(team)
    return team


@pytest.fixture
def players(store, team):
    """Nine home players; players[0] leads off."""
    roster = [Player(team_id=team.id, name=f"Home {i}", number=i, position=POSITIONS[i - 1])
              for i in range(1, 10)]
    store.add(*roster)
    return roster


@pytest.fixture
def lineup_entries(players):
    return [{"player_id": p.id, "position": POSITIONS[i], "batting_order": i + 1}
            for i, p in enumerate(players)]


@pytest.fixture
def game(store, team):
    return create_game(store, opponent="Giants", game_date="2024-05-01", team_id=team.id)


@pytest.fixture
def ready_game(store, game, team, lineup_entries):
    """A game with both lineups assigned."""
    template = create_lineup_template(store, team.id, "Starters", lineup_entries)
    assign_lineup(store, game.id, template.id)
    create_opponent_lineup(store, game.id, [
        {"name": f"Giant {i + 1}", "position": pos} for i, pos in enumerate(POSITIONS)
    ])
    return store.get_game(game.id)


@pytest.fixture
def make_at_bat():
    """Build unsaved ledger rows for the pure derived-state functions."""
    counter = iter(range(1, 10_000))

    def _make(player_id, inning=1, result="single", team_side="home", outs=None,
              runs=0, occurrence=1, rbi=0, **extra):
        return AtBat(
            id=extra.pop("id", None) or next(counter),
            game_id=1,
            player_id=player_id,
            inning=inning,
            team_side=team_side,
            result=result,
            base_runner_outs=outs,
            base_runners={"first": False, "second": False, "third": False, "home": bool(runs)},
            runs_scored=runs,
            rbi=rbi,
            at_bat_number=occurrence,
            **extra,
        )

    return _make
