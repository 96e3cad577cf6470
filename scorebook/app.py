import logging

from flask import Flask, jsonify, request

from scorebook.config import load_config
from scorebook.errors import NotFoundError, ScorebookError, ValidationError
from scorebook.games import clear_game_data, create_game, delete_game, transition
from scorebook.innings import (
    current_batter,
    is_cell_locked,
    lineup_player_ids,
    outs_by_inning,
    outs_in_half_inning,
)
from scorebook.ledger import at_bats_for_side, save_at_bat
from scorebook.lineups import (
    assign_lineup,
    create_lineup_template,
    create_opponent_lineup,
    delete_lineup_template,
    lineup_for_side,
    list_lineup_templates,
    require_lineups,
    update_lineup_template,
)
from scorebook.models import AtBat, Game, GameStatus, LineupTemplatePlayer, Player, Team, TeamSide, db
from scorebook.notation import interpret
from scorebook.score import recompute_score
from scorebook.stats import box_score, hit_statistics, player_line
from scorebook.store import SqlAlchemyStore

logger = logging.getLogger(__name__)

GRID_INNINGS = 9


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    db.init_app(app)

    @app.errorhandler(ScorebookError)
    def handle_scorebook_error(exc):
        payload = exc.to_dict()
        if getattr(exc, "at_bat", None) is not None:
            payload["at_bat"] = exc.at_bat.to_dict()
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.kind, exc.message)
        return jsonify(payload), exc.status_code

    register_routes(app)

    with app.app_context():
        db.create_all()
    return app


def _store():
    return SqlAlchemyStore()


def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


def _team_side_arg(value):
    try:
        return TeamSide.from_stored(value)
    except ValueError:
        raise ValidationError(f"team_side must be 'home' or 'opponent', got {value!r}") from None


def _team_fields(data):
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError("Team name is required")
    return {'name': name, 'city': data.get('city')}


def _player_fields(data):
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError("Player name is required")
    try:
        number = int(data.get('number'))
    except (TypeError, ValueError):
        raise ValidationError("Jersey number must be an integer") from None
    team_id = data.get('team_id')
    if team_id is not None:
        try:
            team_id = int(team_id)
        except (TypeError, ValueError):
            raise ValidationError("team_id must be an integer") from None
        if db.session.get(Team, team_id) is None:
            raise NotFoundError(f"Team {team_id} not found")
    return {'name': name, 'number': number, 'position': data.get('position'), 'team_id': team_id}


def _player_names(player_ids):
    if not player_ids:
        return {}
    return {p.id: p.name for p in Player.query.filter(Player.id.in_(player_ids)).all()}


def register_routes(app):

    @app.route('/')
    def index():
        completed_games = Game.query.filter_by(game_status=GameStatus.COMPLETED.value).all()
        uncompleted_games = Game.query.filter(Game.game_status != GameStatus.COMPLETED.value).all()
        return jsonify(
            completed_games=[g.to_dict() for g in completed_games],
            uncompleted_games=[g.to_dict() for g in uncompleted_games],
        )

    # -- teams & players -------------------------------------------------

    @app.route('/teams', methods=['GET', 'POST'])
    def teams():
        if request.method == 'POST':
            team = Team(**_team_fields(_body()))
            _store().add(team, action="create team")
            return jsonify(team.to_dict()), 201
        return jsonify([t.to_dict() for t in Team.query.order_by(Team.name).all()])

    @app.route('/teams/<int:team_id>', methods=['PUT'])
    def update_team(team_id):
        team = db.get_or_404(Team, team_id)
        fields = _team_fields(_body())
        with _store().transaction("update team"):
            for name, value in fields.items():
                setattr(team, name, value)
        return jsonify(team.to_dict())

    @app.route('/players', methods=['GET', 'POST'])
    def players():
        if request.method == 'POST':
            player = Player(**_player_fields(_body()))
            _store().add(player, action="create player")
            return jsonify(player.to_dict()), 201
        query = Player.query
        if request.args.get('team_id', type=int):
            query = query.filter_by(team_id=request.args.get('team_id', type=int))
        return jsonify([p.to_dict() for p in query.order_by(Player.number).all()])

    @app.route('/players/<int:player_id>', methods=['PUT', 'DELETE'])
    def player_detail(player_id):
        player = db.get_or_404(Player, player_id)
        if request.method == 'PUT':
            fields = _player_fields(_body())
            with _store().transaction("update player"):
                for name, value in fields.items():
                    setattr(player, name, value)
            return jsonify(player.to_dict())
        if (AtBat.query.filter_by(player_id=player_id).first()
                or LineupTemplatePlayer.query.filter_by(player_id=player_id).first()):
            raise ValidationError("Player has recorded at-bats or lineup spots and cannot be deleted")
        with _store().transaction("delete player") as session:
            session.delete(player)
        return '', 204

    # -- games ------------------------------------------------------------

    @app.route('/games', methods=['GET', 'POST'])
    def games():
        if request.method == 'POST':
            data = _body()
            game = create_game(
                _store(),
                opponent=data.get('opponent'),
                game_date=data.get('game_date'),
                game_time=data.get('game_time'),
                stadium=data.get('stadium'),
                batting_first=data.get('batting_first', TeamSide.HOME.value),
                team_id=data.get('team_id'),
            )
            return jsonify(game.to_dict()), 201
        return jsonify([g.to_dict() for g in Game.query.order_by(Game.game_date).all()])

    @app.route('/games/<int:game_id>', methods=['GET', 'DELETE'])
    def game_detail(game_id):
        game = db.get_or_404(Game, game_id)
        store = _store()
        if request.method == 'DELETE':
            delete_game(store, game_id)
            return '', 204
        at_bats = store.list_at_bats(game_id)
        names = _player_names({ab.player_id for ab in at_bats})
        stats_table, max_inning, total = box_score(at_bats, names)
        return jsonify(
            game=game.to_dict(),
            stats_table=stats_table,
            max_inning=max_inning,
            total=total,
            players={pid: dict(player_line(at_bats, pid), name=name) for pid, name in names.items()},
        )

    @app.route('/games/<int:game_id>/status', methods=['POST'])
    def game_status(game_id):
        game = transition(_store(), game_id, _body().get('status'))
        return jsonify(game.to_dict())

    @app.route('/games/<int:game_id>/clear', methods=['POST'])
    def clear_game(game_id):
        game = clear_game_data(_store(), game_id)
        return jsonify(game.to_dict())

    # -- lineups ----------------------------------------------------------

    @app.route('/lineup_templates', methods=['GET', 'POST'])
    def lineup_templates():
        if request.method == 'POST':
            data = _body()
            template = create_lineup_template(_store(), data.get('team_id'), data.get('name'),
                                              data.get('entries'), bool(data.get('has_dh')))
            return jsonify(template.to_dict()), 201
        templates = list_lineup_templates(request.args.get('team_id', type=int))
        return jsonify([t.to_dict() for t in templates])

    @app.route('/lineup_templates/<int:template_id>', methods=['PUT', 'DELETE'])
    def lineup_template_detail(template_id):
        store = _store()
        if request.method == 'DELETE':
            delete_lineup_template(store, template_id)
            return '', 204
        data = _body()
        template = update_lineup_template(store, template_id, name=data.get('name'),
                                          entries=data.get('entries'), has_dh=data.get('has_dh'))
        return jsonify(template.to_dict())

    @app.route('/games/<int:game_id>/lineup', methods=['POST'])
    def set_lineup(game_id):
        data = _body()
        store = _store()
        template_id = data.get('template_id')
        if template_id is None:
            game = store.get_game(game_id)
            template = create_lineup_template(store, data.get('team_id', game.team_id),
                                              data.get('name'), data.get('entries'),
                                              bool(data.get('has_dh')))
            template_id = template.id
        template = assign_lineup(store, game_id, template_id, TeamSide.HOME)
        return jsonify(template_id=template.id, entries=[e.to_dict() for e in template.entries])

    @app.route('/games/<int:game_id>/opponent_lineup', methods=['POST'])
    def set_opponent_lineup(game_id):
        data = _body()
        store = _store()
        if data.get('template_id') is not None:
            template = assign_lineup(store, game_id, data['template_id'], TeamSide.OPPONENT)
        else:
            template = create_opponent_lineup(store, game_id, data.get('entries'),
                                              bool(data.get('has_dh')))
        return jsonify(template_id=template.id, entries=[e.to_dict() for e in template.entries])

    # -- live scorebook ---------------------------------------------------

    @app.route('/games/<int:game_id>/scorebook')
    def scorebook(game_id):
        store = _store()
        game = store.get_game(game_id)
        side = _team_side_arg(request.args.get('team_side', TeamSide.HOME.value))
        lineup = lineup_for_side(store, game, side)
        at_bats = store.list_at_bats(game_id)
        side_rows = at_bats_for_side(at_bats, side)
        batter = current_batter(lineup, side_rows, side)

        grid_innings = max(GRID_INNINGS, batter.inning)
        locked_cells = [
            {"player_id": pid, "inning": inning}
            for pid in lineup_player_ids(lineup)
            for inning in range(1, grid_innings + 1)
            if is_cell_locked(side_rows, pid, inning, side)
        ]
        return jsonify(
            game=game.to_dict(),
            team_side=side.value,
            is_top=(side.value == (game.batting_first or TeamSide.HOME.value)),
            read_only=game.is_completed,
            lineup=[e.to_dict() for e in lineup],
            current_batter=batter._asdict(),
            outs=outs_in_half_inning(side_rows, batter.inning, side),
            outs_by_inning=outs_by_inning(side_rows, side),
            locked_cells=locked_cells,
            at_bats=[ab.to_dict() for ab in side_rows],
            score=recompute_score(at_bats, side),
        )

    @app.route('/games/<int:game_id>/at_bats', methods=['GET', 'POST'])
    def at_bats(game_id):
        store = _store()
        game = store.get_game(game_id)
        if request.method == 'GET':
            return jsonify([ab.to_dict() for ab in store.list_at_bats(game_id)])

        require_lineups(game)
        data = _body()
        side = _team_side_arg(data.get('team_side'))
        ledger = at_bats_for_side(store.list_at_bats(game_id), side)
        try:
            player_id, inning = int(data.get('player_id')), int(data.get('inning'))
        except (TypeError, ValueError):
            raise ValidationError("player_id and inning must be integers") from None
        if not game.is_completed and is_cell_locked(ledger, player_id, inning, side):
            raise ValidationError(f"Inning {inning} already has 3 outs for the {side.value} side")

        at_bat = save_at_bat(
            store, game_id, player_id, inning, side,
            notation=data.get('notation'),
            base_runners=data.get('base_runners'),
            base_runner_outs=data.get('base_runner_outs'),
            out_types=data.get('out_types'),
            rbi=data.get('rbi', 0),
            field_location=data.get('field_location'),
            run_scored=bool(data.get('run_scored')),
            occurrence=data.get('at_bat_number'),
        )
        lineup = lineup_for_side(store, game, side)
        batter = current_batter(lineup, at_bats_for_side(store.list_at_bats(game_id), side), side)
        game = store.get_game(game_id)
        return jsonify(
            at_bat=at_bat.to_dict(),
            our_score=game.our_score,
            opponent_score=game.opponent_score,
            current_batter=batter._asdict(),
        )

    @app.route('/games/<int:game_id>/statistics')
    def statistics(game_id):
        db.get_or_404(Game, game_id)
        player_id = request.args.get('player_id', type=int)
        return jsonify(hit_statistics(_store().list_at_bats(game_id), player_id))

    @app.route('/notation', methods=['POST'])
    def notation():
        raw = _body().get('notation')
        return jsonify(notation=raw, result=interpret(raw).value)


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'])
