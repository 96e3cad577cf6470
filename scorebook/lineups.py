import logging

from scorebook.errors import GameLockedError, NotFoundError, ValidationError
from scorebook.models import Game, LineupTemplate, LineupTemplatePlayer, Player, Team, TeamSide, db

logger = logging.getLogger(__name__)

POSITIONS = ("P", "C", "1B", "2B", "3B", "SS", "LF", "CF", "RF", "DH")
LINEUP_SIZE = 9
LINEUP_SIZE_WITH_DH = 10


def required_entries(has_dh):
    return LINEUP_SIZE_WITH_DH if has_dh else LINEUP_SIZE


def validate_lineup(entries, has_dh=False, identity="player_id"):
    """Check a proposed lineup and return it normalized and sorted by batting order.

    ``identity`` names the field that must be unique per entry; pass None
    to skip that check (opponent lineups are entered by name and may repeat).
    """
    if not isinstance(entries, (list, tuple)):
        raise ValidationError("Lineup entries must be a list")
    required = required_entries(has_dh)
    if len(entries) != required:
        raise ValidationError(f"Please fill all {required} lineup positions (got {len(entries)})")

    normalized = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValidationError(f"Lineup entry {i + 1} must be an object")
        position = str(entry.get("position") or "").strip().upper()
        if position not in POSITIONS:
            raise ValidationError(f"Unknown position {entry.get('position')!r} in entry {i + 1}")
        raw_order = entry.get("batting_order")
        try:
            order = i + 1 if raw_order is None or raw_order == "" else int(raw_order)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid batting order in entry {i + 1}") from None
        if order < 1:
            raise ValidationError(f"Batting order must be at least 1 in entry {i + 1}")
        item = dict(entry, position=position, batting_order=order)
        if identity == "player_id":
            try:
                item["player_id"] = int(entry.get("player_id"))
            except (TypeError, ValueError):
                raise ValidationError(f"Lineup entry {i + 1} needs a player") from None
        elif identity is None and "name" in entry:
            item["name"] = str(entry.get("name") or "").strip()
            if not item["name"]:
                raise ValidationError(f"Lineup entry {i + 1} needs a name")
        normalized.append(item)

    positions = [e["position"] for e in normalized]
    if len(set(positions)) != len(positions):
        raise ValidationError("Duplicate positions are not allowed")
    if ("DH" in positions) != bool(has_dh):
        raise ValidationError("A designated hitter must be listed exactly when the lineup uses one")
    orders = sorted(e["batting_order"] for e in normalized)
    if orders != list(range(1, required + 1)):
        raise ValidationError(f"Batting orders must be 1 to {required}, each used once")
    if identity is not None:
        ids = [e[identity] for e in normalized]
        if len(set(ids)) != len(ids):
            raise ValidationError("A player can only appear once in a lineup")
    return sorted(normalized, key=lambda e: e["batting_order"])


def _signature(rows):
    return sorted((r.player_id, r.batting_order, r.position) for r in rows)


def _known_players(store, lineup):
    for entry in lineup:
        if store.get_player(entry["player_id"]) is None:
            raise NotFoundError(f"Player {entry['player_id']} not found")
    return lineup


def _entry_rows(lineup):
    return [
        LineupTemplatePlayer(player_id=e["player_id"], batting_order=e["batting_order"],
                             position=e["position"])
        for e in lineup
    ]


def create_lineup_template(store, team_id, name, entries, has_dh=False):
    """Validate and save a template, reusing an identical one for the same team."""
    lineup = _known_players(store, validate_lineup(entries, has_dh))

    wanted = sorted((e["player_id"], e["batting_order"], e["position"]) for e in lineup)
    for existing in LineupTemplate.query.filter_by(team_id=team_id).all():
        if _signature(existing.entries) == wanted:
            logger.info("Reusing lineup template %s for team %s", existing.id, team_id)
            return existing

    template = LineupTemplate(team_id=team_id, name=name or "Lineup", has_dh=bool(has_dh))
    template.entries = _entry_rows(lineup)
    store.add(template, action="save lineup template")
    logger.info("Created lineup template %s for team %s", template.id, team_id)
    return template


def list_lineup_templates(team_id=None):
    query = LineupTemplate.query
    if team_id is not None:
        query = query.filter_by(team_id=team_id)
    return query.order_by(LineupTemplate.created_at.desc(), LineupTemplate.id.desc()).all()


def games_using_template(template_id):
    return Game.query.filter(db.or_(Game.lineup_template_id == template_id,
                                    Game.opponent_lineup_template_id == template_id)).all()


def _refuse_if_completed_game_uses(template_id):
    locked = [g.id for g in games_using_template(template_id) if g.is_completed]
    if locked:
        raise GameLockedError(
            f"Lineup template {template_id} belongs to completed game(s) {', '.join(map(str, locked))}"
        )


def update_lineup_template(store, template_id, name=None, entries=None, has_dh=None):
    """Rename a template and/or replace its entries.

    Templates a completed game was scored with cannot change.
    """
    template = store.get_template(template_id)
    _refuse_if_completed_game_uses(template_id)
    has_dh = bool(template.has_dh) if has_dh is None else bool(has_dh)
    if entries is None:
        entries = [e.to_dict() for e in template.entries]
    lineup = _known_players(store, validate_lineup(entries, has_dh))
    if name is not None:
        name = str(name).strip()
        if not name:
            raise ValidationError("Lineup template name cannot be blank")

    with store.transaction("update lineup template"):
        if name is not None:
            template.name = name
        template.has_dh = has_dh
        template.entries = _entry_rows(lineup)
    logger.info("Updated lineup template %s", template_id)
    return template


def delete_lineup_template(store, template_id):
    """Delete a template, detaching it from the games that still reference it."""
    template = store.get_template(template_id)
    _refuse_if_completed_game_uses(template_id)
    games = games_using_template(template_id)
    with store.transaction("delete lineup template") as session:
        for game in games:
            if game.lineup_template_id == template_id:
                game.lineup_template_id = None
            if game.opponent_lineup_template_id == template_id:
                game.opponent_lineup_template_id = None
        session.delete(template)
    logger.info("Deleted lineup template %s (detached from %d game(s))", template_id, len(games))


def _lineup_field(side):
    side = TeamSide.from_stored(side)
    return "lineup_template_id" if side is TeamSide.HOME else "opponent_lineup_template_id"


def assign_lineup(store, game_id, template_id, side=TeamSide.HOME):
    game = store.get_game(game_id)
    if game.is_completed:
        raise GameLockedError(f"Game {game_id} is completed")
    template = store.get_template(template_id)
    validate_lineup([e.to_dict() for e in template.entries], template.has_dh)
    store.update_game(game_id, **{_lineup_field(side): template.id})
    logger.info("Game %s %s lineup set to template %s", game_id,
                TeamSide.from_stored(side).value, template.id)
    return template


def create_opponent_lineup(store, game_id, entries, has_dh=False):
    """Create opponent players by name and assign them as the opponent lineup.

    Every entry gets its own player row, numbered by batting order, even
    when two names are identical.
    """
    game = store.get_game(game_id)
    if game.is_completed:
        raise GameLockedError(f"Game {game_id} is completed")
    lineup = validate_lineup(entries, has_dh, identity=None)
    if any(not e.get("name") for e in lineup):
        raise ValidationError("Every opponent lineup entry needs a name")

    team = Team.query.filter_by(name=game.opponent).first()
    if team is None:
        team = Team(name=game.opponent, city="Opponent")
        store.add(team, action="create opponent team")

    players = [Player(team_id=team.id, name=e["name"], number=e["batting_order"],
                      position=e["position"]) for e in lineup]
    store.add(*players, action="create opponent players")

    template = LineupTemplate(team_id=team.id, name=f"{game.opponent} lineup", has_dh=bool(has_dh))
    template.entries = [
        LineupTemplatePlayer(player_id=p.id, batting_order=e["batting_order"], position=e["position"])
        for p, e in zip(players, lineup)
    ]
    store.add(template, action="save opponent lineup")
    store.update_game(game_id, opponent_lineup_template_id=template.id)
    logger.info("Game %s opponent lineup created as template %s", game_id, template.id)
    return template


def lineups_ready(game):
    return bool(game.lineup_template_id) and bool(game.opponent_lineup_template_id)


def require_lineups(game):
    if not lineups_ready(game):
        raise ValidationError("Both team lineups must be saved before scoring this game")


def lineup_for_side(store, game, side):
    require_lineups(game)
    template_id = getattr(game, _lineup_field(side))
    return store.get_lineup(template_id)
