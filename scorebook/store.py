import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from scorebook.errors import NotFoundError, PersistenceError
from scorebook.models import AtBat, Game, LineupTemplate, LineupTemplatePlayer, Player, db, utcnow

logger = logging.getLogger(__name__)


class SqlAlchemyStore:
    def __init__(self, session=None):
        self.session = session or db.session

    @contextmanager
    def transaction(self, action):
        """Commit on success; roll back and raise PersistenceError on database failure."""
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database error while trying to %s", action)
            raise PersistenceError(f"Could not {action}: {exc.__class__.__name__}") from exc
        except Exception:
            self.session.rollback()
            raise

    @contextmanager
    def reading(self, action):
        try:
            yield self.session
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database error while trying to %s", action)
            raise PersistenceError(f"Could not {action}: {exc.__class__.__name__}") from exc

    # -- at-bats --------------------------------------------------------

    def list_at_bats(self, game_id):
        with self.reading("list at-bats"):
            return (AtBat.query
                    .filter_by(game_id=game_id)
                    .order_by(AtBat.inning, AtBat.at_bat_number, AtBat.id)
                    .all())

    def upsert_at_bat(self, record):
        with self.transaction("save at-bat") as session:
            record.updated_at = utcnow()
            session.add(record)
        return record

    def delete_at_bats(self, game_id):
        with self.transaction("delete at-bats"):
            return AtBat.query.filter_by(game_id=game_id).delete()

    # -- games ----------------------------------------------------------

    def get_game(self, game_id):
        with self.reading("load game") as session:
            game = session.get(Game, game_id)
        if game is None:
            raise NotFoundError(f"Game {game_id} not found")
        return game

    def update_game(self, game_id, **fields):
        game = self.get_game(game_id)
        with self.transaction("update game"):
            for name, value in fields.items():
                setattr(game, name, value)
            game.updated_at = utcnow()
        return game

    # -- players --------------------------------------------------------

    def get_player(self, player_id):
        with self.reading("load player") as session:
            return session.get(Player, player_id)

    # -- lineups --------------------------------------------------------

    def get_template(self, template_id):
        with self.reading("load lineup") as session:
            template = session.get(LineupTemplate, template_id)
        if template is None:
            raise NotFoundError(f"Lineup template {template_id} not found")
        return template

    def get_lineup(self, template_id):
        """Entries of a lineup template in batting order."""
        self.get_template(template_id)
        with self.reading("load lineup"):
            return (LineupTemplatePlayer.query
                    .filter_by(template_id=template_id)
                    .order_by(LineupTemplatePlayer.batting_order)
                    .all())

    def add(self, *records, action="save"):
        with self.transaction(action) as session:
            session.add_all(records)
        return records
