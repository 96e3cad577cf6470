from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

BASES = ("first", "second", "third", "home")


def utcnow():
    return datetime.now(timezone.utc)


class TeamSide(str, Enum):
    HOME = "home"          # our team
    OPPONENT = "opponent"

    @classmethod
    def from_stored(cls, value):
        """Normalize a stored/submitted side; legacy rows without one are home."""
        if value is None or value == "":
            return cls.HOME
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AtBatKey(NamedTuple):
    """Logical identity of a ledger row within one game."""
    player_id: int
    inning: int
    team_side: TeamSide
    occurrence: int


class Team(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    city = db.Column(db.String(100))

    def to_dict(self):
        return {"id": self.id, "name": self.name, "city": self.city}


class Player(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id'))
    name = db.Column(db.String(100), nullable=False)
    number = db.Column(db.Integer, nullable=False)
    position = db.Column(db.String(100))
    team = db.relationship('Team', backref='players')

    def to_dict(self):
        return {
            "id": self.id,
            "team_id": self.team_id,
            "name": self.name,
            "number": self.number,
            "position": self.position,
        }


class LineupTemplate(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id'))
    name = db.Column(db.String(100), nullable=False)
    has_dh = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    entries = db.relationship('LineupTemplatePlayer', backref='template',
                              order_by='LineupTemplatePlayer.batting_order',
                              cascade='all, delete-orphan')

    def to_dict(self):
        return {
            "id": self.id,
            "team_id": self.team_id,
            "name": self.name,
            "has_dh": bool(self.has_dh),
            "entries": [e.to_dict() for e in self.entries],
        }


class LineupTemplatePlayer(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    template_id = db.Column(db.Integer, db.ForeignKey('lineup_template.id'), nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    batting_order = db.Column(db.Integer, nullable=False)  # 1..9, 10 with DH
    position = db.Column(db.String(4), nullable=False)
    player = db.relationship('Player')

    def to_dict(self):
        return {
            "player_id": self.player_id,
            "batting_order": self.batting_order,
            "position": self.position,
            "name": self.player.name if self.player else None,
        }


class Game(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id'))
    opponent = db.Column(db.String(100), nullable=False)
    game_date = db.Column(db.String(20), nullable=False)
    game_time = db.Column(db.String(10))
    stadium = db.Column(db.String(100))
    our_score = db.Column(db.Integer, default=0)
    opponent_score = db.Column(db.Integer, default=0)
    innings_played = db.Column(db.Integer, default=0)
    game_status = db.Column(db.String(20), default=GameStatus.SCHEDULED.value, nullable=False)
    batting_first = db.Column(db.String(10), default=TeamSide.HOME.value)
    lineup_template_id = db.Column(db.Integer, db.ForeignKey('lineup_template.id'))
    opponent_lineup_template_id = db.Column(db.Integer, db.ForeignKey('lineup_template.id'))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    @property
    def is_completed(self):
        return self.game_status == GameStatus.COMPLETED.value

    def to_dict(self):
        return {
            "id": self.id,
            "team_id": self.team_id,
            "opponent": self.opponent,
            "game_date": self.game_date,
            "game_time": self.game_time,
            "stadium": self.stadium,
            "our_score": self.our_score,
            "opponent_score": self.opponent_score,
            "innings_played": self.innings_played,
            "game_status": self.game_status,
            "batting_first": self.batting_first,
            "lineup_template_id": self.lineup_template_id,
            "opponent_lineup_template_id": self.opponent_lineup_template_id,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class AtBat(db.Model):
    __tablename__ = 'at_bats'

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    inning = db.Column(db.Integer, nullable=False)
    team_side = db.Column(db.String(10))            # NULL on legacy rows == home
    at_bat_number = db.Column(db.Integer, default=1)  # occurrence within (player, inning, side)
    notation = db.Column(db.String(50))
    result = db.Column(db.String(20))
    rbi = db.Column(db.Integer, default=0)
    runs_scored = db.Column(db.Integer, default=0)
    stolen_bases = db.Column(db.Integer, default=0)
    base_runners = db.Column(db.JSON)
    base_runner_outs = db.Column(db.JSON)
    out_types = db.Column(db.JSON)
    field_area = db.Column(db.String(50))
    field_zone = db.Column(db.String(50))
    hit_distance = db.Column(db.String(20))
    hit_angle = db.Column(db.String(20))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    player = db.relationship('Player')

    @property
    def side(self):
        return TeamSide.from_stored(self.team_side)

    @property
    def occurrence(self):
        return self.at_bat_number or 1

    @property
    def key(self):
        return AtBatKey(self.player_id, self.inning, self.side, self.occurrence)

    @property
    def out_type(self):
        # first non-empty out type, the single-column form older readers expect
        for base in BASES:
            value = (self.out_types or {}).get(base)
            if value:
                return value
        return ""

    def to_dict(self):
        return {
            "id": self.id,
            "game_id": self.game_id,
            "player_id": self.player_id,
            "inning": self.inning,
            "team_side": self.side.value,
            "at_bat_number": self.occurrence,
            "notation": self.notation,
            "result": self.result,
            "rbi": self.rbi or 0,
            "runs_scored": self.runs_scored or 0,
            "stolen_bases": self.stolen_bases or 0,
            "base_runners": self.base_runners,
            "base_runner_outs": self.base_runner_outs,
            "out_types": self.out_types,
            "out_type": self.out_type,
            "field_area": self.field_area,
            "field_zone": self.field_zone,
            "hit_distance": self.hit_distance,
            "hit_angle": self.hit_angle,
        }
