class ScorebookError(Exception):
    status_code = 500
    kind = "scorebook_error"

    def __init__(self, message=""):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.kind, "message": self.message}


class ValidationError(ScorebookError):
    """Bad input: incomplete lineup, duplicate position, invalid inning..."""
    status_code = 400
    kind = "validation_error"


class NotFoundError(ScorebookError):
    status_code = 404
    kind = "not_found"


class GameLockedError(ScorebookError):
    """Write attempted against a completed game."""
    status_code = 409
    kind = "game_locked"


class PersistenceError(ScorebookError):
    """A read or write against the database failed."""
    status_code = 503
    kind = "persistence_error"


class ScoreReconcileError(PersistenceError):
    """The at-bat was committed but the score overwrite failed.

    The ledger write is not rolled back; the next successful save
    recomputes the score from the full ledger.
    """
    kind = "score_reconcile_error"

    def __init__(self, message="", at_bat=None):
        super().__init__(message)
        self.at_bat = at_bat
