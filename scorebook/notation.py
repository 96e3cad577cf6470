"""Scoring notation -> canonical result category.

The lookup is exact after trimming and upper-casing. Anything not in the
table resolves to ``ground_out``. The scoring controls only ever send
notations from a fixed set of buttons, so free text that slips through is
recorded as an out rather than rejected.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ResultCategory(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    HOME_RUN = "home_run"
    WALK = "walk"
    STRIKEOUT = "strikeout"
    GROUND_OUT = "ground_out"
    FLY_OUT = "fly_out"
    LINE_OUT = "line_out"
    POP_OUT = "pop_out"
    ERROR = "error"
    HIT_BY_PITCH = "hit_by_pitch"
    SACRIFICE_FLY = "sacrifice_fly"
    SACRIFICE_BUNT = "sacrifice_bunt"


DEFAULT_CATEGORY = ResultCategory.GROUND_OUT

OUT_RESULTS = frozenset({
    ResultCategory.STRIKEOUT,
    ResultCategory.GROUND_OUT,
    ResultCategory.FLY_OUT,
    ResultCategory.LINE_OUT,
    ResultCategory.POP_OUT,
})

HIT_RESULTS = frozenset({
    ResultCategory.SINGLE,
    ResultCategory.DOUBLE,
    ResultCategory.TRIPLE,
    ResultCategory.HOME_RUN,
})

# not charged as an official at-bat in the box score
NON_AT_BAT_RESULTS = frozenset({
    ResultCategory.WALK,
    ResultCategory.HIT_BY_PITCH,
    ResultCategory.SACRIFICE_FLY,
    ResultCategory.SACRIFICE_BUNT,
})

_FIELDERS = range(1, 10)

NOTATION_TABLE = {
    # generic buttons
    "HIT": ResultCategory.SINGLE,
    "OUT": ResultCategory.GROUND_OUT,
    # hits
    "1B": ResultCategory.SINGLE,
    "2B": ResultCategory.DOUBLE,
    "3B": ResultCategory.TRIPLE,
    "HR": ResultCategory.HOME_RUN,
    "HOMER": ResultCategory.HOME_RUN,
    "HOMERUN": ResultCategory.HOME_RUN,
    "H1": ResultCategory.SINGLE,
    "H2": ResultCategory.DOUBLE,
    "H3": ResultCategory.TRIPLE,
    "BUNT": ResultCategory.SINGLE,
    "BUNT_SINGLE": ResultCategory.SINGLE,
    "INFIELD_HIT": ResultCategory.SINGLE,
    "INFIELD_SINGLE": ResultCategory.SINGLE,
    # walks, hit by pitch
    "BB": ResultCategory.WALK,
    "WALK": ResultCategory.WALK,
    "HBP": ResultCategory.HIT_BY_PITCH,
    "HIT_BY_PITCH": ResultCategory.HIT_BY_PITCH,
    # strikeouts
    "K": ResultCategory.STRIKEOUT,
    "SO": ResultCategory.STRIKEOUT,
    "STRIKEOUT": ResultCategory.STRIKEOUT,
    # ground outs
    "GO": ResultCategory.GROUND_OUT,
    "GROUND_OUT": ResultCategory.GROUND_OUT,
    "BUNT_OUT": ResultCategory.GROUND_OUT,
    "BUNT_GROUND_OUT": ResultCategory.GROUND_OUT,
    "3-1": ResultCategory.GROUND_OUT,
    # fly, line and pop outs
    "FO": ResultCategory.FLY_OUT,
    "FLY_OUT": ResultCategory.FLY_OUT,
    "LO": ResultCategory.LINE_OUT,
    "LINE_OUT": ResultCategory.LINE_OUT,
    "PO": ResultCategory.POP_OUT,
    "POP_OUT": ResultCategory.POP_OUT,
    # errors
    "E": ResultCategory.ERROR,
    "ERROR": ResultCategory.ERROR,
    # sacrifices
    "SF": ResultCategory.SACRIFICE_FLY,
    "SAC_FLY": ResultCategory.SACRIFICE_FLY,
    "SACRIFICE_FLY": ResultCategory.SACRIFICE_FLY,
    "SAC": ResultCategory.SACRIFICE_BUNT,
    "SAC_BUNT": ResultCategory.SACRIFICE_BUNT,
    "SACRIFICE_BUNT": ResultCategory.SACRIFICE_BUNT,
    # fielder's choice
    "FC": ResultCategory.GROUND_OUT,
    "FIELDERS_CHOICE": ResultCategory.GROUND_OUT,
    "FIELDER_CHOICE": ResultCategory.GROUND_OUT,
    "FIELDERS_CHOICE_OUT": ResultCategory.GROUND_OUT,
    # no dedicated category for these: batter/runners advance without an out
    "WP": ResultCategory.WALK,
    "WILD_PITCH": ResultCategory.WALK,
    "PB": ResultCategory.WALK,
    "PASSED_BALL": ResultCategory.WALK,
    "BK": ResultCategory.WALK,
    "BALK": ResultCategory.WALK,
    "INT": ResultCategory.WALK,
    "INTERFERENCE": ResultCategory.WALK,
    # force outs
    "FO-1": ResultCategory.GROUND_OUT,
    "FO-2": ResultCategory.GROUND_OUT,
    "FO-3": ResultCategory.GROUND_OUT,
    "FO-H": ResultCategory.GROUND_OUT,
}

# fielder-assisted and per-fielder shorthand: 6-3, F-7, L-4, P-2, E-6
NOTATION_TABLE.update({f"{n}-3": ResultCategory.GROUND_OUT for n in _FIELDERS if n != 3})
NOTATION_TABLE.update({f"F-{n}": ResultCategory.FLY_OUT for n in _FIELDERS})
NOTATION_TABLE.update({f"L-{n}": ResultCategory.LINE_OUT for n in _FIELDERS})
NOTATION_TABLE.update({f"P-{n}": ResultCategory.POP_OUT for n in _FIELDERS})
NOTATION_TABLE.update({f"E-{n}": ResultCategory.ERROR for n in _FIELDERS})
# unassisted putouts
NOTATION_TABLE.update({f"U-{n}": ResultCategory.GROUND_OUT for n in (1, 3, 4, 5, 6)})


def interpret(raw_notation) -> ResultCategory:
    """Map raw scoring notation to its canonical result category.

    Never raises: ``None``, empty and unrecognized input all yield
    ``ResultCategory.GROUND_OUT``.
    """
    clean = str(raw_notation or "").strip().upper()
    category = NOTATION_TABLE.get(clean)
    if category is None:
        logger.debug("Unrecognized notation %r, defaulting to %s", clean, DEFAULT_CATEGORY.value)
        return DEFAULT_CATEGORY
    return category


def notation_table():
    """Return a copy of the lookup table as plain strings."""
    return {notation: category.value for notation, category in NOTATION_TABLE.items()}


def is_out(result):
    return _as_category(result) in OUT_RESULTS


def is_hit(result):
    return _as_category(result) in HIT_RESULTS


def _as_category(result):
    if result is None or isinstance(result, ResultCategory):
        return result
    try:
        return ResultCategory(result)
    except ValueError:
        return None
