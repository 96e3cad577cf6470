"""Base-runner snapshot carried on every at-bat.

``BaseRunnerState`` records where the batter ended up. Selecting a base
clears the others; scoring a run is a terminal transformation that leaves
only ``home`` set. ``BaseRunnerOuts`` is an independent overlay keyed by the
same four bases: marking an out never touches the runner snapshot.

One fate per base per at-bat: two runners put out on the same base in the
same play cannot both be represented.
"""

import dataclasses
from dataclasses import dataclass

from scorebook.errors import ValidationError
from scorebook.models import BASES

_HIT_PLACEMENT = {"H1": "first", "H2": "second", "H3": "third"}


def _check_base(base):
    if base not in BASES:
        raise ValidationError(f"Unknown base {base!r}; expected one of {', '.join(BASES)}")


def _flags_from(data, cls):
    if data is None:
        return cls()
    if isinstance(data, cls):
        return data
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object keyed by base, got {type(data).__name__}")
    unknown = set(data) - set(BASES)
    if unknown:
        raise ValidationError(f"Unknown base(s): {', '.join(sorted(unknown))}")
    return cls(**{base: bool(data.get(base, False)) for base in BASES})


@dataclass(frozen=True)
class BaseRunnerState:
    first: bool = False
    second: bool = False
    third: bool = False
    home: bool = False

    @classmethod
    def from_dict(cls, data):
        return _flags_from(data, cls)

    @classmethod
    def for_hit(cls, notation):
        """Default placement for a hit button (H1/H2/H3/HR)."""
        clean = str(notation or "").strip().upper()
        if clean == "HR":
            return cls().score_run()
        if clean in _HIT_PLACEMENT:
            return cls().advance_to(_HIT_PLACEMENT[clean])
        return cls()

    def to_dict(self):
        return dataclasses.asdict(self)

    def advance_to(self, base):
        _check_base(base)
        return BaseRunnerState(**{b: b == base for b in BASES})

    def score_run(self):
        return BaseRunnerState(home=True)

    @property
    def run_scored(self):
        return self.home

    @property
    def runs_scored(self):
        # at most one run is credited per at-bat record
        return 1 if self.home else 0


@dataclass(frozen=True)
class BaseRunnerOuts:
    first: bool = False
    second: bool = False
    third: bool = False
    home: bool = False

    @classmethod
    def from_dict(cls, data):
        return _flags_from(data, cls)

    def to_dict(self):
        return dataclasses.asdict(self)

    def mark_out(self, base):
        _check_base(base)
        return dataclasses.replace(self, **{base: True})

    def any(self):
        return any(getattr(self, base) for base in BASES)


def normalize_out_types(data):
    """Base-keyed free-text out types (TAGGED_OUT, FORCE_OUT, ...)."""
    if data is None:
        return {base: "" for base in BASES}
    if not isinstance(data, dict):
        raise ValidationError("out_types must be an object keyed by base")
    unknown = set(data) - set(BASES)
    if unknown:
        raise ValidationError(f"Unknown base(s): {', '.join(sorted(unknown))}")
    return {base: str(data.get(base) or "").strip().upper() for base in BASES}


def runner_outs(flags, out_types):
    """Out flags for an at-bat; a base that carries an out type is marked out."""
    outs = BaseRunnerOuts.from_dict(flags)
    for base, out_type in out_types.items():
        if out_type:
            outs = outs.mark_out(base)
    return outs


def has_runner_out(base_runner_outs):
    """True when any base carries an out flag; tolerates raw dicts and None."""
    if not base_runner_outs:
        return False
    if isinstance(base_runner_outs, BaseRunnerOuts):
        return base_runner_outs.any()
    return any(bool(base_runner_outs.get(base)) for base in BASES)
