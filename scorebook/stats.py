from scorebook.models import TeamSide
from scorebook.notation import NON_AT_BAT_RESULTS, ResultCategory, is_hit

TOTAL_BASES = {
    ResultCategory.SINGLE.value: 1,
    ResultCategory.DOUBLE.value: 2,
    ResultCategory.TRIPLE.value: 3,
    ResultCategory.HOME_RUN.value: 4,
}

_NON_AT_BAT = {r.value for r in NON_AT_BAT_RESULTS}


def player_line(at_bats, player_id):
    rows = [ab for ab in at_bats if ab.player_id == player_id]
    return {
        "hits": sum(1 for ab in rows if is_hit(ab.result)),
        "walks": sum(1 for ab in rows if ab.result == ResultCategory.WALK.value),
        "runs": sum(ab.runs_scored or 0 for ab in rows),
        "rbi": sum(ab.rbi or 0 for ab in rows),
        "errors": sum(1 for ab in rows if ab.result == ResultCategory.ERROR.value),
    }


def _count(values):
    counts = {}
    for value in values:
        if value:
            counts[value] = counts.get(value, 0) + 1
    return counts


def hit_statistics(at_bats, player_id=None):
    """Batting average, slugging and where the hits landed.

    Every ledger row counts toward ``total_at_bats`` here, walks included,
    matching how the statistics screen has always reported them.
    """
    rows = list(at_bats) if player_id is None else [ab for ab in at_bats if ab.player_id == player_id]
    hits = [ab for ab in rows if is_hit(ab.result)]
    by_type = {result: sum(1 for ab in hits if ab.result == result) for result in TOTAL_BASES}
    total = len(rows)
    total_bases = sum(TOTAL_BASES[result] * n for result, n in by_type.items())
    return {
        "total_at_bats": total,
        "hits": len(hits),
        "singles": by_type["single"],
        "doubles": by_type["double"],
        "triples": by_type["triple"],
        "home_runs": by_type["home_run"],
        "batting_average": round(len(hits) / total, 3) if total else 0.0,
        "slugging_percentage": round(total_bases / total, 3) if total else 0.0,
        "total_rbis": sum(ab.rbi or 0 for ab in rows),
        "field_distribution": _count(ab.field_area for ab in hits),
        "distance_distribution": _count(ab.hit_distance for ab in hits),
        "angle_distribution": _count(ab.hit_angle for ab in hits),
        "zone_distribution": _count(ab.field_zone for ab in hits),
    }


def box_score(at_bats, players=None, team_side=None):
    """One row per (side, player) with per-inning results, plus a totals row.

    ``players`` maps player id to a display name.
    """
    players = players or {}
    if team_side is not None:
        side = TeamSide.from_stored(team_side)
        at_bats = [ab for ab in at_bats if ab.side == side]
    innings = sorted({ab.inning for ab in at_bats})
    max_inning = max(innings) if innings else 9
    groups = {}
    total = {'ab': 0, 'hit': 0, 'hr': 0, 'rbi': 0, 'run': 0}
    for ab in sorted(at_bats, key=lambda ab: (ab.inning, ab.occurrence, ab.id or 0)):
        key = (ab.side.value, ab.player_id)
        if key not in groups:
            groups[key] = {
                "team_side": ab.side.value,
                "player_id": ab.player_id,
                "player": players.get(ab.player_id, ""),
                "results": [""] * max_inning,
                "ab": 0, "hit": 0, "hr": 0, "rbi": 0, "run": 0,
            }
        row = groups[key]
        idx = ab.inning - 1
        row["results"][idx] += ("/" if row["results"][idx] else "") + (ab.notation or ab.result or "")
        if ab.result not in _NON_AT_BAT:
            row["ab"] += 1
            total['ab'] += 1
        if is_hit(ab.result):
            row["hit"] += 1
            total['hit'] += 1
        if ab.result == ResultCategory.HOME_RUN.value:
            row["hr"] += 1
            total['hr'] += 1
        if ab.rbi:
            row["rbi"] += ab.rbi
            total['rbi'] += ab.rbi
        if ab.runs_scored:
            row["run"] += ab.runs_scored
            total['run'] += ab.runs_scored
    return list(groups.values()), max_inning, total
