import pytest

from scorebook.notation import (
    NOTATION_TABLE,
    ResultCategory,
    interpret,
    is_hit,
    is_out,
    notation_table,
)


class TestInterpret:
    @pytest.mark.parametrize("notation, expected", [
        ("6-3", "ground_out"),
        ("4-3", "ground_out"),
        ("F-7", "fly_out"),
        ("L-6", "line_out"),
        ("P-2", "pop_out"),
        ("H1", "single"),
        ("2B", "double"),
        ("H3", "triple"),
        ("HR", "home_run"),
        ("BB", "walk"),
        ("HBP", "hit_by_pitch"),
        ("K", "strikeout"),
        ("SO", "strikeout"),
        ("SF", "sacrifice_fly"),
        ("SAC", "sacrifice_bunt"),
        ("E", "error"),
        ("E-6", "error"),
        ("FC", "ground_out"),
        ("WP", "walk"),
        ("BK", "walk"),
        ("INT", "walk"),
        ("U-3", "ground_out"),
        ("FO-H", "ground_out"),
    ])
    def test_documented_notations(self, notation, expected):
        assert interpret(notation) == ResultCategory(expected)

    def test_case_and_whitespace_insensitive(self):
        assert interpret("  hr ") is ResultCategory.HOME_RUN
        assert interpret("f-8") is ResultCategory.FLY_OUT

    @pytest.mark.parametrize("raw", ["", None, "DRAWING_SAVED", "6-4-3", "HRR", "U-2"])
    def test_unknown_defaults_to_ground_out(self, raw):
        assert interpret(raw) is ResultCategory.GROUND_OUT

    def test_every_table_entry_round_trips(self):
        for notation, category in NOTATION_TABLE.items():
            assert interpret(notation.lower()) is category

    def test_table_covers_all_fourteen_categories(self):
        assert set(NOTATION_TABLE.values()) == set(ResultCategory)

    def test_notation_table_is_a_copy(self):
        table = notation_table()
        table["K"] = "single"
        assert interpret("K") is ResultCategory.STRIKEOUT


class TestResultGroups:
    def test_out_results(self):
        assert is_out("strikeout")
        assert is_out(ResultCategory.POP_OUT)
        assert not is_out("sacrifice_fly")
        assert not is_out("error")
        assert not is_out(None)

    def test_hits(self):
        assert is_hit("home_run")
        assert not is_hit("walk")
        assert not is_hit("not-a-result")
