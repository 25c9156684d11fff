"""
Tests for the drag-and-drop ordering logic (no database).
"""
from app.services.board import ColumnOrder, array_move, find_column_with_card, move_card


def _cols():
    return [
        ColumnOrder("todo", ["a", "b", "c"]),
        ColumnOrder("in-progress", ["d"]),
        ColumnOrder("completed", []),
    ]


def _as_dict(columns):
    return {c.id: c.card_ids for c in columns}


def test_array_move():
    assert array_move(["a", "b", "c"], 0, 2) == ["b", "c", "a"]
    assert array_move(["a", "b", "c"], 2, 0) == ["c", "a", "b"]


def test_find_column_with_card():
    cols = _cols()
    assert find_column_with_card(cols, "d").id == "in-progress"
    assert find_column_with_card(cols, "zz") is None


def test_same_column_reorder_is_permutation():
    result = move_card(_cols(), "a", "c")
    assert result.moved
    assert not result.celebrate
    todo = _as_dict(result.columns)["todo"]
    assert todo == ["b", "c", "a"]
    assert sorted(todo) == ["a", "b", "c"]


def test_same_column_round_trip():
    first = move_card(_cols(), "a", "c")
    back = move_card(first.columns, "a", "b")
    assert _as_dict(back.columns)["todo"] == ["a", "b", "c"]


def test_drop_on_own_column_moves_to_end():
    result = move_card(_cols(), "a", "todo")
    assert _as_dict(result.columns)["todo"] == ["b", "c", "a"]


def test_cross_column_insert_before_over_card():
    result = move_card(_cols(), "b", "d")
    cols = _as_dict(result.columns)
    assert cols["todo"] == ["a", "c"]
    assert cols["in-progress"] == ["b", "d"]
    assert result.source_id == "todo"
    assert result.target_id == "in-progress"


def test_cross_column_keeps_total_count():
    before = sum(len(c.card_ids) for c in _cols())
    result = move_card(_cols(), "a", "in-progress")
    after = sum(len(c.card_ids) for c in result.columns)
    assert before == after
    assert _as_dict(result.columns)["in-progress"] == ["d", "a"]


def test_move_into_completed_celebrates():
    result = move_card(_cols(), "d", "completed")
    assert result.moved
    assert result.celebrate
    assert _as_dict(result.columns)["completed"] == ["d"]


def test_reorder_inside_completed_does_not_celebrate():
    cols = [ColumnOrder("completed", ["x", "y"])]
    result = move_card(cols, "x", "y")
    assert result.moved
    assert not result.celebrate


def test_unknown_ids_leave_columns_unchanged():
    original = _as_dict(_cols())
    assert _as_dict(move_card(_cols(), "nope", "todo").columns) == original
    assert _as_dict(move_card(_cols(), "a", "nope").columns) == original
    assert not move_card(_cols(), "a", "a").moved


def test_input_is_not_modified():
    cols = _cols()
    move_card(cols, "a", "completed")
    assert cols[0].card_ids == ["a", "b", "c"]
