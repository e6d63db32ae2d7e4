"""Tests for keyboard selection over search results."""
from asearch.core.navigation import QueryState, SelectionCursor


class TestSelectionCursor:
    def test_move_up_wraps_to_last(self):
        cursor = SelectionCursor()
        cursor.reset(3)
        assert cursor.move_up() == 2

    def test_move_down_wraps_to_first(self):
        cursor = SelectionCursor()
        cursor.reset(3)
        cursor.position = 2
        assert cursor.move_down() == 0

    def test_moves_are_noops_without_rows(self):
        cursor = SelectionCursor()
        assert cursor.move_down() == 0
        assert cursor.move_up() == 0
        assert not cursor.has_selection

    def test_select_rejects_out_of_range(self):
        cursor = SelectionCursor()
        cursor.reset(2)
        assert cursor.select(1)
        assert not cursor.select(2)
        assert not cursor.select(-1)
        assert cursor.position == 1


class TestQueryState:
    def test_delivery_resets_cursor(self):
        state = QueryState()
        state.deliver(["a", "b", "c"])
        state.move_down()
        state.move_down()
        assert state.current() == "c"
        state.deliver(["a", "b", "c"])
        assert state.cursor.position == 0
        assert state.current() == "a"

    def test_confirm_without_results(self):
        state = QueryState()
        assert state.confirm() is None
        state.deliver([])
        assert state.confirm() is None

    def test_confirm_returns_highlighted_location(self):
        state = QueryState()
        state.deliver(["/p/foo.txt", "/q/foobar.txt"])
        state.move_up()
        assert state.confirm() == "/q/foobar.txt"

    def test_repeat_dispatch_is_suppressed(self):
        state = QueryState()
        assert state.should_dispatch("foo")
        state.mark_dispatched("foo")
        assert not state.should_dispatch("foo")
        assert state.should_dispatch("fo")

    def test_first_empty_query_is_dispatched(self):
        state = QueryState()
        assert state.should_dispatch("")
