"""
Tests for history.py

Validate the browser-like preview history: cursor movement, branch truncation on fetch and
eviction of the oldest entries once capacity is exceeded.
"""

import pytest
from PIL import Image

from wallspan.conftest import make_photo

# following entities are tested in this module:
from wallspan.history import PreviewEntry
from wallspan.history import PreviewHistory


def entry(name: str) -> PreviewEntry:
    return PreviewEntry(photo=make_photo(name), thumbnail=Image.new("RGB", (4, 4)))


def ids(history: PreviewHistory) -> list:
    return [e.photo.photo_id for e in history]


def filled(*names, capacity=10) -> PreviewHistory:
    history = PreviewHistory(capacity=capacity)
    for name in names:
        history.append(entry(name))
    return history


def test_empty_history():

    history = PreviewHistory()

    assert len(history) == 0
    assert history.cursor is None
    assert history.current() is None
    assert history.move_back() is None
    assert history.move_forward() is None
    assert history.cursor is None


@pytest.mark.parametrize("capacity", [0, -1])
def test_invalid_capacity(capacity):

    with pytest.raises(ValueError):
        PreviewHistory(capacity=capacity)


def test_append_moves_cursor_to_new_entry():

    history = filled("a", "b", "c")

    assert history.cursor == 2
    assert history.current().photo.photo_id == "c"
    assert history.at_tail


def test_move_back_and_forward():

    history = filled("a", "b", "c")

    assert history.move_back().photo.photo_id == "b"
    assert history.move_back().photo.photo_id == "a"
    assert history.at_start
    assert history.move_back() is None
    assert history.cursor == 0

    assert history.move_forward().photo.photo_id == "b"
    assert history.move_forward().photo.photo_id == "c"


def test_forward_at_tail_signals_fetch():

    history = filled("a", "b")

    assert history.move_forward() is None
    assert history.cursor == 1
    assert len(history) == 2


def test_append_truncates_forward_branch():
    """Fetching after stepping back twice discards the two newer entries."""

    history = filled("a", "b", "c", "d", "e")
    history.move_back()
    history.move_back()

    history.append(entry("f"))

    assert ids(history) == ["a", "b", "c", "f"]
    assert history.cursor == 3
    assert history.move_forward() is None


def test_capacity_evicts_oldest():

    history = filled(*[str(i) for i in range(12)], capacity=10)

    assert len(history) == 10
    assert ids(history) == [str(i) for i in range(2, 12)]
    assert history.cursor == 9
    assert history.current().photo.photo_id == "11"


def test_capacity_one():

    history = filled("a", "b", capacity=1)

    assert ids(history) == ["b"]
    assert history.at_start and history.at_tail
    assert history.move_back() is None


@pytest.mark.parametrize("steps", range(1, 30))
def test_cursor_always_in_range(steps):
    """Any interleaving of appends and moves keeps the cursor on a real entry."""

    history = PreviewHistory(capacity=3)
    actions = ["append", "back", "back", "forward", "append", "append", "append", "back"]

    for step in range(steps):
        action = actions[step % len(actions)]
        if action == "append":
            history.append(entry(str(step)))
        elif action == "back":
            history.move_back()
        else:
            history.move_forward()

        assert len(history) <= 3
        assert history.cursor is None or 0 <= history.cursor < len(history)


def test_clear():

    history = filled("a", "b")
    history.clear()

    assert len(history) == 0
    assert history.current() is None
