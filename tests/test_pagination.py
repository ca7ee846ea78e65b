"""Tests for portal/pagination.py."""

import pytest

from portal.pagination import PageCursor, clamp_page, paginate, total_pages


def test_total_pages():
    assert total_pages(0) == 0
    assert total_pages(1) == 1
    assert total_pages(6) == 1
    assert total_pages(7) == 2
    assert total_pages(13, page_size=6) == 3


def test_window_slices():
    items = list(range(14))
    assert paginate(items, 1).items == [0, 1, 2, 3, 4, 5]
    assert paginate(items, 2).items == [6, 7, 8, 9, 10, 11]
    assert paginate(items, 3).items == [12, 13]


@pytest.mark.parametrize("requested,expected", [(-3, 1), (0, 1), (1, 1), (3, 3), (4, 3), (99, 3)])
def test_out_of_range_pages_are_clamped(requested, expected):
    page = paginate(list(range(13)), requested)
    assert page.page == expected
    assert page.total_pages == 3


def test_empty_list_has_no_pages():
    page = paginate([], 5)
    assert page.items == []
    assert page.total_pages == 0
    assert page.page == 1
    assert page.has_navigation is False


def test_clamp_page_tolerates_garbage():
    assert clamp_page("x", 4) == 1
    assert clamp_page(None, 4) == 1
    assert clamp_page(2, 0) == 1
    assert clamp_page(float("nan"), 4) == 1
    assert clamp_page(float("inf"), 3) == 3
    assert clamp_page(float("-inf"), 3) == 1
    assert clamp_page(float("inf"), 0) == 1


class TestPageCursor:
    def test_next_and_previous_stop_at_bounds(self):
        cursor = PageCursor(page_size=6)
        cursor.reset(13)
        assert cursor.previous() == 1
        assert cursor.next() == 2
        assert cursor.next() == 3
        assert cursor.next() == 3
        assert cursor.previous() == 2

    def test_set_page_clamps(self):
        cursor = PageCursor()
        cursor.reset(10)
        assert cursor.set_page(50) == 2
        assert cursor.set_page(-1) == 1

    def test_reset_goes_back_to_first_page(self):
        cursor = PageCursor()
        cursor.reset(20)
        cursor.set_page(3)
        cursor.reset(20)
        assert cursor.page == 1

    def test_resize_keeps_page_in_range(self):
        cursor = PageCursor()
        cursor.reset(20)
        cursor.set_page(4)
        cursor.resize(7)
        assert cursor.page == 2

    def test_window(self):
        cursor = PageCursor(page_size=2)
        items = ["a", "b", "c"]
        cursor.reset(len(items))
        cursor.next()
        assert cursor.window(items).items == ["c"]
