from __future__ import annotations

from songscroll.viewport import ScrollTarget, SimulatedViewport, ViewportEvent


def test_offsets_are_clamped_to_scrollable_range() -> None:
    viewport = SimulatedViewport(page_height=1000, window_height=400)

    viewport.scroll_to(5000)
    assert viewport.scroll_offset() == 600

    viewport.scroll_by(-10_000)
    assert viewport.scroll_offset() == 0


def test_short_page_cannot_scroll() -> None:
    viewport = SimulatedViewport(page_height=300, window_height=800, offset=50)

    assert viewport.scroll_offset() == 0
    viewport.scroll_by(25)
    assert viewport.scroll_offset() == 0


def test_element_top_is_relative_to_viewport() -> None:
    viewport = SimulatedViewport(page_height=3000, window_height=800, offset=250)
    target = ScrollTarget("lyrics", document_top=700)

    assert viewport.element_top(target) == 450


def test_history_records_each_movement() -> None:
    viewport = SimulatedViewport(page_height=3000, window_height=800)

    viewport.scroll_to(100)
    viewport.scroll_by(1.5)
    viewport.animate_to(0)

    assert viewport.history == [
        ViewportEvent(kind="jump", offset=100),
        ViewportEvent(kind="step", offset=101.5),
        ViewportEvent(kind="animate", offset=0),
    ]
    assert viewport.events("step") == [ViewportEvent(kind="step", offset=101.5)]
    assert viewport.document_height() == 3000
    assert viewport.viewport_height() == 800
