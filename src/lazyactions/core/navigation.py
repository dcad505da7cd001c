"""Pure navigation transitions over the presentation model."""

from __future__ import annotations

from dataclasses import dataclass, replace

from lazyactions.core.grouping import PresentationModel
from lazyactions.core.models import CATEGORY_COUNT, Category


@dataclass(frozen=True, slots=True)
class NavigationState:
    """Cursor position of the dashboard.

    ``selected_position`` is the store position of the highlighted job, kept
    in sync with ``category_index`` and ``row_index`` by every transition
    that can move the cursor.
    """

    category_index: int = 0
    row_index: int = 0
    scroll_offset: int = 0
    show_details: bool = False
    selected_position: int | None = None

    @property
    def category(self) -> Category:
        return Category.from_index(self.category_index)


def selected_job(nav: NavigationState, model: PresentationModel) -> int | None:
    """Return the store position under the cursor, or ``None``."""

    positions = model.flatten(nav.category)
    if 0 <= nav.row_index < len(positions):
        return positions[nav.row_index]
    return None


def _with_selection(nav: NavigationState, model: PresentationModel) -> NavigationState:
    return replace(nav, selected_position=selected_job(nav, model))


def _clamp_row(row: int, count: int) -> int:
    if count <= 0:
        return 0
    return min(max(row, 0), count - 1)


def change_category(
    nav: NavigationState, model: PresentationModel, delta: int
) -> NavigationState:
    if nav.show_details:
        return nav
    moved = replace(
        nav,
        category_index=(nav.category_index + delta) % CATEGORY_COUNT,
        row_index=0,
        scroll_offset=0,
    )
    return _with_selection(moved, model)


def change_row(nav: NavigationState, model: PresentationModel, delta: int) -> NavigationState:
    if nav.show_details:
        return nav
    count = model.count(nav.category)
    if count == 0:
        return replace(nav, row_index=0, selected_position=None)
    moved = replace(nav, row_index=_clamp_row(nav.row_index + delta, count))
    return _with_selection(moved, model)


def change_scroll(nav: NavigationState, delta: int) -> NavigationState:
    # The renderer bounds the offset by the number of lines it produced.
    return replace(nav, scroll_offset=max(0, nav.scroll_offset + delta))


def toggle_details(nav: NavigationState) -> NavigationState:
    return replace(nav, show_details=not nav.show_details)


def clamp_to_model(nav: NavigationState, model: PresentationModel) -> NavigationState:
    """Re-validate the cursor after the model was rebuilt from new data."""

    clamped = replace(
        nav,
        category_index=nav.category_index % CATEGORY_COUNT,
        row_index=_clamp_row(nav.row_index, model.count(nav.category)),
        scroll_offset=max(0, nav.scroll_offset),
    )
    return _with_selection(clamped, model)
