"""State and transitions for the offset-navigated chart.

Each transition takes a state and returns a new one; fetching is left to the
caller. A fetch is tagged with a request id and its result only lands if that
id is still the pending one, so a slow response for an old window can never
overwrite a newer one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

import structlog

from stepper_history.aggregation import build_chart
from stepper_history.dates import calculate_date_range
from stepper_history.models import ChartResult, DailyStepRecord, DateRange, ViewMode

logger = structlog.get_logger()


@dataclass(frozen=True)
class FetchRequest:
    request_id: int
    date_range: DateRange


@dataclass(frozen=True)
class RegularChartState:
    view_mode: ViewMode
    offset: int
    date_range: DateRange
    records: tuple[DailyStepRecord, ...] = ()
    is_loading: bool = False
    error: str | None = None
    request_id: int = 0
    pending_request_id: int | None = None


def initial_state(view_mode: ViewMode = ViewMode.DAILY, today: date | None = None) -> RegularChartState:
    return RegularChartState(
        view_mode=view_mode,
        offset=0,
        date_range=calculate_date_range(view_mode, 0, today),
    )


def _move_to(state: RegularChartState, view_mode: ViewMode, offset: int, today: date | None) -> RegularChartState:
    return replace(
        state,
        view_mode=view_mode,
        offset=offset,
        date_range=calculate_date_range(view_mode, offset, today),
    )


def change_view_mode(state: RegularChartState, view_mode: ViewMode, today: date | None = None) -> RegularChartState:
    """Switch granularity and jump back to the current period."""
    return _move_to(state, view_mode, 0, today)


def go_previous(state: RegularChartState, today: date | None = None) -> RegularChartState:
    return _move_to(state, state.view_mode, state.offset - 1, today)


def go_next(state: RegularChartState, today: date | None = None) -> RegularChartState:
    """Step toward the present. Never moves past offset 0."""
    if state.offset >= 0:
        return state
    return _move_to(state, state.view_mode, state.offset + 1, today)


def reset_to_current(state: RegularChartState, today: date | None = None) -> RegularChartState:
    return _move_to(state, state.view_mode, 0, today)


def go_to_offset(state: RegularChartState, offset: int, today: date | None = None) -> RegularChartState:
    """Jump straight to an offset; future offsets clamp to the current period."""
    return _move_to(state, state.view_mode, min(offset, 0), today)


def start_fetch(state: RegularChartState) -> tuple[RegularChartState, FetchRequest]:
    request_id = state.request_id + 1
    new_state = replace(
        state,
        is_loading=True,
        error=None,
        request_id=request_id,
        pending_request_id=request_id,
    )
    return new_state, FetchRequest(request_id=request_id, date_range=state.date_range)


def fetch_succeeded(
    state: RegularChartState, request_id: int, records: list[DailyStepRecord]
) -> RegularChartState:
    if request_id != state.pending_request_id:
        logger.debug("Discarding stale chart response", request_id=request_id, pending=state.pending_request_id)
        return state
    return replace(
        state,
        records=tuple(records),
        is_loading=False,
        error=None,
        pending_request_id=None,
    )


def fetch_failed(state: RegularChartState, request_id: int, message: str) -> RegularChartState:
    """Record the error. The last successful records stay in place."""
    if request_id != state.pending_request_id:
        logger.debug("Discarding stale chart failure", request_id=request_id, pending=state.pending_request_id)
        return state
    return replace(state, is_loading=False, error=message, pending_request_id=None)


def chart_result(state: RegularChartState) -> ChartResult:
    """Aggregate the held records over the current window."""
    return build_chart(state.date_range, state.view_mode, list(state.records))
