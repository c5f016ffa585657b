"""Custom date range selection as an explicit state machine.

Phases:
    IDLE            no range selected, picker closed
    PICKER_OPEN     the picker is showing (a previous range may still be active)
    RANGE_SELECTED  a range is confirmed; its data is fetched at daily granularity

Transitions are pure. The ones that need data return a FetchRequest for the
caller to run; results come back through fetch_succeeded / fetch_failed and
are dropped unless they answer the latest request.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

import structlog

from stepper_history.aggregation import build_chart
from stepper_history.chart_state import FetchRequest
from stepper_history.dates import Preset, normalize_day, preset_range
from stepper_history.models import ChartResult, DailyStepRecord, DateRange, ViewMode

logger = structlog.get_logger()


class Phase(Enum):
    IDLE = "idle"
    PICKER_OPEN = "picker_open"
    RANGE_SELECTED = "range_selected"


@dataclass(frozen=True)
class CustomRangeState:
    picker_visible: bool = False
    selected_range: DateRange | None = None
    result: ChartResult | None = None
    is_loading: bool = False
    error: str | None = None
    request_id: int = 0
    pending_request_id: int | None = None

    @property
    def phase(self) -> Phase:
        if self.picker_visible:
            return Phase.PICKER_OPEN
        if self.selected_range is not None:
            return Phase.RANGE_SELECTED
        return Phase.IDLE


def open_date_picker(state: CustomRangeState) -> CustomRangeState:
    return replace(state, picker_visible=True)


def close_date_picker(state: CustomRangeState) -> CustomRangeState:
    """Cancel: hide the picker, keep whatever range was active."""
    return replace(state, picker_visible=False)


def _begin_fetch(state: CustomRangeState, date_range: DateRange) -> tuple[CustomRangeState, FetchRequest]:
    request_id = state.request_id + 1
    new_state = replace(
        state,
        picker_visible=False,
        selected_range=date_range,
        is_loading=True,
        error=None,
        request_id=request_id,
        pending_request_id=request_id,
    )
    return new_state, FetchRequest(request_id=request_id, date_range=date_range)


def confirm_date_range(
    state: CustomRangeState, start: date | datetime, end: date | datetime
) -> tuple[CustomRangeState, FetchRequest]:
    """Select [start, end], close the picker and request its data.

    Raises ValueError if start is after end.
    """
    date_range = DateRange(normalize_day(start), normalize_day(end))
    return _begin_fetch(state, date_range)


def apply_preset(
    state: CustomRangeState, preset: Preset, today: date | None = None
) -> tuple[CustomRangeState, FetchRequest]:
    """Presets take effect immediately, without a separate confirm."""
    return _begin_fetch(state, preset_range(preset, today))


def clear_custom_range(state: CustomRangeState) -> CustomRangeState:
    return replace(
        state,
        selected_range=None,
        result=None,
        is_loading=False,
        error=None,
        pending_request_id=None,
    )


def retry_custom_fetch(state: CustomRangeState) -> tuple[CustomRangeState, FetchRequest | None]:
    """Re-issue the fetch for the selected range. No-op when nothing is selected."""
    if state.selected_range is None:
        return state, None
    request_id = state.request_id + 1
    new_state = replace(
        state,
        is_loading=True,
        error=None,
        request_id=request_id,
        pending_request_id=request_id,
    )
    return new_state, FetchRequest(request_id=request_id, date_range=state.selected_range)


def build_custom_chart(date_range: DateRange, records: list[DailyStepRecord]) -> ChartResult:
    """Daily-granularity chart restricted to the explicit range."""
    in_range = sorted((r for r in records if date_range.contains(r.date)), key=lambda r: r.date)
    return build_chart(date_range, ViewMode.DAILY, in_range)


def fetch_succeeded(
    state: CustomRangeState, request_id: int, records: list[DailyStepRecord]
) -> CustomRangeState:
    if request_id != state.pending_request_id or state.selected_range is None:
        logger.debug("Discarding stale custom range response", request_id=request_id)
        return state
    return replace(
        state,
        result=build_custom_chart(state.selected_range, records),
        is_loading=False,
        error=None,
        pending_request_id=None,
    )


def fetch_failed(state: CustomRangeState, request_id: int, message: str) -> CustomRangeState:
    """Keep the previously shown custom data visible alongside the error."""
    if request_id != state.pending_request_id:
        logger.debug("Discarding stale custom range failure", request_id=request_id)
        return state
    return replace(state, is_loading=False, error=message, pending_request_id=None)
