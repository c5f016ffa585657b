"""Drives the chart pipelines against a steps provider.

The controller owns the two pipeline states, runs each FetchRequest through
the provider, and feeds the outcome back into the pure transitions. Provider
errors end up as the pipeline's error string; they never escape display().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

import structlog

from stepper_history import chart_state, custom_range
from stepper_history.chart_state import FetchRequest, RegularChartState
from stepper_history.custom_range import CustomRangeState
from stepper_history.dates import Preset, all_preset_ranges, default_picker_range
from stepper_history.models import DailyStepRecord, DateRange, ViewMode, parse_daily_records
from stepper_history.provider import (
    StepsHistoryProvider,
    StepsProviderError,
    error_message,
    to_history_request,
)
from stepper_history.selector import DisplayState, select_display
from stepper_history.streaks import current_streak, longest_streak

logger = structlog.get_logger()


@dataclass(frozen=True)
class StreakResult:
    current_streak: int
    longest_streak: int
    error: str | None = None


class HistoryController:
    """Steps history screen state: regular chart, custom range and streak."""

    def __init__(
        self,
        provider: StepsHistoryProvider,
        view_mode: ViewMode = ViewMode.DAILY,
        today: date | None = None,
    ) -> None:
        self.provider = provider
        self._today = today
        self.regular: RegularChartState = chart_state.initial_state(view_mode, self.today)
        self.custom: CustomRangeState = CustomRangeState()
        self.logger = logger.bind(component="history_controller")

    @property
    def today(self) -> date:
        return self._today if self._today is not None else date.today()

    # ── I/O ──────────────────────────────────────────────────────────────────

    def _fetch_records(self, date_range: DateRange) -> list[DailyStepRecord]:
        request = to_history_request(date_range)
        self.logger.debug("Fetching daily history", **request)
        rows = self.provider.get_daily_history(request["startDate"], request["endDate"])
        return parse_daily_records(rows)

    def _run_regular(self, request: FetchRequest) -> None:
        try:
            records = self._fetch_records(request.date_range)
        except StepsProviderError as exc:
            self.logger.warning("Chart fetch failed", error=str(exc), request_id=request.request_id)
            self.regular = chart_state.fetch_failed(self.regular, request.request_id, error_message(exc))
            return
        self.regular = chart_state.fetch_succeeded(self.regular, request.request_id, records)

    def _run_custom(self, request: FetchRequest | None) -> None:
        if request is None:
            return
        try:
            records = self._fetch_records(request.date_range)
        except StepsProviderError as exc:
            self.logger.warning("Custom range fetch failed", error=str(exc), request_id=request.request_id)
            self.custom = custom_range.fetch_failed(self.custom, request.request_id, error_message(exc))
            return
        self.custom = custom_range.fetch_succeeded(self.custom, request.request_id, records)

    def load(self) -> DisplayState:
        """Fetch the current regular window."""
        self.regular, request = chart_state.start_fetch(self.regular)
        self._run_regular(request)
        return self.display()

    # ── Navigation ───────────────────────────────────────────────────────────

    def change_view_mode(self, view_mode: ViewMode) -> DisplayState:
        self.custom = custom_range.clear_custom_range(self.custom)
        self.regular = chart_state.change_view_mode(self.regular, view_mode, self.today)
        return self.load()

    def previous_period(self) -> DisplayState:
        self.custom = custom_range.clear_custom_range(self.custom)
        self.regular = chart_state.go_previous(self.regular, self.today)
        return self.load()

    def next_period(self) -> DisplayState:
        self.custom = custom_range.clear_custom_range(self.custom)
        moved = chart_state.go_next(self.regular, self.today)
        if moved is self.regular:
            return self.display()
        self.regular = moved
        return self.load()

    def go_to_offset(self, offset: int) -> DisplayState:
        self.custom = custom_range.clear_custom_range(self.custom)
        self.regular = chart_state.go_to_offset(self.regular, offset, self.today)
        return self.load()

    def refresh(self) -> DisplayState:
        """Back to the current period with no custom range, then reload."""
        self.custom = custom_range.clear_custom_range(self.custom)
        self.regular = chart_state.reset_to_current(self.regular, self.today)
        return self.load()

    # ── Date picker ──────────────────────────────────────────────────────────

    @property
    def is_date_picker_visible(self) -> bool:
        return self.custom.picker_visible

    def presets(self) -> dict[Preset, DateRange]:
        return all_preset_ranges(self.today)

    def default_picker_range(self) -> DateRange:
        return default_picker_range(self.today)

    def open_date_picker(self) -> None:
        self.custom = custom_range.open_date_picker(self.custom)

    def close_date_picker(self) -> None:
        self.custom = custom_range.close_date_picker(self.custom)

    def confirm_date_range(self, start: date | datetime, end: date | datetime) -> DisplayState:
        self.custom, request = custom_range.confirm_date_range(self.custom, start, end)
        self._run_custom(request)
        return self.display()

    def apply_preset(self, preset: Preset) -> DisplayState:
        self.custom, request = custom_range.apply_preset(self.custom, preset, self.today)
        self._run_custom(request)
        return self.display()

    def clear_custom_range(self) -> DisplayState:
        self.custom = custom_range.clear_custom_range(self.custom)
        return self.display()

    def retry_custom_fetch(self) -> DisplayState:
        self.custom, request = custom_range.retry_custom_fetch(self.custom)
        self._run_custom(request)
        return self.display()

    # ── Output ───────────────────────────────────────────────────────────────

    def display(self) -> DisplayState:
        return select_display(self.regular, self.custom, self.regular.offset)

    def current_streak(self) -> StreakResult:
        """Current and longest any-activity streak from the provider's activity dates."""
        try:
            dates = self.provider.get_activity_dates()
        except StepsProviderError as exc:
            self.logger.warning("Activity dates fetch failed", error=str(exc))
            return StreakResult(current_streak=0, longest_streak=0, error=error_message(exc))
        return StreakResult(
            current_streak=current_streak(dates, self.today),
            longest_streak=longest_streak(dates),
        )
