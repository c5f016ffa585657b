"""Pick what the chart shows: the offset-navigated window or a custom range."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from stepper_history.chart_state import RegularChartState, chart_result
from stepper_history.custom_range import CustomRangeState, build_custom_chart
from stepper_history.models import AggregatedPoint, PeriodStats


@dataclass(frozen=True)
class DisplayState:
    chart_data: tuple[AggregatedPoint, ...]
    stats: PeriodStats
    period_label: str
    is_loading: bool
    error: str | None
    can_go_next: bool
    is_custom_mode: bool


def display_to_dict(display: DisplayState) -> dict:
    """Plain dict of a DisplayState, JSON-ready."""
    data = asdict(display)
    data["chart_data"] = list(data["chart_data"])
    return data


def select_display(regular: RegularChartState, custom: CustomRangeState, offset: int) -> DisplayState:
    """Merge both pipelines into one view.

    A selected custom range wins outright: its data, loading flag and error
    are shown even when the regular window has loaded too. Until its first
    response lands, the range shows as zero-filled days. Forward navigation
    is only offered in the past and outside custom mode.
    """
    is_custom_mode = custom.selected_range is not None
    can_go_next = not is_custom_mode and offset < 0

    if is_custom_mode:
        result = custom.result
        if result is None:
            result = build_custom_chart(custom.selected_range, [])
        return DisplayState(
            chart_data=result.chart_data,
            stats=result.stats,
            period_label=result.period_label,
            is_loading=custom.is_loading,
            error=custom.error,
            can_go_next=can_go_next,
            is_custom_mode=True,
        )

    result = chart_result(regular)
    return DisplayState(
        chart_data=result.chart_data,
        stats=result.stats,
        period_label=result.period_label,
        is_loading=regular.is_loading,
        error=regular.error,
        can_go_next=can_go_next,
        is_custom_mode=False,
    )
