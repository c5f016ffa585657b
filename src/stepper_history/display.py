"""Rich terminal display for stepper-history."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from stepper_history.models import PeriodStats

console = Console()

METERS_PER_KM = 1000
METERS_PER_MILE = 1609.344


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        value = n / 1_000
        if value >= 1000:
            return f"{value:.0f}K"
        return f"{value:.1f}K"
    return f"{n:,}"


def format_distance(meters: float, units: str = "metric") -> str:
    """'12.3 km' or '7.6 mi', one decimal place."""
    if units == "imperial":
        return f"{meters / METERS_PER_MILE:.1f} mi"
    return f"{meters / METERS_PER_KM:.1f} km"


def _bar(current: int, total: int, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    if total <= 0:
        return "[" + "░" * width + "]"
    ratio = min(current / total, 1.0)
    filled = int(ratio * width)
    empty = width - filled
    return "[" + "█" * filled + "░" * empty + "]"


def print_chart(data: dict) -> None:
    """Print the step chart as a bar table with a stats summary underneath.

    data keys: chart_data (list of {label, value, sub_label}), stats, period_label,
    is_loading, error, is_custom_mode, can_go_next, goal_threshold, units.
    """
    points = data.get("chart_data", [])
    goal = data.get("goal_threshold", 0)
    title = data.get("period_label", "")
    if data.get("is_custom_mode"):
        title += "  [dim](custom range)[/]"

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("", width=4)
    table.add_column("Date", style="dim", min_width=9)
    table.add_column("Steps", min_width=24)
    table.add_column("", justify="right")

    scale = max([p["value"] for p in points] + [goal, 1])
    for p in points:
        met = goal > 0 and p["value"] >= goal
        color = "green" if met else "cyan"
        marker = " ✅" if met else ""
        table.add_row(
            p["label"],
            p.get("sub_label") or "",
            f"[{color}]{_bar(p['value'], scale)}[/{color}]",
            f"{format_number(p['value'])}{marker}",
        )

    console.print(table)

    if data.get("is_loading"):
        console.print("  [dim]Loading...[/]")
    if data.get("error"):
        print_error(data["error"])

    stats = data.get("stats")
    print_stats_summary(PeriodStats(**stats) if stats else PeriodStats.empty(), data.get("units", "metric"))

    nav = "  ← previous"
    if data.get("can_go_next"):
        nav += "  |  next →"
    console.print(f"[dim]{nav}[/]")


def print_stats_summary(stats: PeriodStats, units: str = "metric") -> None:
    """Total, average per bucket and distance for the shown period."""
    console.print(
        f"  Total: [bold]{stats.total:,}[/] steps  |  "
        f"Average: [bold]{stats.average:,}[/]  |  "
        f"Distance: [bold]{format_distance(stats.distance_meters, units)}[/]"
    )


def print_presets(presets: list[dict]) -> None:
    """Quick-select ranges with their computed dates."""
    table = Table(title="Quick Ranges", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Preset", style="bold")
    table.add_column("Key", style="dim")
    table.add_column("From")
    table.add_column("To")
    for p in presets:
        table.add_row(p["label"], p["key"], p["start"], p["end"])
    console.print(table)


def print_streak(data: dict) -> None:
    """Print the current streak panel, or the error if activity dates could not be loaded."""
    if data.get("error"):
        print_error(data["error"])
        return
    current = data.get("current_streak", 0)
    lines: list[str] = []
    lines.append("")
    if current > 0:
        lines.append(f"  \U0001f525 Current streak: [bold]{current}[/] days")
    else:
        lines.append("  No active streak. Walk today to start one!")
    if "longest_streak" in data:
        lines.append(f"  \U0001f3c6 Longest streak: {data['longest_streak']} days")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]STREAK[/]",
        box=box.ROUNDED,
        border_style="orange_red1" if current > 0 else "grey50",
        width=50,
    )
    console.print(panel)


def print_step_stats(data: dict) -> None:
    """Print today / week / month totals and goal streaks as a table."""
    units = data.get("units", "metric")
    goal = data.get("daily_goal", 0)

    table = Table(
        title="Step Stats",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("Period", style="bold")
    table.add_column("Steps", justify="right")
    table.add_column("Distance", justify="right")

    table.add_row("Today", format_number(data.get("today_steps", 0)),
                  format_distance(data.get("today_distance", 0.0), units))
    table.add_row("This Week", format_number(data.get("week_steps", 0)),
                  format_distance(data.get("week_distance", 0.0), units))
    table.add_row("This Month", format_number(data.get("month_steps", 0)),
                  format_distance(data.get("month_distance", 0.0), units))

    table.add_section()
    table.add_row("Daily Goal", format_number(goal), "")
    table.add_row("Goal Progress", _bar(data.get("today_steps", 0), goal, width=12), "")
    table.add_row("Current Streak", f"{data.get('current_streak', 0)} days", "")
    table.add_row("Longest Streak", f"{data.get('longest_streak', 0)} days", "")

    console.print(table)


def print_activity_summary(data: dict) -> None:
    """Print the last-7-days activity panel."""
    units = data.get("units", "metric")
    lines: list[str] = []
    lines.append("")
    lines.append(f"  Steps (7 days):   {format_number(data.get('total_steps', 0))}")
    lines.append(f"  Distance:         {format_distance(data.get('total_distance_meters', 0.0), units)}")
    lines.append(f"  Daily average:    {format_number(data.get('average_steps_per_day', 0))}")
    lines.append(f"  Current streak:   {data.get('current_streak', 0)} days")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]Last 7 Days[/]",
        box=box.ROUNDED,
        border_style="cyan",
        width=50,
    )
    console.print(panel)


def print_history_page(data: dict) -> None:
    """Print one page of raw step entries."""
    table = Table(
        title=f"Entries (page {data.get('page', 1)}, {data.get('total_count', 0)} total)",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("Date")
    table.add_column("Steps", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Source", style="dim")

    units = data.get("units", "metric")
    for item in data.get("items", []):
        distance = item.get("distance_meters")
        table.add_row(
            item["date"],
            format_number(item["step_count"]),
            format_distance(distance, units) if distance is not None else "-",
            item.get("source") or "manual",
        )
    console.print(table)


def print_sync_result(result: dict) -> None:
    """Print bulk import results summary."""
    lines: list[str] = []
    lines.append("")
    lines.append(f"  Created:  {result.get('created', 0)}")
    lines.append(f"  Updated:  {result.get('updated', 0)}")
    lines.append(f"  Total:    {result.get('total', 0)}")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]Import Complete[/]",
        box=box.ROUNDED,
        border_style="green",
        width=50,
    )
    console.print(panel)


def print_message(message: str, title: str = "STEPPER") -> None:
    panel = Panel(
        f"\n  {message}\n",
        title=f"[bold]{title}[/]",
        box=box.ROUNDED,
        border_style="green",
        width=50,
    )
    console.print(panel)


def print_error(message: str) -> None:
    panel = Panel(
        f"\n  [red]{message}[/]\n",
        title="[bold]Error[/]",
        box=box.ROUNDED,
        border_style="red",
        width=50,
    )
    console.print(panel)
