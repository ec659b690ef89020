"""CLI helpers for date range resolution."""

from datetime import date

import click

from pocketledger.utils.date_parser import get_date_range, parse_date


def _fail(ctx, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def _flag_names(period_flags: dict[str, bool]) -> str:
    return ", ".join(f"--{period}" for period in period_flags)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
    today: date | None = None,
) -> tuple[date | None, date | None]:
    """Resolve a date range from period flags or explicit dates.

    Args:
        ctx: Click context used to exit on invalid input
        start_date: Raw ``--start-date`` value
        end_date: Raw ``--end-date`` value
        period_flags: Period name (e.g. "this-month") to whether its flag is set
        default_range: Range used when nothing is given
        today: Reference day for periods and relative dates (defaults to today)

    Returns:
        Tuple of (start, end); either side may be None for an open range
    """
    selected = [period for period, is_set in period_flags.items() if is_set]

    if len(selected) > 1:
        _fail(ctx, f"Only one period option ({_flag_names(period_flags)}) can be specified at a time.")

    if selected and (start_date or end_date):
        _fail(ctx, f"Period option --{selected[0]} cannot be combined with --start-date or --end-date.")

    if selected:
        return get_date_range(selected[0], today)

    start = end = None
    for label, raw in (("start", start_date), ("end", end_date)):
        if not raw:
            continue
        try:
            parsed = parse_date(raw, today)
        except ValueError as e:
            _fail(ctx, f"Invalid {label} date: {e}")
        if label == "start":
            start = parsed
        else:
            end = parsed

    if start is None and end is None and default_range is not None:
        start, end = default_range

    if start is not None and end is not None and start > end:
        _fail(ctx, "Start date must not be after end date.")

    return start, end
