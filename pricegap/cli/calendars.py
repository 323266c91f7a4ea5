"""Trading calendar commands."""

from __future__ import annotations

import typer

from pricegap.core.services import USMarketCalendar

from .utils import command_settings, open_output, parse_day

calendar_app = typer.Typer(help="U.S. market trading calendar.")

HOLIDAY_COLUMNS = ["date", "weekday", "name"]
CHECK_COLUMNS = ["date", "weekday", "business_day", "holiday"]


def register(app: typer.Typer) -> None:
    """Register the calendar command group on the provided application."""

    app.add_typer(calendar_app, name="calendar", help="U.S. market trading calendar")


def _calendar(ctx: typer.Context, good_friday: bool) -> USMarketCalendar:
    include = good_friday or command_settings(ctx).calendar.include_good_friday
    return USMarketCalendar(include_good_friday=include)


@calendar_app.command("holidays")
def holidays_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., min=1900, max=2200, help="Calendar year."),
    good_friday: bool = typer.Option(False, "--good-friday", help="Treat Good Friday as a holiday."),
) -> None:
    """List market holidays, observed days included."""

    calendar = _calendar(ctx, good_friday)
    with open_output(ctx) as (formatter, stream):
        rows = [
            {"date": day.isoformat(), "weekday": day.strftime("%a"), "name": name}
            for day, name in calendar.holidays(year).items()
        ]
        formatter.render(rows, stream=stream, columns=HOLIDAY_COLUMNS, title=str(year))


@calendar_app.command("check")
def check_command(
    ctx: typer.Context,
    day: str = typer.Argument(..., help="Date to check (YYYY-MM-DD)."),
    good_friday: bool = typer.Option(False, "--good-friday", help="Treat Good Friday as a holiday."),
) -> None:
    """Report whether a date is a business day."""

    calendar = _calendar(ctx, good_friday)
    parsed = parse_day(day, "DAY")
    with open_output(ctx) as (formatter, stream):
        row = {
            "date": parsed.isoformat(),
            "weekday": parsed.strftime("%a"),
            "business_day": calendar.is_business_day(parsed),
            "holiday": calendar.holidays(parsed.year).get(parsed),
        }
        formatter.render([row], stream=stream, columns=CHECK_COLUMNS)


__all__ = ["calendar_app", "register"]
