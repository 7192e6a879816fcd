"""
LedgerLens CLI — command-line interface.

Usage:
    ledgerlens summary --data snapshot.yaml --start 2025-04-01 --end 2025-04-30
    ledgerlens budget --data snapshot.yaml --today 2025-04-15
    ledgerlens export --data snapshot.yaml --type net_worth --format json
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ledgerlens import __version__

app = typer.Typer(
    name="ledgerlens",
    help="📒 LedgerLens — personal-finance analytics",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]LedgerLens[/bold] v{__version__}")
        raise typer.Exit()


def _configure_logging(level: str) -> None:
    """Attach a Rich handler to the ledgerlens logger."""
    logger = logging.getLogger("ledgerlens")
    logger.setLevel(level.upper())
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version",
        callback=_version_callback,
        is_eager=True,
    ),
    config: str = typer.Option(
        "ledgerlens.yaml",
        "--config",
        "-c",
        help="Path to config file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug output",
    ),
) -> None:
    """📒 LedgerLens — summaries, net worth, budgets and goals from your data."""
    from ledgerlens.engine import LedgerLens

    config_path = config if Path(config).exists() else None
    lens = LedgerLens.from_config(config_path)
    _configure_logging("DEBUG" if verbose else lens.config.logging.level)
    ctx.obj = lens


def _parse_date(value: str | None, name: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"{name} must be YYYY-MM-DD, got {value!r}")


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


DATA_OPTION = typer.Option(..., "--data", "-d", help="Snapshot file (.yaml, .json or transactions .csv)")
START_OPTION = typer.Option(None, "--start", help="First day (YYYY-MM-DD)")
END_OPTION = typer.Option(None, "--end", help="Last day (YYYY-MM-DD)")
GRANULARITY_OPTION = typer.Option(None, "--granularity", "-g", help="day, week, month, quarter or year")
TODAY_OPTION = typer.Option(None, "--today", help="Evaluate as of this date (YYYY-MM-DD)")


@app.command()
def summary(
    ctx: typer.Context,
    data: str = DATA_OPTION,
    start: str = START_OPTION,
    end: str = END_OPTION,
    granularity: str = GRANULARITY_OPTION,
) -> None:
    """Income, expenses, savings rate and category breakdown."""
    from ledgerlens.formatting import format_currency, format_percent

    lens = ctx.obj
    currency = lens.config.currency
    try:
        snapshot = lens.load(data)
        report = lens.report(
            "spending",
            snapshot,
            start=_parse_date(start, "--start"),
            end=_parse_date(end, "--end"),
            granularity=granularity,
        )
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    console.print(Panel.fit(
        f"[bold blue]📒 LedgerLens[/bold blue] — {report.period_start} to {report.period_end}",
        subtitle=f"v{__version__}",
    ))

    table = Table(title="Cash Flow", show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total Income", format_currency(report.total_income, currency))
    table.add_row("Total Expenses", format_currency(report.total_expenses, currency))
    table.add_row("Net Cash Flow", format_currency(report.net_cash_flow, currency))
    table.add_row("Savings Rate", format_percent(report.savings_rate))
    console.print(table)

    if report.expenses_by_category:
        breakdown = Table(title="Expenses by Category")
        breakdown.add_column("Category", style="bold cyan")
        breakdown.add_column("Amount", justify="right")
        breakdown.add_column("Share", justify="right")
        for row in report.expenses_by_category:
            breakdown.add_row(row.category_name, format_currency(row.amount, currency), format_percent(row.percentage))
        console.print(breakdown)

    series = Table(title=f"By {report.granularity}")
    series.add_column("Period")
    series.add_column("Income", justify="right", style="green")
    series.add_column("Expenses", justify="right", style="red")
    for point in report.time_series:
        series.add_row(point.period, format_currency(point.income, currency), format_currency(point.expenses, currency))
    console.print(series)


@app.command()
def networth(
    ctx: typer.Context,
    data: str = DATA_OPTION,
    start: str = START_OPTION,
    end: str = END_OPTION,
    granularity: str = GRANULARITY_OPTION,
) -> None:
    """Current net worth and its history."""
    from ledgerlens.formatting import format_currency, format_percent

    lens = ctx.obj
    currency = lens.config.currency
    try:
        snapshot = lens.load(data)
        report = lens.report(
            "net_worth",
            snapshot,
            start=_parse_date(start, "--start"),
            end=_parse_date(end, "--end"),
            granularity=granularity,
        )
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    table = Table(title="Net Worth", show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Current Net Worth", format_currency(report.current_net_worth, currency))
    table.add_row("Assets", format_currency(report.total_assets, currency))
    table.add_row("Liabilities", format_currency(report.total_liabilities, currency))
    color = "green" if report.change_amount >= 0 else "red"
    table.add_row(
        "Change",
        f"[{color}]{format_currency(report.change_amount, currency)} ({format_percent(report.change_percentage)})[/{color}]",
    )
    console.print(table)

    history = Table(title="History")
    history.add_column("Date")
    history.add_column("Net Worth", justify="right")
    for point in report.time_series:
        history.add_row(point.date.isoformat(), format_currency(point.net_worth, currency))
    console.print(history)


@app.command()
def budget(
    ctx: typer.Context,
    data: str = DATA_OPTION,
    today: str = TODAY_OPTION,
) -> None:
    """Budget vs actual for the current budget."""
    from ledgerlens.formatting import format_currency
    from ledgerlens.models.report import BudgetStatus

    lens = ctx.obj
    currency = lens.config.currency
    try:
        snapshot = lens.load(data)
        report = lens.report("category", snapshot, today=_parse_date(today, "--today"))
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    status_colors = {
        BudgetStatus.OVER: "red",
        BudgetStatus.ON_TRACK: "yellow",
        BudgetStatus.UNDER: "green",
    }

    table = Table(title=f"{report.budget_name} ({report.start_date} to {report.end_date})")
    table.add_column("Category", style="bold cyan")
    table.add_column("Budgeted", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Status")
    for row in report.categories:
        color = status_colors[row.status]
        table.add_row(
            row.category_name,
            format_currency(row.budgeted, currency),
            format_currency(row.spent, currency),
            f"{row.percent_used:.0f}%",
            f"[{color}]{row.status.value}[/{color}]",
        )
    console.print(table)
    console.print(
        f"Spent {format_currency(report.total_spent, currency)} of "
        f"{format_currency(report.total_budgeted, currency)} — "
        f"over by {format_currency(report.over_budget_amount, currency)}"
    )
    for alert in report.alerts:
        color = "red" if alert.severity == "critical" else "yellow"
        console.print(f"  [{color}]⚠ {alert.message}[/{color}]")


@app.command()
def goals(
    ctx: typer.Context,
    data: str = DATA_OPTION,
    today: str = TODAY_OPTION,
) -> None:
    """Goal progress, schedule status and projected completion."""
    from ledgerlens.formatting import format_currency

    lens = ctx.obj
    currency = lens.config.currency
    try:
        snapshot = lens.load(data)
        result = lens.assembler.goal_progress(snapshot.goals, _parse_date(today, "--today"))
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    table = Table(title="Goals")
    table.add_column("Goal", style="bold cyan")
    table.add_column("Saved", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Status")
    table.add_column("Projected")
    for goal in result.goals:
        table.add_row(
            goal.name,
            f"{format_currency(goal.current_amount, currency)} / {format_currency(goal.target_amount, currency)}",
            f"{goal.progress_percentage:.0f}%",
            f"{goal.elapsed_time_percentage:.0f}%",
            goal.status.value.replace("_", " "),
            goal.projected_completion.isoformat() if goal.projected_completion else "—",
        )
    console.print(table)


@app.command()
def dashboard(
    ctx: typer.Context,
    data: str = DATA_OPTION,
    today: str = TODAY_OPTION,
) -> None:
    """This month vs last month, recent activity and top goals."""
    from ledgerlens.formatting import format_currency, format_percent

    lens = ctx.obj
    currency = lens.config.currency
    try:
        snapshot = lens.load(data)
        report = lens.report("dashboard", snapshot, today=_parse_date(today, "--today"))
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    def _change(amount: float, pct: float) -> str:
        color = "green" if amount >= 0 else "red"
        return f"[{color}]{format_currency(amount, currency)} ({format_percent(pct)})[/{color}]"

    table = Table(title=f"Dashboard {report.period_start:%Y-%m}", show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Change", justify="right")
    table.add_row(
        "Net Worth",
        format_currency(report.net_worth, currency),
        _change(report.net_worth_change, report.net_worth_change_percentage),
    )
    table.add_row(
        "Income",
        format_currency(report.monthly_income, currency),
        _change(report.monthly_income_change, report.monthly_income_change_percentage),
    )
    table.add_row(
        "Expenses",
        format_currency(report.monthly_expenses, currency),
        _change(report.monthly_expenses_change, report.monthly_expenses_change_percentage),
    )
    table.add_row("Savings Rate", format_percent(report.savings_rate), f"{report.savings_rate_change:+.1f} pts")
    console.print(table)

    if report.recent_transactions:
        recent = Table(title="Recent Transactions")
        recent.add_column("Date")
        recent.add_column("Description")
        recent.add_column("Category", style="cyan")
        recent.add_column("Amount", justify="right")
        for txn in report.recent_transactions:
            recent.add_row(
                txn.date.isoformat(),
                txn.description,
                txn.category_name,
                format_currency(txn.amount, currency),
            )
        console.print(recent)

    for goal in report.goals:
        console.print(f"  🎯 {goal.name}: {goal.progress_percentage:.0f}% ({goal.status.value.replace('_', ' ')})")


@app.command()
def export(
    ctx: typer.Context,
    data: str = DATA_OPTION,
    report_type: str = typer.Option(
        "spending", "--type", "-t", help="spending, income, net_worth, category, accounts or dashboard"
    ),
    fmt: str = typer.Option(None, "--format", "-f", help="csv or json (defaults to config)"),
    output_dir: str = typer.Option(None, "--output-dir", "-o", help="Directory to write into"),
    start: str = START_OPTION,
    end: str = END_OPTION,
    granularity: str = GRANULARITY_OPTION,
    today: str = TODAY_OPTION,
    no_summary: bool = typer.Option(False, "--no-summary", help="Leave out the summary section"),
    no_time_series: bool = typer.Option(False, "--no-time-series", help="Leave out the time series"),
    no_categories: bool = typer.Option(False, "--no-categories", help="Leave out category rows"),
) -> None:
    """Export a report to CSV or JSON."""
    lens = ctx.obj
    try:
        snapshot = lens.load(data)
        report = lens.report(
            report_type,
            snapshot,
            start=_parse_date(start, "--start"),
            end=_parse_date(end, "--end"),
            granularity=granularity,
            today=_parse_date(today, "--today"),
        )
        options = lens.export_options(
            format=fmt,
            include_summary=False if no_summary else None,
            include_time_series=False if no_time_series else None,
            include_categories=False if no_categories else None,
        )
        path = lens.export(report, report_type, options, output_dir=output_dir)
    except (ValueError, FileNotFoundError) as e:
        _fail(str(e))

    console.print(f"[green]✓[/green] Report saved to [bold]{path}[/bold]")


if __name__ == "__main__":
    app()
