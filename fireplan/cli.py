"""
Command-Line Interface for fireplan.

Purpose
-------
Runs FIRE calculations, yearly detail tables and Monte Carlo analyses on
household JSON files without writing Python code.

Commands
--------
- calculate: Minimal retirement age, FIRE target and shortfall
- details: Year-by-year cash flow and asset table
- montecarlo: Percentile bands and success probability
- scenarios: Market scenarios and early-retirement risk
- config: Validate, display and create household files
- info: Versions of fireplan and its dependencies

Example Usage
-------------
    # Create a starter household file
    $ fireplan config create household.json

    # Deterministic FIRE calculation
    $ fireplan calculate household.json --output result.json

    # Yearly table in 万円
    $ fireplan details household.json --unit manyen --output details.csv

    # Monte Carlo with 5,000 trials
    $ fireplan montecarlo household.json -n 5000 --seed 7
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__


# Lazy imports for performance
def _import_rich():
    """Lazy import Rich for better startup time."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table
    return Console, Table, Panel


def _get_console():
    console_cls, *_ = _import_rich()
    return console_cls()


def _fail(message: str) -> None:
    ctx = click.get_current_context(silent=True)
    settings = ctx.obj.get("settings") if ctx is not None and ctx.obj else None
    if settings is not None and settings.debug and sys.exc_info()[0] is not None:
        traceback.print_exc()
    click.echo(message, err=True)
    sys.exit(1)


def _load(path: Path):
    """Load a household file, exiting with an error message on failure."""
    from .exceptions import FirePlanError
    from .serialization import load_document

    try:
        return load_document(path)
    except (FirePlanError, ValueError, OSError) as e:
        _fail(f"Error loading {path}: {e}")


def _yen(value: float) -> str:
    from .utils import format_currency
    return format_currency(value)


def _yen_manyen(value: float) -> str:
    from .utils import format_manyen
    return f"{_yen(value)} ({format_manyen(value)}万円)"


@click.group()
@click.version_option(version=__version__, prog_name="fireplan")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Override FIREPLAN_LOG_LEVEL",
)
@click.pass_context
def main(ctx: click.Context, quiet: bool, log_level: Optional[str]) -> None:
    """
    fireplan - household FIRE projection and retirement-age search.

    Projects net worth year by year, finds the earliest sustainable
    retirement age and runs Monte Carlo trials on market uncertainty.

    Use 'fireplan COMMAND --help' for command-specific help.
    """
    from .config import AppSettings

    settings = AppSettings()
    logging.basicConfig(
        level=getattr(logging, log_level or settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = _get_console()


# ---------------------------------------------------------------------------
# calculate
# ---------------------------------------------------------------------------

@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the result as JSON"
)
@click.option(
    "--max-search-age",
    type=int,
    default=None,
    help="Latest retirement age considered (default: 60)"
)
@click.option("--verbose", "-v", is_flag=True, help="Print search progress")
@click.pass_context
def calculate(
    ctx: click.Context,
    input_file: Path,
    output: Optional[Path],
    max_search_age: Optional[int],
    verbose: bool,
) -> None:
    """
    Find the minimal sustainable retirement age.

    Example:
        fireplan calculate household.json -o result.json
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .analysis import fire_progress
    from .config import OptimizerConfig
    from .currency import total_assets
    from .exceptions import FirePlanError
    from .optimizer import calculate_fire
    from .serialization import save_result

    data, _ = _load(input_file)

    gaps = data.expense_gaps()
    if gaps and not quiet:
        click.echo(
            f"Warning: no expense segment covers ages {gaps[0]}..{gaps[-1]} "
            f"({len(gaps)} years); living expenses are 0 there.",
            err=True,
        )

    options = {"verbose": verbose and not quiet}
    if max_search_age is not None:
        options["max_search_age"] = max_search_age

    try:
        result = calculate_fire(data, OptimizerConfig(**options))
    except (FirePlanError, ValueError) as e:
        _fail(f"Error during calculation: {e}")

    current = total_assets(data.asset_holdings, data.exchange_rate)
    progress = fire_progress(current, result.required_assets)

    if not quiet:
        _, Table, Panel = _import_rich()
        table = Table(title="FIRE Calculation", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green", justify="right")

        if result.is_fire_achievable:
            table.add_row("FIRE age", f"{result.fire_age}")
            table.add_row("Years to FIRE", f"{result.years_to_fire}")
        else:
            table.add_row("FIRE age", "[red]unattainable[/red]")
        table.add_row("Required assets", _yen_manyen(result.required_assets))
        table.add_row("Current assets", _yen_manyen(current))
        table.add_row("Progress", f"{progress:.1f}%")
        table.add_row("Projected final assets", _yen(result.projected_assets))
        table.add_row("Monthly shortfall", _yen(result.monthly_shortfall))
        table.add_row("Engine runs", f"{result.search_evaluations}")
        console.print(table)
    else:
        click.echo(f"fire_age={result.fire_age} required_assets={result.required_assets:.0f}")

    if output:
        save_result(result, output)
        if not quiet:
            click.echo(f"Result saved to {output}")


# ---------------------------------------------------------------------------
# details
# ---------------------------------------------------------------------------

@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--unit", "-u",
    type=click.Choice(["yen", "manyen"]),
    default="manyen",
    help="Display unit (default: manyen = 10,000 yen)"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the full table as CSV"
)
@click.pass_context
def details(ctx: click.Context, input_file: Path, unit: str, output: Optional[Path]) -> None:
    """
    Show the year-by-year cash flow and asset table.

    Example:
        fireplan details household.json --unit manyen -o details.csv
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .engine import details_to_frame, simulate_years

    data, _ = _load(input_file)
    frame = details_to_frame(simulate_years(data), unit=unit)

    if not quiet:
        _, Table, _ = _import_rich()
        label = "万円" if unit == "manyen" else "円"
        table = Table(title=f"Yearly Detail ({label})", show_header=True)
        columns = ["salary", "pension", "living_expenses", "loan_payments",
                   "net_cash_flow", "cash", "total_assets"]
        table.add_column("Age", style="cyan", justify="right")
        for column in columns:
            table.add_column(column, justify="right")
        for age, row in frame.iterrows():
            table.add_row(str(age), *[f"{row[c]:,.1f}" for c in columns])
        console.print(table)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output)
        if not quiet:
            click.echo(f"Details saved to {output}")


# ---------------------------------------------------------------------------
# montecarlo
# ---------------------------------------------------------------------------

def _mc_config(ctx: click.Context, base, overrides: dict):
    """Merge file config, CLI overrides and settings defaults."""
    from .config import MonteCarloConfig

    settings = ctx.obj["settings"]
    values = base.model_dump(exclude_unset=True) if base is not None else {}
    values.setdefault("seed", settings.seed)
    if settings.n_workers is not None:
        values.setdefault("n_workers", settings.n_workers)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return MonteCarloConfig(**values)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option("--simulations", "-n", type=int, default=None, help="Number of trials (default: 1000)")
@click.option("--return-volatility", type=float, default=None, help="Return std dev in percent (default: 15)")
@click.option("--inflation-volatility", type=float, default=None, help="Inflation std dev in percent (default: 1)")
@click.option("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
@click.option("--workers", "-w", type=int, default=None, help="Worker processes")
@click.option(
    "--no-sequence-risk",
    is_flag=True,
    help="Apply each trial's return draws best-first instead of in sampled order"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write percentile bands as JSON"
)
@click.pass_context
def montecarlo(
    ctx: click.Context,
    input_file: Path,
    simulations: Optional[int],
    return_volatility: Optional[float],
    inflation_volatility: Optional[float],
    seed: Optional[int],
    workers: Optional[int],
    no_sequence_risk: bool,
    output: Optional[Path],
) -> None:
    """
    Run Monte Carlo trials and show percentile bands.

    Example:
        fireplan montecarlo household.json -n 5000 --seed 7
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .exceptions import FirePlanError
    from .monte_carlo import run_monte_carlo
    from .serialization import save_monte_carlo

    data, file_config = _load(input_file)
    try:
        config = _mc_config(ctx, file_config, {
            "simulations": simulations,
            "return_volatility": return_volatility,
            "inflation_volatility": inflation_volatility,
            "seed": seed,
            "n_workers": workers,
            "sequence_of_returns_risk": False if no_sequence_risk else None,
        })
        if not quiet:
            console.print(f"[bold]Running {config.simulations:,} trials...[/bold]")
        summary = run_monte_carlo(data, config)
    except (FirePlanError, ValueError) as e:
        _fail(f"Error during simulation: {e}")

    if not quiet:
        _, Table, _ = _import_rich()
        inputs = summary.inputs
        table = Table(title="Monte Carlo Percentiles", show_header=True)
        table.add_column("Percentile", style="cyan", justify="right")
        table.add_column("Years", justify="right")
        table.add_column(f"Assets at {inputs.retirement_age}", justify="right")
        table.add_column("Last recorded", justify="right")
        for r in summary.results:
            at_retirement = next(
                (row.assets for row in r.projections if row.age == inputs.retirement_age),
                None,
            )
            last = r.projections[-1] if r.projections else None
            table.add_row(
                f"p{r.percentile}",
                str(len(r.projections)),
                _yen(at_retirement) if at_retirement is not None else "-",
                f"{_yen(last.assets)} @ {last.age}" if last else "-",
            )
        console.print(table)
        console.print(
            f"Success probability: [bold green]{summary.success_probability:.1%}[/bold green]"
        )
    else:
        click.echo(f"success_probability={summary.success_probability:.4f}")

    if output:
        save_monte_carlo(summary, output, config)
        if not quiet:
            click.echo(f"Results saved to {output}")


# ---------------------------------------------------------------------------
# scenarios
# ---------------------------------------------------------------------------

@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option("--simulations", "-n", type=int, default=None, help="Trials per scenario (default: 1000)")
@click.option("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
@click.option(
    "--ages",
    type=str,
    default="50,55,60,65",
    help="Retirement ages for the early-retirement risk table"
)
@click.pass_context
def scenarios(
    ctx: click.Context,
    input_file: Path,
    simulations: Optional[int],
    seed: Optional[int],
    ages: str,
) -> None:
    """
    Compare market scenarios and early-retirement ages.

    Example:
        fireplan scenarios household.json --ages 45,50,55
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .exceptions import FirePlanError
    from .monte_carlo import analyze_early_retirement_risk, run_scenario_analysis

    try:
        retirement_ages: Tuple[int, ...] = tuple(int(a.strip()) for a in ages.split(",") if a.strip())
    except ValueError as e:
        _fail(f"Error parsing ages: {e}")

    data, file_config = _load(input_file)
    try:
        config = _mc_config(ctx, file_config, {"simulations": simulations, "seed": seed})
        outcomes = run_scenario_analysis(data, base_config=config)
        risk = analyze_early_retirement_risk(data, retirement_ages, config)
    except (FirePlanError, ValueError) as e:
        _fail(f"Error during simulation: {e}")

    if not quiet:
        _, Table, _ = _import_rich()
        table = Table(title="Market Scenarios", show_header=True)
        table.add_column("Scenario", style="cyan")
        table.add_column("Return adj.", justify="right")
        table.add_column("Volatility ×", justify="right")
        table.add_column("Success", style="green", justify="right")
        for o in outcomes:
            table.add_row(
                o.name,
                f"{o.scenario.return_adjustment:+.1f}pt",
                f"{o.scenario.volatility_multiplier:.1f}",
                f"{o.summary.success_probability:.1%}",
            )
        console.print(table)

        risk_table = Table(title="Early Retirement Risk", show_header=True)
        risk_table.add_column("Retirement age", style="cyan", justify="right")
        risk_table.add_column("Success", style="green", justify="right")
        for age, probability in risk.items():
            risk_table.add_row(str(age), f"{probability:.1%}")
        console.print(risk_table)
    else:
        for o in outcomes:
            click.echo(f"{o.name}: {o.summary.success_probability:.4f}")


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

@main.group()
def config() -> None:
    """
    Household file commands.

    Validate, display, and create household JSON files.
    """
    pass


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate a household file.

    Example:
        fireplan config validate household.json
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .currency import total_assets

    data, mc_config = _load(config_file)
    gaps = data.expense_gaps()

    if not quiet:
        _, _, Panel = _import_rich()
        info = (
            f"[bold]Household File Valid[/bold]\n\n"
            f"[cyan]Ages:[/cyan] {data.current_age} → {data.life_expectancy}\n"
            f"[cyan]Assets ({len(data.asset_holdings)}):[/cyan] "
            f"{_yen(total_assets(data.asset_holdings, data.exchange_rate))}\n"
            f"[cyan]Loans:[/cyan] {len(data.loans)}\n"
            f"[cyan]Salary plans:[/cyan] {len(data.salary_plans)}\n"
            f"[cyan]Pension plans:[/cyan] {len(data.pension_plans)}\n"
            f"[cyan]Expense segments:[/cyan] {len(data.expense_segments)}\n"
            f"[cyan]Monte Carlo section:[/cyan] {'Yes' if mc_config else 'No'}\n"
        )
        if gaps:
            info += f"\n[yellow]Uncovered ages (0 expense): {gaps[0]}..{gaps[-1]}[/yellow]\n"
        border = "yellow" if gaps else "green"
        console.print(Panel(info, title="Household Summary", border_style=border))
    else:
        click.echo("Configuration is valid")


@config.command("show")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "-f", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def config_show(ctx: click.Context, config_file: Path, format: str) -> None:
    """
    Display a household file.

    Example:
        fireplan config show household.json --format table
    """
    console = ctx.obj.get("console")

    from .currency import holding_value
    from .serialization import input_to_dict

    data, _ = _load(config_file)

    if format == "json":
        click.echo(json.dumps(input_to_dict(data), indent=2, ensure_ascii=False))
        return

    _, Table, _ = _import_rich()

    assets_table = Table(title="Asset Holdings")
    assets_table.add_column("Name", style="cyan")
    assets_table.add_column("Currency")
    assets_table.add_column("Expected Return", justify="right")
    assets_table.add_column("Value (JPY)", justify="right")
    for h in data.asset_holdings:
        assets_table.add_row(
            h.name,
            h.currency,
            f"{h.return_pct:.1f}%",
            _yen(holding_value(h, data.exchange_rate)),
        )
    console.print(assets_table)

    plans_table = Table(title="Income Plans")
    plans_table.add_column("Type", style="cyan")
    plans_table.add_column("Name")
    plans_table.add_column("Ages", justify="right")
    plans_table.add_column("Annual", justify="right")
    for kind, plans in (("Salary", data.salary_plans), ("Pension", data.pension_plans)):
        for p in plans:
            plans_table.add_row(
                kind, p.name, f"{p.start_age}-{p.end_age}", f"{p.amount:,.0f} {p.currency}"
            )
    console.print(plans_table)

    segments_table = Table(title="Expense Segments")
    segments_table.add_column("Ages", style="cyan", justify="right")
    segments_table.add_column("Monthly", justify="right")
    for s in data.expense_segments:
        segments_table.add_row(f"{s.start_age}-{s.end_age}", _yen(s.monthly_expenses))
    console.print(segments_table)


@config.command("create")
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option("--template", "-t", type=click.Choice(["basic", "advanced"]), default="basic")
@click.pass_context
def config_create(ctx: click.Context, output_file: Path, template: str) -> None:
    """
    Create a household file from a template.

    Example:
        fireplan config create household.json --template advanced
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .serialization import SCHEMA_VERSION

    household = {
        "currentAge": 35,
        "lifeExpectancy": 90,
        "inflationRate": 1.0,
        "assetHoldings": [
            {"id": "a1", "name": "全世界株式", "quantity": 1,
             "pricePerUnit": 10_000_000, "currency": "JPY", "expectedReturn": 5},
            {"id": "a2", "name": "普通預金", "quantity": 1,
             "pricePerUnit": 3_000_000, "currency": "JPY", "expectedReturn": 0.1},
        ],
        "salaryPlans": [
            {"id": "s1", "name": "給与", "annualAmount": 6_000_000,
             "currency": "JPY", "startAge": 35, "endAge": 60},
        ],
        "pensionPlans": [
            {"id": "p1", "name": "厚生年金", "annualAmount": 1_800_000,
             "currency": "JPY", "startAge": 65, "endAge": 90},
        ],
        "expenseSegments": [
            {"id": "e1", "startAge": 35, "endAge": 90, "monthlyExpenses": 250_000},
        ],
    }

    if template == "advanced":
        household["exchangeRate"] = 150.0
        household["assetHoldings"].append(
            {"id": "a3", "name": "S&P500 ETF", "symbol": "VOO", "quantity": 20,
             "pricePerUnit": 500, "currency": "USD", "expectedReturn": 7},
        )
        household["loans"] = [
            {"id": "l1", "name": "住宅ローン", "balance": 30_000_000,
             "interestRate": 0.8, "monthlyPayment": 100_000},
        ]
        household["specialExpenses"] = [
            {"id": "x1", "name": "車買い替え", "amount": 3_000_000, "targetAge": 45},
        ]
        household["specialIncomes"] = [
            {"id": "i1", "name": "退職金", "amount": 15_000_000, "targetAge": 60},
        ]
        household["expenseSegments"] = [
            {"id": "e1", "startAge": 35, "endAge": 64, "monthlyExpenses": 300_000},
            {"id": "e2", "startAge": 65, "endAge": 90, "monthlyExpenses": 220_000},
        ]

    document = {"schema_version": SCHEMA_VERSION, "input": household}
    if template == "advanced":
        document["monteCarlo"] = {
            "simulations": 1000,
            "returnVolatility": 15,
            "inflationVolatility": 1,
            "sequenceOfReturnsRisk": True,
        }

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)

    if not quiet:
        console.print(f"[green]Created household file: {output_file}[/green]")


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers and installed dependencies.
    """
    console = ctx.obj.get("console")
    settings = ctx.obj.get("settings")

    info_lines = [
        f"fireplan Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
        f"Log level: {settings.log_level}",
        f"Debug: {settings.debug}",
    ]

    dependencies = {
        "numpy": "numpy",
        "pandas": "pandas",
        "pydantic": "pydantic",
        "pydantic-settings": "pydantic_settings",
        "rich": "rich",
        "click": "click",
    }

    for name, module in dependencies.items():
        try:
            mod = __import__(module)
            version = getattr(mod, "__version__", "installed")
            info_lines.append(f"{name}: {version}")
        except ImportError:
            info_lines.append(f"{name}: not installed")

    _, _, Panel = _import_rich()
    console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
