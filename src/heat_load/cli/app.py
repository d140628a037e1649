# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Main CLI application for heat-load."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from heat_load.analysis.engine import HeatLoadEngine
from heat_load.config import EngineSettings, load_settings
from heat_load.data.codec import ModelT, decode, encode
from heat_load.data.generator import CaseGenerator
from heat_load.data.models import (
    AnalysisCase,
    AnalysisResult,
    AnalysisType,
    InclusionOverride,
    RecordKey,
    RecordOverride,
)
from heat_load.data.profiles import PROFILES, get_profile
from heat_load.errors import HeatLoadError, InputFileError
from heat_load.reporting.terminal import TerminalRenderer

PROFILE_CHOICES = list(PROFILES.keys())


def _build_engine(settings_path: str | None) -> HeatLoadEngine:
    settings = load_settings(settings_path) if settings_path else EngineSettings()
    return HeatLoadEngine(settings)


def _read_model(path: str, model: type[ModelT]) -> ModelT:
    """Read *model* from a file written as plain or tagged JSON."""
    try:
        return decode(Path(path).read_text(), model)
    except json.JSONDecodeError as exc:
        raise InputFileError(f"{path} is not valid JSON: {exc}") from exc
    except PydanticValidationError as exc:
        raise InputFileError(
            f"{path} is not a valid {model.__name__}: {exc}"
        ) from exc


def _load_case(path: str) -> AnalysisCase:
    return _read_model(path, AnalysisCase)


def _parse_period(value: str) -> RecordKey:
    """Parse ``YYYY-MM-DD:YYYY-MM-DD`` into a period key."""
    try:
        start, end = value.split(":")
        return date.fromisoformat(start), date.fromisoformat(end)
    except ValueError:
        raise click.BadParameter(
            f"expected START:END as YYYY-MM-DD:YYYY-MM-DD, got '{value}'"
        ) from None


def _build_overrides(
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    heating: tuple[str, ...],
) -> dict[RecordKey, RecordOverride]:
    overrides: dict[RecordKey, RecordOverride] = {}
    for values, inclusion in (
        (include, InclusionOverride.force_include),
        (exclude, InclusionOverride.force_exclude),
    ):
        for value in values:
            key = _parse_period(value)
            current = overrides.get(key, RecordOverride())
            overrides[key] = current.model_copy(update={"inclusion_override": inclusion})
    for value in heating:
        key = _parse_period(value)
        current = overrides.get(key, RecordOverride())
        overrides[key] = current.model_copy(
            update={"analysis_type_override": AnalysisType.heating}
        )
    return overrides


def _export_json(result: AnalysisResult, path: str, console: Console) -> None:
    """Export the result using the tagged JSON encoding."""
    Path(path).write_text(encode(result, indent=2))
    console.print(f"  [green]JSON results exported to:[/green] {path}")


@click.group()
@click.version_option(version="0.1.0")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--verbose", "-v", is_flag=True, help="Log engine progress")
@click.pass_context
def cli(ctx: click.Context, no_color: bool, verbose: bool) -> None:
    """heat-load: Balance-Point Heat-Loss Analysis

    Estimate a home's balance point and whole-home heat-loss rate from
    utility bills and daily outdoor temperatures.
    """
    ctx.ensure_object(dict)
    console = Console(no_color=no_color)
    ctx.obj["console"] = console
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@cli.command()
@click.argument("case_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--settings", "settings_path", type=click.Path(), default=None,
    help="Engine settings YAML file",
)
@click.option(
    "--export-json", type=click.Path(), default=None,
    help="Export results as tagged JSON at this path",
)
@click.option("--show-bills/--no-bills", default=True, help="Show the billing table")
@click.pass_context
def analyze(
    ctx: click.Context,
    case_file: str,
    settings_path: str | None,
    export_json: str | None,
    show_bills: bool,
) -> None:
    """Analyze a case file with home data, bills and weather."""
    console: Console = ctx.obj["console"]
    try:
        engine = _build_engine(settings_path)
        case = _load_case(case_file)
        with console.status("[bold cyan]Running balance-point regression..."):
            result = engine.analyze(case.bills, case.weather, case.home)
    except HeatLoadError as exc:
        console.print(f"[red]Analysis failed:[/red] {escape(str(exc))}", soft_wrap=True)
        raise SystemExit(1)

    TerminalRenderer(console).render(result, name=case.name, show_bills=show_bills)
    if export_json:
        _export_json(result, export_json, console)


@cli.command()
@click.option(
    "--profile", "-p",
    type=click.Choice(PROFILE_CHOICES),
    default="new_england_gas",
    help="Home and climate preset to simulate",
)
@click.option("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
@click.option("--months", "-m", type=int, default=24, help="Number of billing periods")
@click.option(
    "--export-case", type=click.Path(), default=None,
    help="Write the simulated case file to this path",
)
@click.option(
    "--export-json", type=click.Path(), default=None,
    help="Export results as tagged JSON at this path",
)
@click.pass_context
def demo(
    ctx: click.Context,
    profile: str,
    seed: int | None,
    months: int,
    export_case: str | None,
    export_json: str | None,
) -> None:
    """Simulate a home from a preset and analyze it."""
    console: Console = ctx.obj["console"]
    preset = get_profile(profile)

    with console.status("[bold cyan]Simulating bills and weather..."):
        case = CaseGenerator(preset, seed=seed, months=months).generate()
    if export_case:
        Path(export_case).write_text(encode(case, indent=2))
        console.print(f"  [green]Case file exported to:[/green] {export_case}")

    try:
        result = HeatLoadEngine().analyze(case.bills, case.weather, case.home)
    except HeatLoadError as exc:
        console.print(f"[red]Analysis failed:[/red] {escape(str(exc))}", soft_wrap=True)
        raise SystemExit(1)

    TerminalRenderer(console).render(result, name=preset.description)
    console.print(
        f"\n  [dim]Simulated with balance point {preset.true_balance_point:.0f} °F "
        f"and UA {preset.true_heat_loss_rate:,.0f} BTU/h-°F[/dim]"
    )
    if export_json:
        _export_json(result, export_json, console)


@cli.command()
@click.argument("result_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--case", "case_file", type=click.Path(exists=True, dir_okay=False), required=True,
    help="Case file supplying the home profile",
)
@click.option(
    "--include", multiple=True, metavar="START:END",
    help="Force a billing period into the regression",
)
@click.option(
    "--exclude", multiple=True, metavar="START:END",
    help="Force a billing period out of the regression",
)
@click.option(
    "--heating", multiple=True, metavar="START:END",
    help="Reclassify a billing period as heating",
)
@click.option(
    "--settings", "settings_path", type=click.Path(), default=None,
    help="Engine settings YAML file",
)
@click.option(
    "--export-json", type=click.Path(), default=None,
    help="Export recomputed results as tagged JSON at this path",
)
@click.pass_context
def recompute(
    ctx: click.Context,
    result_file: str,
    case_file: str,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    heating: tuple[str, ...],
    settings_path: str | None,
    export_json: str | None,
) -> None:
    """Apply auditor overrides to exported results and recompute them."""
    console: Console = ctx.obj["console"]
    overrides = _build_overrides(include, exclude, heating)
    try:
        engine = _build_engine(settings_path)
        case = _load_case(case_file)
        previous = _read_model(result_file, AnalysisResult)
        result = engine.recompute(previous, overrides, case.home)
    except HeatLoadError as exc:
        console.print(f"[red]Recompute failed:[/red] {escape(str(exc))}", soft_wrap=True)
        raise SystemExit(1)

    TerminalRenderer(console).render(result, name=case.name)
    if export_json:
        _export_json(result, export_json, console)


def main() -> None:
    """Entry point for the ``heat-load`` console script."""
    cli(obj={})


if __name__ == "__main__":
    main()
