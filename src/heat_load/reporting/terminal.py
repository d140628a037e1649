"""Rich terminal report renderer.

Composes Rich tables and panels into the primary user-facing terminal
output for a heat-load analysis.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from heat_load.data.models import (
    AnalysisResult,
    BalancePointGraphRecord,
    BillingRecord,
    HeatLoadGraphPoint,
    InclusionOverride,
)


def _fmt(value: float | None, spec: str = ",.0f") -> str:
    if value is None:
        return "[dim]-[/dim]"
    return format(value, spec)


class TerminalRenderer:
    """Renders analysis results to the terminal using Rich."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(
        self,
        result: AnalysisResult,
        name: str = "",
        show_bills: bool = True,
        show_graph: bool = True,
    ) -> None:
        """Render the full analysis report to the terminal."""
        self._render_header(result, name)
        self._render_summary(result)
        if show_graph:
            self._render_balance_point_graph(
                result.balance_point_graph,
                result.heat_load_output.estimated_balance_point,
            )
        self._render_heat_load_curve(result.heat_load_curve)
        if show_bills:
            self._render_bills(result.processed_energy_bills)

    # ------------------------------------------------------------------
    # Private rendering methods
    # ------------------------------------------------------------------

    def _render_header(self, result: AnalysisResult, name: str) -> None:
        bills = result.processed_energy_bills
        header_text = Text()
        header_text.append("HEAT LOAD ANALYSIS", style="bold cyan")
        if name:
            header_text.append(" | ", style="dim")
            header_text.append(name, style="bold")
        header_text.append(" | ", style="dim")
        header_text.append(f"{len(bills)} bills")
        header_text.append(f" | {result.included_bill_count} in regression")

        self.console.print()
        self.console.print(Panel(header_text, title="Balance-Point Heat-Loss Analysis"))

    def _render_summary(self, result: AnalysisResult) -> None:
        s = result.heat_load_output

        table = Table(show_header=False, padding=(0, 2), box=None)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Estimated Balance Point", f"{s.estimated_balance_point:.1f} °F")
        table.add_row("Whole-home UA", f"{s.whole_home_heat_loss_rate:,.0f} BTU/h-°F")
        table.add_row("UA Spread", f"{s.standard_deviation_of_heat_loss_rate:.1%}")
        table.add_row("Other Fuel Usage", f"{s.other_fuel_usage:.3f} / day")
        table.add_row("Average Indoor Temp", f"{s.average_indoor_temperature:.1f} °F")
        table.add_row("Ti - Tbp", f"{s.difference_between_ti_and_tbp:.1f} °F")
        table.add_row("Design Temperature", f"{s.design_temperature:.0f} °F")
        table.add_row("Average Heat Load", f"{s.average_heat_load:,.0f} BTU/h")
        table.add_row("Maximum Heat Load", f"{s.maximum_heat_load:,.0f} BTU/h")

        self.console.print()
        self.console.print(Panel(table, title="[bold]HEAT LOAD SUMMARY[/bold]"))

        if not s.converged:
            self.console.print(
                f"  [yellow]Outlier elimination did not converge after "
                f"{s.iterations} iterations; showing the last estimate.[/yellow]"
            )

    def _render_balance_point_graph(
        self, graph: list[BalancePointGraphRecord], selected: float
    ) -> None:
        self.console.print()
        self.console.print(Rule("[bold]BALANCE POINT SCAN[/bold]"))

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Tbp (°F)", justify="right")
        table.add_column("UA (BTU/h-°F)", justify="right")
        table.add_column("Change", justify="right")
        table.add_column("Change %", justify="right")
        table.add_column("Std Dev", justify="right")

        for rec in graph:
            style = "bold green" if rec.balance_point == selected else None
            table.add_row(
                f"{rec.balance_point:.1f}",
                f"{rec.heat_loss_rate:,.0f}",
                f"{rec.change_in_heat_loss_rate:+,.0f}",
                f"{rec.percent_change_in_heat_loss_rate:+.1f}%",
                f"{rec.standard_deviation:.4f}",
                style=style,
            )

        self.console.print(table)

    def _render_heat_load_curve(self, points: list[HeatLoadGraphPoint]) -> None:
        self.console.print()
        self.console.print(Rule("[bold]HEAT LOAD CURVE[/bold]"))

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Outdoor (°F)", justify="right")
        table.add_column("Avg Line", justify="right")
        table.add_column("Avg Point", justify="right")
        table.add_column("Max Line", justify="right")
        table.add_column("Max Point", justify="right")

        for p in points:
            table.add_row(
                f"{p.temperature:.0f}",
                _fmt(p.avg_line),
                _fmt(p.avg_point),
                _fmt(p.max_line),
                _fmt(p.max_point),
            )

        self.console.print(table)

    def _render_bills(self, bills: list[BillingRecord]) -> None:
        self.console.print()
        self.console.print(Rule("[bold]BILLING PERIODS[/bold]"))

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Start", min_width=10)
        table.add_column("End", min_width=10)
        table.add_column("Days", justify="right")
        table.add_column("Usage", justify="right")
        table.add_column("Mean °F", justify="right")
        table.add_column("Type", justify="center")
        table.add_column("Included", justify="center")
        table.add_column("UA", justify="right")
        table.add_column("Note")

        for b in bills:
            if b.is_included:
                included = "[green]yes[/green]"
            else:
                included = "[red]no[/red]"

            notes = []
            if b.eliminated_as_outlier:
                notes.append("[yellow]outlier[/yellow]")
            if b.exclusion_reason is not None:
                notes.append(b.exclusion_reason.value.replace("_", " "))
            if b.inclusion_override is InclusionOverride.force_include:
                notes.append("[cyan]forced in[/cyan]")
            elif b.inclusion_override is InclusionOverride.force_exclude:
                notes.append("[cyan]forced out[/cyan]")
            if b.analysis_type_override is not None:
                notes.append("[cyan]type override[/cyan]")

            table.add_row(
                b.period_start_date.isoformat(),
                b.period_end_date.isoformat(),
                str(b.period_length_days),
                f"{b.usage:,.0f}",
                _fmt(b.mean_temperature, ".1f"),
                b.effective_analysis_type.value.replace("_", " "),
                included,
                _fmt(b.whole_home_heat_loss_rate),
                ", ".join(notes),
            )

        self.console.print(table)
