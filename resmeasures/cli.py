"""
resmeasures CLI.

Command-line interface for HPXML translation and batch analyses.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import get_max_workers, settings
from .core.exceptions import AnalysisError, ConfigError
from .measures import MEASURES
from .model import Model
from .translator import HPXMLTranslator
from .workflow import make_apply_logic_arg, run_analysis, version_string

app = typer.Typer(
    name="resmeasures",
    help="resmeasures - residential energy model measures and batch analyses",
    add_completion=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(version_string())
        raise typer.Exit()


@app.command("run-analysis")
def run_analysis_cmd(
    yml: Optional[Path] = typer.Option(None, "--yml", "-y", help="YML file"),
    threads: Optional[int] = typer.Option(
        None, "--threads", "-n", help="Number of parallel simulations (defaults to processor count)"
    ),
    measures_only: bool = typer.Option(
        False, "--measures_only", "-m", help="Only run the OpenStudio and EnergyPlus measures"
    ),
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Display version"
    ),
):
    """
    Run every scenario of a buildstock YAML for buildings 1..n_datapoints.
    """
    if yml is None:
        console.print("[red]YML argument is required. Call run-analysis --help for usage.[/red]")
        raise typer.Exit(1)

    console.print(f"YML: {yml}")
    try:
        summary = run_analysis(yml, threads or get_max_workers(), measures_only,
                               progress_callback=console.print)
    except (ConfigError, AnalysisError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"\nCompleted in {summary.elapsed}.")


@app.command()
def translate(
    hpxml: Path = typer.Argument(..., help="HPXML file"),
    weather_dir: Path = typer.Argument(settings.weather_dir, help="Weather directory with data.csv"),
    output: Path = typer.Option(Path("in.idf"), "--output", "-o", help="Model output file"),
    epw_output: Optional[Path] = typer.Option(None, "--epw-output", help="Copy the weather file here"),
    skip_validation: bool = typer.Option(False, "--skip-validation", help="Skip HPXML schema validation"),
    schemas_dir: Optional[Path] = typer.Option(None, "--schemas-dir", help="Directory holding HPXML.xsd"),
    map_tsv_dir: Optional[Path] = typer.Option(None, "--map-tsv-dir", help="Write HPXML-to-model name maps here"),
):
    """
    Translate an HPXML file into a simulation model.
    """
    args = {
        "hpxml_path": str(hpxml),
        "weather_dir": str(weather_dir),
        "osm_output_path": str(output),
        "skip_validation": skip_validation,
    }
    if epw_output:
        args["epw_output_path"] = str(epw_output)
    if schemas_dir:
        args["schemas_dir"] = str(schemas_dir)
    if map_tsv_dir:
        args["map_tsv_dir"] = str(map_tsv_dir)

    model = Model()
    success, runner = HPXMLTranslator().apply(model, args)

    for warning in runner.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    if not success:
        for error in runner.errors:
            console.print(f"[red]Error:[/red] {error}")
        raise typer.Exit(1)

    table = Table(title=f"Model: {hpxml.name}")
    table.add_column("Object type", style="cyan")
    table.add_column("Count", justify="right")
    for obj_type, count in model.summary().items():
        table.add_row(obj_type, str(count))
    console.print(table)
    console.print(f"[green]Wrote:[/green] {output}")


@app.command("apply-logic")
def apply_logic(
    expression: str = typer.Argument(..., help='YAML apply logic, e.g. "{or: [Vintage|1950s, Vintage|1960s]}"'),
):
    """
    Print the apply logic argument string for a YAML expression.
    """
    try:
        console.print(make_apply_logic_arg(yaml.safe_load(expression)), markup=False)
    except (yaml.YAMLError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command("list-measures")
def list_measures():
    """
    List the standalone measures.
    """
    table = Table(title="Measures")
    table.add_column("Directory name", style="cyan")
    table.add_column("Name")
    for dir_name, cls in sorted(MEASURES.items()):
        table.add_row(dir_name, cls.name)
    console.print(Panel.fit(table, border_style="blue"))


def main():
    app()


if __name__ == "__main__":
    main()
