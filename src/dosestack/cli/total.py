"""Total command for summing beam dose volumes."""

from __future__ import annotations

from typing import Annotated

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from dosestack.arrays import ArrayError
from dosestack.cli._utils import read_dose_series
from dosestack.config import SummationConfig
from dosestack.log_util import enable_console_logging


def total(
    path: Annotated[
        str,
        typer.Argument(help="Directory containing RTDOSE files"),
    ],
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Scan subdirectories recursively"),
    ] = False,
    bits: Annotated[
        int,
        typer.Option("--bits", "-b", help="Bit depth of the summed raw array (16 or 32)"),
    ] = 32,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """Sum the beam dose volumes of every RTDOSE series in a directory.

    Reports the grid shape, scaling and maximum and mean total dose of each
    series. Nothing is written to disk.
    """
    enable_console_logging(verbose)
    try:
        config = SummationConfig(bits_allocated=bits)
    except ValueError as e:
        print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    series = read_dose_series(path, recursive)

    table = Table(title="Total Dose")
    table.add_column("Series UID", style="cyan")
    table.add_column("Beams", justify="right")
    table.add_column("Shape (Z, Y, X)", justify="right")
    table.add_column("Scaling", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Mean", justify="right")

    failed = False
    for series_uid, aggregate in series.items():
        try:
            summed = aggregate.sum(config)
        except ArrayError as e:
            print(f"[yellow]Warning: series {series_uid} skipped: {e}[/yellow]")
            failed = True
            continue
        dose = summed.dose_array
        table.add_row(
            series_uid,
            str(len(aggregate.volumes)),
            " x ".join(str(n) for n in summed.shape),
            f"{summed.scaling:.6g}",
            f"{dose.max():.4f}",
            f"{dose.mean():.4f}",
        )

    Console().print(table)
    if failed:
        raise typer.Exit(code=1)
