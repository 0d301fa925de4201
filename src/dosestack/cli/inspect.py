"""Inspect command for listing RTDOSE series."""

from __future__ import annotations

from typing import Annotated

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from dosestack.cli._utils import read_dose_series
from dosestack.log_util import enable_console_logging


def inspect(
    path: Annotated[
        str,
        typer.Argument(help="Directory path to inspect"),
    ],
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Scan subdirectories recursively"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """Inspect a directory for RTDOSE series.

    Lists each dose series with its beam dose volumes. Empty dose volumes
    exported by some planning systems are not listed.
    """
    enable_console_logging(verbose)
    series = read_dose_series(path, recursive)

    console = Console()
    print(f"[green]Found {len(series)} dose series[/green]")
    print()

    for series_uid, aggregate in series.items():
        table = Table(title=f"Series {series_uid}")
        table.add_column("Volume UID", style="cyan")
        table.add_column("Slices", justify="right")
        table.add_column("Rows x Columns", justify="right")
        table.add_column("Scaling", justify="right")

        for vol in aggregate.volumes:
            table.add_row(
                vol.uid,
                str(len(vol)),
                f"{vol.rows} x {vol.columns}",
                f"{vol.scaling:.6g}" if vol.scaling is not None else "-",
            )

        console.print(table)
        if aggregate.description:
            print(f"  Description: {aggregate.description}")
        print()
