"""Shared utilities for CLI commands."""

from __future__ import annotations

import os

import typer
from rich import print

from dosestack.arrays import ArrayError, DoseAggregate
from dosestack.file_handling import load_dicom_files_from_directory, load_dose_series


def read_dose_series(path: str, recursive: bool) -> dict[str, DoseAggregate]:
    """Load all RTDOSE series below a directory or exit with an error."""
    if not os.path.isdir(path):
        print(f"[red]Error: Directory not found: {path}[/red]")
        raise typer.Exit(code=1)

    print(f"[blue]Scanning: {path}[/blue]")
    dcms = load_dicom_files_from_directory(path, recursive=recursive)
    try:
        series = load_dose_series(dcms)
    # AttributeError: a dose file lacks a required element
    except (ArrayError, ValueError, AttributeError) as e:
        print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    if not series:
        print("[yellow]No RTDOSE files found.[/yellow]")
        raise typer.Exit(code=0)
    return series
