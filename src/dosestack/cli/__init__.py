"""CLI module for dosestack.

Commands:
    inspect: List RTDOSE series and their beam dose volumes
    total: Sum the beam dose volumes of each RTDOSE series
"""

import typer

from dosestack.cli.inspect import inspect
from dosestack.cli.total import total

app = typer.Typer(
    help="Dose volume tools for RTDOSE series",
    no_args_is_help=True,
)

app.command()(inspect)
app.command()(total)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
