"""lazyactions package entrypoint."""

from lazyactions.cli.app import main as _cli_main


def main() -> None:
    """Run the lazyactions CLI."""
    _cli_main()
