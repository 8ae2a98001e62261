"""servedir - serve a directory over HTTP or HTTPS."""

__version__ = "1.0.0"


def main() -> None:
    """Console script entry point."""
    import sys

    from servedir.cli.main import main as _main

    sys.exit(_main())
