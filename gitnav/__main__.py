"""Entry point for `python -m gitnav`."""

from __future__ import annotations

try:
    # Normal package execution path
    from .cli import run
except ImportError:  # pragma: no cover - happens when run as a bare script
    from gitnav.cli import run  # type: ignore[import]


def main() -> None:
    """Execute the Typer application."""
    run()


if __name__ == "__main__":
    raise SystemExit(main())
