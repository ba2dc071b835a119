"""Module entrypoint for `python -m gwt`."""

from __future__ import annotations

from .cli import app


def main() -> None:
    app(prog_name="gwt")


if __name__ == "__main__":
    main()
