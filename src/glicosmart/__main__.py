"""Punto de entrada: ``python -m glicosmart``."""

from __future__ import annotations

from glicosmart.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
