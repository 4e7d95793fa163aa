"""Command that extracts the effective sample size per frame from a filter log."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator

USAGE = "usage gfs2neff <infilename> <nefffilename>"


def _first_int(tokens: list[str]) -> int:
    try:
        return int(tokens[0])
    except (IndexError, ValueError):
        return 0


def _first_float(tokens: list[str]) -> float:
    try:
        return float(tokens[0])
    except (IndexError, ValueError):
        return 0.0


def neff_series(lines: Iterable[str]) -> Iterator[tuple[int, float]]:
    """Yield (frame, neff) for each NEFF line, tagged with the last FRAME seen."""
    frame = 0
    for line in lines:
        tokens = line.split()
        if not tokens:
            continue
        if tokens[0] == "FRAME":
            frame = _first_int(tokens[1:])
        elif tokens[0] == "NEFF":
            yield frame, _first_float(tokens[1:])


def main(argv: list[str] | None = None) -> int:
    """Run the extractor; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE)
        return 1
    try:
        source = open(args[0], encoding="utf-8")
    except OSError:
        print("could read file ")
        return 1
    with source:
        try:
            out = open(args[1], "w", encoding="utf-8")
        except OSError:
            print("could write file ")
            return 1
        with out:
            for frame, neff in neff_series(source):
                out.write(f"{frame} {neff:.6g}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())