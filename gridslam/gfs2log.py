"""Command that exports the best particle's path from a filter log."""

from __future__ import annotations

import sys

from gridslam.gfsreader import RecordList

USAGE = (
    "usage gfs2log [-err] [-neff] [-part] [-odom] <infilename> <outfilename>\n"
    "  -odom : dump raw odometry in ODOM message instead of interpolated corrected one"
)

_FLAGS = ("-err", "-neff", "-part", "-odom")


def main(argv: list[str] | None = None) -> int:
    """Run the exporter; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE)
        return 1
    options = {}
    for flag in _FLAGS:
        options[flag] = bool(args) and args[0] == flag
        if options[flag]:
            args.pop(0)
    if len(args) < 2:
        print(USAGE)
        return 1
    in_path, out_path = args[0], args[1]
    try:
        with open(in_path, encoding="utf-8") as stream:
            records = RecordList().read(stream)
    except OSError:
        print("could read file ")
        return 1
    except ValueError as error:
        print(error, file=sys.stderr)
        return 1
    try:
        best = records.get_best_index()
    except ValueError as error:
        print(error, file=sys.stderr)
        return 1
    print()
    print(f"best index = {best}")
    try:
        out = open(out_path, "w", encoding="utf-8")
    except OSError:
        print("could write file ")
        return 1
    with out:
        records.print_path(out, best, options["-err"], options["-odom"])
        if options["-part"]:
            records.print_last_particles(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())