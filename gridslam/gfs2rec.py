"""Command that exports the best particle's path from a filter log as a rec file."""

from __future__ import annotations

import math
import sys
from collections import deque
from collections.abc import Iterable
from dataclasses import replace
from typing import IO

from gridslam.geometry import OrientedPoint
from gridslam.gfsreader import (
    CommentRecord,
    LaserRecord,
    NeffRecord,
    OdometryRecord,
    PoseRecord,
    Record,
    RecordList,
    ResampleRecord,
    ScanMatchRecord,
    parse_record,
)

USAGE = "usage gfs2rec [-err] <infilename> <outfilename>"

_FLAGS = ("-err", "-neff")

# Record types of the log that the rec exporter does not understand.
_IGNORED_TYPES = frozenset({"ODOM", "ENTROPY", "#COMMENT"})


def _num(value: float) -> str:
    return f"{value:.6g}"


def _pose_line(prefix: str, pose: OrientedPoint) -> str:
    return (
        f"{prefix}0 0: {_num(pose.x * 100)} {_num(pose.y * 100)} "
        f"{_num(180 / math.pi * pose.theta)}\n"
    )


def format_record(record: Record) -> str:
    """The rec-format text of a record; records without one give an empty string."""
    if isinstance(record, CommentRecord):
        return f"#GFS_COMMENT: {record.text}\n"
    if isinstance(record, PoseRecord):
        return _pose_line("POS-CORR" if record.true_pos else "POS ", record.pose)
    if isinstance(record, NeffRecord):
        return f"NEFF {_num(record.neff)}\n"
    if isinstance(record, LaserRecord):
        ranges = "".join(" " + _num(r * 100) for r in record.readings[: record.dim])
        return (
            _pose_line("POS ", record.pose)
            + f"LASER-RANGE  0 0 0 {record.dim} 180. : {ranges}\n"
        )
    return ""


def _read_records(stream: Iterable[str]) -> RecordList:
    records = RecordList()
    for line in stream:
        tokens = line.split(maxsplit=1)
        if tokens and tokens[0] in _IGNORED_TYPES:
            continue
        record = parse_record(line)
        if record is not None:
            records.append(record)
    return records


def _ratio(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator)


def _reconstruct(records: Iterable[Record], index: int) -> list[Record]:
    current = index
    pose = OrientedPoint()
    path: deque[Record] = deque()
    for record in reversed(list(records)):
        if isinstance(record, (NeffRecord, PoseRecord, CommentRecord)):
            path.appendleft(replace(record))
        elif isinstance(record, ScanMatchRecord):
            pose = record.poses[current]
            path.appendleft(PoseRecord(pose=pose))
        elif isinstance(record, OdometryRecord):
            pose = record.poses[current]
            path.appendleft(PoseRecord(pose=pose, time=record.time))
        elif isinstance(record, LaserRecord):
            path.appendleft(replace(record, pose=pose))
        elif isinstance(record, ResampleRecord):
            current = record.indexes[current]
            path.appendleft(replace(record))
    return list(path)


def write_rec_path(
    records: RecordList, out: IO[str], index: int, err: bool = False
) -> None:
    """Write the path of particle ``index`` in rec format with its error lines.

    With ``err`` only the error lines, the alignment comments and the
    resampling marks are written.
    """
    sample_size = getattr(records, "sample_size", 0)
    started = computed = true_pos_found = tpf = False
    ox = oy = rxx = rxy = ryx = ryy = rth = 0.0
    true_pose = OrientedPoint()
    curr_pose = OrientedPoint()
    neff = 0.0
    count = 0
    for record in _reconstruct(records, index):
        if isinstance(record, NeffRecord):
            neff = _ratio(record.neff, sample_size)
        started = started or isinstance(record, LaserRecord)
        is_pose = isinstance(record, PoseRecord)
        if started and not true_pos_found and is_pose and record.true_pos:
            true_pos_found = tpf = True
            true_pose = record.pose
            out.write("# " + format_record(record))
        if started and true_pos_found and not computed and is_pose and not record.true_pos:
            pose = record.pose
            rth = true_pose.theta - pose.theta
            s, c = math.sin(rth), math.cos(rth)
            rxx = ryy = c
            rxy, ryx = -s, s
            ox = true_pose.x - (rxx * pose.x + rxy * pose.y)
            oy = true_pose.y - (ryx * pose.x + ryy * pose.y)
            computed = True
            out.write("# " + format_record(record))
        if isinstance(record, ResampleRecord):
            out.write(
                f"MARK-POS 0 0: {_num(curr_pose.x * 100)} {_num(curr_pose.y * 100)} 0 {count}\n"
            )
            count += 1
        if computed and is_pose:
            if record.true_pos:
                tpf = True
                true_pose = record.pose
            elif tpf:
                tpf = False
                pose = record.pose
                ex = true_pose.x - (ox + rxx * pose.x + rxy * pose.y)
                ey = true_pose.y - (oy + ryx * pose.x + ryy * pose.y)
                eth = true_pose.theta - pose.theta - rth
                eth = math.atan2(math.sin(eth), math.cos(eth))
                if not err:
                    out.write("# ERROR ")
                values = (neff, ex, ey, eth, math.sqrt(ex * ex + ey * ey), abs(eth))
                out.write(" ".join(_num(v) for v in values) + "\n")
        if is_pose:
            curr_pose = record.pose
        if not err:
            out.write(format_record(record))


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
            records = _read_records(stream)
    except OSError:
        print("could read file ")
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
        write_rec_path(records, out, best, options["-err"])
    return 0


if __name__ == "__main__":
    sys.exit(main())