"""Reader for the filter's log format and the path reconstruction built on it."""

from __future__ import annotations

import math
import re
import sys
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import IO

from gridslam.geometry import OrientedPoint, absolute_difference, normalize_angle

_WORD_PATTERN = re.compile(r"\S+")


class _FieldReader:
    """Whitespace-separated extraction that fails for good once a value is missing."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self.ok = True

    def _next(self) -> str | None:
        if not self.ok:
            return None
        match = _WORD_PATTERN.search(self._text, self._pos)
        if match is None:
            self.ok = False
            return None
        self._pos = match.end()
        return match.group()

    def word(self) -> str:
        return self._next() or ""

    def number(self) -> float:
        item = self._next()
        if item is None:
            return 0.0
        try:
            return float(item)
        except ValueError:
            self.ok = False
            return 0.0

    def count(self) -> int:
        item = self._next()
        if item is None:
            return 0
        try:
            value = int(item)
        except ValueError:
            self.ok = False
            return 0
        if value < 0:
            self.ok = False
            return 0
        return value

    def pose(self) -> OrientedPoint:
        x = self.number()
        y = self.number()
        theta = self.number()
        return OrientedPoint(x, y, theta)

    def rest(self) -> str:
        text = self._text[self._pos:]
        self._pos = len(self._text)
        return text


class _Formatter:
    """Number formatting whose fixed-point mode persists once switched on."""

    def __init__(self, out: IO[str]) -> None:
        self.out = out
        self.fixed = False
        self.precision = 6

    def set_fixed(self, precision: int) -> None:
        self.fixed = True
        self.precision = precision

    def num(self, value: float) -> str:
        if self.fixed:
            return f"{value:.{self.precision}f}"
        return f"{value:.{self.precision}g}"

    def emit(self, *parts: str) -> None:
        self.out.write("".join(parts))


@dataclass
class Record:
    """One line of the log."""

    dim: int = 0
    time: float = 0.0

    def _read(self, reader: _FieldReader) -> None:
        """Fill the record from the rest of its line."""

    def _emit(self, fmt: _Formatter) -> None:
        """Records without an output form write nothing."""

    def write(self, out: IO[str]) -> None:
        """Write the record in the exported log format."""
        self._emit(_Formatter(out))


@dataclass
class CommentRecord(Record):
    text: str = ""

    def _read(self, reader: _FieldReader) -> None:
        self.text = reader.rest()

    def _emit(self, fmt: _Formatter) -> None:
        fmt.emit("#GFS_COMMENT: ", self.text, "\n")


@dataclass
class PoseRecord(Record):
    true_pos: bool = False
    pose: OrientedPoint = field(default_factory=OrientedPoint)

    def _read(self, reader: _FieldReader) -> None:
        self.pose = reader.pose()
        self.time = reader.number()

    def _emit(self, fmt: _Formatter) -> None:
        fmt.emit("TRUEPOS " if self.true_pos else "ODOM ")
        fmt.set_fixed(6)
        p = self.pose
        fmt.emit(
            fmt.num(p.x), " ", fmt.num(p.y), " ", fmt.num(p.theta), " 0 0 0 ",
            fmt.num(self.time), " pippo ", fmt.num(self.time), "\n",
        )


@dataclass
class NeffRecord(Record):
    neff: float = 0.0

    def _read(self, reader: _FieldReader) -> None:
        self.neff = reader.number()
        self.time = reader.number()

    def _emit(self, fmt: _Formatter) -> None:
        fmt.emit("NEFF ", fmt.num(self.neff))
        fmt.set_fixed(6)
        fmt.emit(" ", fmt.num(self.time), " pippo ", fmt.num(self.time), "\n")


@dataclass
class EntropyRecord(Record):
    pose_entropy: float = 0.0
    trajectory_entropy: float = 0.0
    map_entropy: float = 0.0

    def _read(self, reader: _FieldReader) -> None:
        self.pose_entropy = reader.number()
        self.trajectory_entropy = reader.number()
        self.map_entropy = reader.number()
        self.time = reader.number()

    def _emit(self, fmt: _Formatter) -> None:
        fmt.set_fixed(6)
        fmt.emit(
            "ENTROPY ", fmt.num(self.pose_entropy), " ",
            fmt.num(self.trajectory_entropy), " ", fmt.num(self.map_entropy),
            " ", fmt.num(self.time), " pippo ", fmt.num(self.time), "\n",
        )


@dataclass
class OdometryRecord(Record):
    poses: list[OrientedPoint] = field(default_factory=list)

    def _read(self, reader: _FieldReader) -> None:
        self.dim = reader.count()
        for _ in range(self.dim):
            self.poses.append(reader.pose())
            reader.number()
        self.time = reader.number()


@dataclass
class RawOdometryRecord(Record):
    pose: OrientedPoint = field(default_factory=OrientedPoint)

    def _read(self, reader: _FieldReader) -> None:
        self.pose = reader.pose()
        if not reader.ok:
            raise ValueError("raw odometry record without a complete pose")
        self.time = reader.number()


@dataclass
class ScanMatchRecord(Record):
    poses: list[OrientedPoint] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)

    def _read(self, reader: _FieldReader) -> None:
        self.dim = reader.count()
        for _ in range(self.dim):
            self.poses.append(reader.pose())
            self.weights.append(reader.number())


def _laser_header(dim: int, fmt: _Formatter) -> str:
    if dim in (540, 541):
        return " 4 -2.351831 4.712389 0.008727 30.0"
    if dim in (360, 361):
        return " 0 -1.570796 3.141593 0.008726 81.9"
    if dim in (682, 683):
        return " 0 -2.094395 4.1887902 " + fmt.num(360.0 / 1024.0 / 180.0 * math.pi) + " 5.5"
    return " 0 -1.570796 3.141593 0.017453 81.9"


@dataclass
class LaserRecord(Record):
    readings: list[float] = field(default_factory=list)
    pose: OrientedPoint = field(default_factory=OrientedPoint)
    weight: float = 0.0

    def _read(self, reader: _FieldReader) -> None:
        self.dim = reader.count()
        self.readings.extend(reader.number() for _ in range(self.dim))
        self.pose = reader.pose()
        self.time = reader.number()

    def _emit(self, fmt: _Formatter) -> None:
        fmt.emit("WEIGHT ", fmt.num(self.weight), "\n")
        header = _laser_header(self.dim, fmt)
        fmt.emit("ROBOTLASER1 ", header, " 0.01", " 0", " ", str(self.dim))
        fmt.set_fixed(2)
        fmt.emit("".join(" " + fmt.num(r) for r in self.readings[: self.dim]))
        fmt.set_fixed(6)
        p = self.pose
        pose_text = " ".join(fmt.num(v) for v in (p.x, p.y, p.theta))
        fmt.emit(
            " 0 ", pose_text, " ", pose_text,
            " 0 0 0.55 0.375 1000000.0",
            " ", fmt.num(self.time), " localhost ", fmt.num(self.time), "\n",
        )


@dataclass
class ResampleRecord(Record):
    indexes: list[int] = field(default_factory=list)

    def _read(self, reader: _FieldReader) -> None:
        self.dim = reader.count()
        self.indexes.extend(reader.count() for _ in range(self.dim))


_RECORD_TYPES: dict[str, Callable[[], Record]] = {
    "LASER_READING": LaserRecord,
    "ODO_UPDATE": OdometryRecord,
    "ODOM": RawOdometryRecord,
    "SM_UPDATE": ScanMatchRecord,
    "SIMULATOR_POS": lambda: PoseRecord(true_pos=True),
    "RESAMPLE": ResampleRecord,
    "NEFF": NeffRecord,
    "COMMENT": CommentRecord,
    "#COMMENT": CommentRecord,
    "ENTROPY": EntropyRecord,
}


def parse_record(line: str) -> Record | None:
    """Parse one log line; lines of an unknown type give None."""
    reader = _FieldReader(line.rstrip("\n"))
    factory = _RECORD_TYPES.get(reader.word())
    if factory is None:
        return None
    record = factory()
    record._read(reader)
    return record


def _ratio(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator)


class RecordList(list):
    """The records of a log, in file order."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        super().__init__(records)
        self.sample_size = 0
        self._formatter: _Formatter | None = None

    def _formatter_for(self, out: IO[str]) -> _Formatter:
        if self._formatter is None or self._formatter.out is not out:
            self._formatter = _Formatter(out)
        return self._formatter

    def _until(self, frame: int | None) -> list[Record]:
        return list(self) if frame is None else self[:frame]

    def _last_scan_match(self) -> ScanMatchRecord | None:
        return next((r for r in reversed(self) if isinstance(r, ScanMatchRecord)), None)

    def read(self, stream: Iterable[str]) -> RecordList:
        """Append every recognised record of ``stream``."""
        for line in stream:
            record = parse_record(line)
            if record is not None:
                self.append(record)
        return self

    def get_log_weight(self, index: int, frame: int | None = None) -> float:
        """Sum the log weights of particle ``index`` back through its ancestors.

        Only records before position ``frame`` are considered, all when None.
        """
        weight = 0.0
        current = index
        for record in reversed(self._until(frame)):
            if isinstance(record, ScanMatchRecord):
                weight += record.weights[current]
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        return weight

    def get_best_index(self) -> int:
        """Index of the final particle with the largest accumulated log weight."""
        if not self:
            return 0
        scan_match = self._last_scan_match()
        if scan_match is None:
            raise ValueError("the log holds no scan-match update")
        self.sample_size = scan_match.dim
        best = scan_match.dim + 1
        best_weight = -sys.float_info.max
        for i in range(scan_match.dim):
            w = self.get_log_weight(i)
            if w > best_weight:
                best, best_weight = i, w
        return best

    def print_last_particles(self, out: IO[str]) -> None:
        """Write a marker for each particle of the last scan-match update."""
        scan_match = self._last_scan_match()
        if scan_match is None:
            return
        fmt = self._formatter_for(out)
        for pose in scan_match.poses:
            fmt.emit(
                "MARKER [color=black; circle=", fmt.num(pose.x * 100), ",",
                fmt.num(pose.y * 100), ",10] 0 pippo 0\n",
            )

    def compute_path(self, index: int, frame: int | None = None) -> RecordList:
        """Laser records before ``frame`` placed on the path of particle ``index``."""
        current = index
        pose = OrientedPoint()
        first = True
        path: deque[Record] = deque()
        for record in reversed(self._until(frame)):
            if isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                first = False
            elif isinstance(record, LaserRecord) and not first:
                path.appendleft(replace(record, pose=pose))
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        return RecordList(path)

    def _reconstruct(self, index: int, raw_odom: bool) -> list[Record]:
        current = index
        pose = OrientedPoint()
        old_weight = 0.0
        weight = 0.0
        path: deque[Record] = deque()
        for record in reversed(self):
            if isinstance(record, (NeffRecord, EntropyRecord, CommentRecord, PoseRecord)):
                path.appendleft(replace(record))
            elif isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                weight = record.weights[current] - old_weight
                old_weight = record.weights[current]
                if not raw_odom:
                    path.appendleft(PoseRecord(pose=pose))
            elif isinstance(record, OdometryRecord):
                pose = record.poses[current]
                if not raw_odom:
                    path.appendleft(PoseRecord(pose=pose, time=record.time))
            elif isinstance(record, RawOdometryRecord):
                if raw_odom:
                    path.appendleft(PoseRecord(pose=record.pose, time=record.time))
            elif isinstance(record, LaserRecord):
                path.appendleft(replace(record, pose=pose, weight=weight))
            elif isinstance(record, ResampleRecord):
                path.appendleft(replace(record))
                current = record.indexes[current]
        return list(path)

    def print_path(
        self, out: IO[str], index: int, err: bool = False, raw_odom: bool = False
    ) -> None:
        """Write the path of particle ``index`` with its error against true poses.

        With ``err`` only the error lines are written, and the average
        error is printed on standard output.
        """
        fmt = self._formatter_for(out)
        started = computed = true_pos_found = tpf = False
        true_pose = true_start = real_start = OrientedPoint()
        neff = 0.0
        total_error = 0.0
        count = 0
        for record in self._reconstruct(index, raw_odom):
            if isinstance(record, NeffRecord):
                neff = _ratio(record.neff, self.sample_size)
            started = started or isinstance(record, LaserRecord)
            is_pose = isinstance(record, PoseRecord)
            if started and not true_pos_found and is_pose and record.true_pos:
                true_pos_found = tpf = True
                true_pose = record.pose
                fmt.emit("# ")
                record._emit(fmt)
            if started and true_pos_found and not computed and is_pose and not record.true_pos:
                true_start = true_pose
                real_start = record.pose
                fmt.emit("# ")
                record._emit(fmt)
                computed = True
            if computed:
                fmt.set_fixed(6)
                if is_pose and record.true_pos:
                    tpf = True
                    true_pose = record.pose
                elif is_pose and tpf:
                    tpf = False
                    real_delta = absolute_difference(record.pose, real_start)
                    true_delta = absolute_difference(true_pose, true_start)
                    ex = real_delta.x - true_delta.x
                    ey = real_delta.y - true_delta.y
                    eth = normalize_angle(real_delta.theta - true_delta.theta)
                    distance = math.hypot(ex, ey)
                    if not err:
                        fmt.emit("# ERROR ")
                    fmt.emit(" ".join(fmt.num(v) for v in (neff, ex, ey, eth, distance, abs(eth))), "\n")
                    total_error += distance
                    count += 1
            if not err:
                record._emit(fmt)
        if err:
            print("average error" + format(_ratio(total_error, count), ".6g"))