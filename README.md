# gridslam

Building blocks for grid-based particle-filter SLAM, and command-line tools
for working with the GFS log files such a filter writes. Pure Python, no
dependencies beyond the standard library.

## What is inside

- `gridslam.geometry`: `OrientedPoint`, a frozen 2-D pose `(x, y, theta)`
  supporting `+`, `-` and scaling by a number, plus `normalize_angle`
  (wraps into `[-pi, pi]`), `absolute_difference` (express one pose in the
  frame of another) and `absolute_sum` (compose a relative pose onto a pose).
- `gridslam.motion`: `MotionModel(srr, srt, str, stt, rng=None)`, an odometry
  motion model that draws noisy successor poses (`draw_from_motion`,
  `draw_from_odometry`) and gives the covariance of a move
  (`gaussian_approximation`, returning a `Covariance3`). `sample_gaussian`
  draws a zero-mean sample and returns 0 for a zero sigma. Pass a
  `random.Random` as `rng` for reproducible draws.
- `gridslam.tree`: `TNode`, a node of the trajectory tree shared by the
  particles (`TNode.ancestors()` walks to the root), with `reset_tree`,
  `propagate_weights`, `update_tree_weights` (normalize, reset, propagate)
  and `copy_trajectories` (deep copy that keeps shared ancestors shared).
  Weight propagation raises `ValueError` when the weights do not sum to one.
- `gridslam.gfsreader`: parsing of GFS log lines into records
  (`parse_record`; record classes such as `LaserRecord`, `ScanMatchRecord`,
  `ResampleRecord`, `PoseRecord`, `NeffRecord`, `EntropyRecord`), and
  `RecordList` with `read`, `get_log_weight`, `get_best_index`,
  `compute_path`, `print_path` and `print_last_particles`.
- `gridslam.scanprep`: preparing laser scans (`centered_laser_angles`,
  `needs_reverse`, `prepare_ranges`, which replaces readings shorter than the
  minimum range by the maximum range) and `MapperConfig`, a dataclass of
  mapper settings with their default values.
- `gridslam.occupancy`: turning per-cell occupancy values into grid data
  (`occupancy_value`: -1 unknown, 100 occupied above the threshold, 0 free;
  `occupancy_grid`: row-major list indexed `y * width + x`) and
  `pose_entropy` of a set of particle weights.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Command-line tools

Each tool prints a usage line and exits with status 1 when given too few
arguments or when a file cannot be opened.

### gfs2log

Finds the best particle of a GFS log (largest accumulated log weight) and
writes its path as a carmen-style log (`ODOM`, `TRUEPOS`, `ROBOTLASER1`,
`NEFF`, ... lines), with error lines against the simulator's true poses.

```
gfs2log [-err] [-neff] [-part] [-odom] <infilename> <outfilename>
```

- `-err`: write only the error lines (and the alignment comments), and print
  the average error on standard output.
- `-part`: append the last particle set as `MARKER` lines.
- `-odom`: write the raw odometry (`ODOM` records of the log) instead of the
  corrected poses.
- `-neff`: accepted and ignored.

### gfs2neff

Writes one `frame neff` line for every `NEFF` line of a log, tagged with the
most recent `FRAME` number.

```
gfs2neff <infilename> <nefffilename>
```

### gfs2rec

Finds the best particle of a GFS log and writes its path in the older
`POS` / `POS-CORR` / `LASER-RANGE` record format, with `MARK-POS` lines at
each resampling step and error lines against the true poses.

```
gfs2rec [-err] [-neff] <infilename> <outfilename>
```

- `-err`: write only the error lines, the alignment comments and the
  `MARK-POS` lines.
- `-neff`: accepted and ignored.

## Using the library

```python
import math

from gridslam.geometry import OrientedPoint, absolute_difference, absolute_sum

start = OrientedPoint(1.0, 2.0, 0.0)
end = OrientedPoint(2.0, 2.0, math.pi / 2)

delta = absolute_difference(end, start)  # the move expressed in start's frame
back = absolute_sum(start, delta)
assert math.isclose(back.x, end.x) and math.isclose(back.y, end.y)
```

Reading a GFS log and writing the best particle's path:

```python
from gridslam.gfsreader import RecordList

records = RecordList()
with open("run.gfs") as stream:
    records.read(stream)

best = records.get_best_index()
with open("best_path.log", "w") as out:
    records.print_path(out, best)
```

## What it does not do

The package holds the pieces around a grid SLAM filter, not the filter
itself: there is no scan matcher, no grid map storage, no resampling step and
no driver that processes scans end to end. It also has no live mapping node:
it does not subscribe to laser scans, look up transforms or publish maps;
`scanprep` and `occupancy` provide the computations such a node performs on
its data.