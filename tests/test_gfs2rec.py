import io

import pytest

from gridslam.geometry import OrientedPoint
from gridslam.gfs2rec import format_record, main, write_rec_path
from gridslam.gfsreader import (
    CommentRecord,
    LaserRecord,
    NeffRecord,
    OdometryRecord,
    PoseRecord,
    RecordList,
    ResampleRecord,
    ScanMatchRecord,
)

RESAMPLE_LOG = [
    "LASER_READING 3 1 2 3 0 0 0 1.0\n",
    "SM_UPDATE 2 1 0 0 -1.0 2 0 0 -0.5\n",
    "NEFF 1.5\n",
    "RESAMPLE 2 1 1\n",
    "LASER_READING 3 1 2 3 0 0 0 2.0\n",
    "SM_UPDATE 2 3 0 0 -2.0 4 0 0 -3.0\n",
]


def _true_pose_log(final_true_x):
    return [
        "LASER_READING 1 1 0 0 0 0.0\n",
        "SIMULATOR_POS 0 0 0 0\n",
        "SM_UPDATE 1 0 0 0 0\n",
        "LASER_READING 1 1 0 0 0 1.0\n",
        f"SIMULATOR_POS {final_true_x} 0 0 1\n",
        "SM_UPDATE 1 1 0 0 0\n",
    ]


def _render(lines, index, err=False):
    records = RecordList().read(lines)
    records.get_best_index()
    out = io.StringIO()
    write_rec_path(records, out, index, err)
    return out.getvalue()


def test_comment_format():
    assert format_record(CommentRecord(text="hello")) == "#GFS_COMMENT: hello\n"


def test_pose_prefixes():
    ideal = format_record(PoseRecord(true_pos=True, pose=OrientedPoint(0, 0, 0)))
    plain = format_record(PoseRecord(pose=OrientedPoint(0, 0, 0)))
    assert ideal.startswith("POS-CORR0 0: ")
    assert plain.startswith("POS 0 0: ")


def test_neff_format_uses_value():
    assert format_record(NeffRecord(neff=2.5)) == "NEFF 2.5\n"


def test_laser_format_has_pose_and_ranges():
    record = LaserRecord(dim=3, readings=[1.0, 2.0, 3.0], pose=OrientedPoint())
    lines = format_record(record).splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("POS 0 0: ")
    assert lines[1].startswith("LASER-RANGE  0 0 0 3 180. : ")
    assert len(lines[1].split(":", 1)[1].split()) == 3


@pytest.mark.parametrize(
    "record",
    [
        ScanMatchRecord(dim=1, poses=[OrientedPoint()], weights=[0.0]),
        ResampleRecord(dim=1, indexes=[0]),
        OdometryRecord(dim=1, poses=[OrientedPoint()]),
    ],
)
def test_records_without_rec_form(record):
    assert format_record(record) == ""


def test_resample_writes_mark_with_current_pose():
    text = _render(RESAMPLE_LOG, 0)
    marks = [line for line in text.splitlines() if line.startswith("MARK-POS")]
    assert marks == ["MARK-POS 0 0: 200 0 0 0"]


def test_path_depends_on_particle():
    assert _render(RESAMPLE_LOG, 0) != _render(RESAMPLE_LOG, 1)


def test_path_keeps_every_laser_scan():
    text = _render(RESAMPLE_LOG, 1)
    assert sum(line.startswith("LASER-RANGE") for line in text.splitlines()) == 2


def test_err_mode_without_true_poses_writes_only_marks():
    text = _render(RESAMPLE_LOG, 0, err=True)
    lines = text.splitlines()
    assert lines
    assert all(line.startswith("MARK-POS") for line in lines)


def test_error_lines_zero_when_estimate_matches_truth():
    text = _render(_true_pose_log(1), 0, err=True)
    error_lines = [line for line in text.splitlines() if not line.startswith("#")]
    assert len(error_lines) == 2
    for line in error_lines:
        values = [float(v) for v in line.split()[1:]]
        assert values == [0.0] * 5


def test_error_lines_measure_deviation():
    text = _render(_true_pose_log(1.5), 0, err=True)
    error_lines = [line for line in text.splitlines() if not line.startswith("#")]
    distance = float(error_lines[-1].split()[4])
    assert distance == pytest.approx(0.5)


def test_full_output_marks_error_lines():
    text = _render(_true_pose_log(1), 0)
    assert sum(line.startswith("# ERROR ") for line in text.splitlines()) == 2
    assert any(line.startswith("# POS-CORR0 0: ") for line in text.splitlines())


def test_main_usage(capsys):
    assert main(["only-one"]) == 1
    assert "usage gfs2rec" in capsys.readouterr().out


def test_main_missing_input(tmp_path, capsys):
    status = main([str(tmp_path / "absent.log"), str(tmp_path / "out.rec")])
    assert status == 1
    assert "could read file" in capsys.readouterr().out


def test_main_writes_output(tmp_path, capsys):
    source = tmp_path / "run.log"
    source.write_text("".join(RESAMPLE_LOG + ["ODOM 1 2 3 4\n", "ENTROPY 1 2 3\n"]))
    target = tmp_path / "run.rec"
    assert main([str(source), str(target)]) == 0
    assert "best index = 0" in capsys.readouterr().out
    assert target.read_text() == _render(RESAMPLE_LOG, 0)


def test_main_err_flag(tmp_path, capsys):
    source = tmp_path / "run.log"
    source.write_text("".join(RESAMPLE_LOG))
    target = tmp_path / "run.rec"
    assert main(["-err", str(source), str(target)]) == 0
    assert all(line.startswith("MARK-POS") for line in target.read_text().splitlines())