import csv

import numpy as np
import pytest
from hydrolab.geometry.transform import Transform
from hydrolab.logger import ForceLogger


@pytest.fixture
def deep_auv(auv, ocean, settings):
    auv.set_origin_pose(Transform.from_translation([0.0, 0.0, -10.0]))
    auv.compute_fluid_forces(settings, ocean)
    return auv


def read_rows(path):
    with open(path, "r", newline="") as f:
        return list(csv.reader(f))


def test_logger_basic_io(tmp_path, deep_auv):
    """Test that logger creates file and writes header + data correctly."""
    log_path = tmp_path / "forces.csv"

    with ForceLogger(str(log_path), buffer_size=1) as logger:
        logger.log(0.0, [deep_auv])

    rows = read_rows(log_path)
    # Header + 1 data row
    assert len(rows) == 2
    header = rows[0]
    # t + 6 fields * 3 components
    assert len(header) == 19
    assert header[0] == "t"
    assert header[1:4] == ["auv.Fb_x", "auv.Fb_y", "auv.Fb_z"]
    assert "auv.Tdp_z" in header

    values = dict(zip(header, rows[1]))
    assert float(values["t"]) == 0.0
    assert float(values["auv.Fb_z"]) == pytest.approx(98.1)


def test_logger_field_selection(tmp_path, deep_auv):
    log_path = tmp_path / "buoyancy.csv"
    with ForceLogger(log_path, fields=["Fb"]) as logger:
        logger.log(0.5, [deep_auv])
    header = read_rows(log_path)[0]
    assert header == ["t", "auv.Fb_x", "auv.Fb_y", "auv.Fb_z"]


def test_logger_invalid_field(tmp_path):
    with pytest.raises(ValueError, match="Invalid fields"):
        ForceLogger(tmp_path / "bad.csv", fields=["Fb", "added_mass"])


def test_logger_buffering(tmp_path, deep_auv):
    """Test that data is buffered and only written when buffer fills or flush is called."""
    log_path = tmp_path / "buffer.csv"
    logger = ForceLogger(str(log_path), buffer_size=5)

    for i in range(4):
        logger.log(i * 0.1, [deep_auv])
    # Only the header has reached the disk
    assert len(read_rows(log_path)) == 1

    logger.log(0.4, [deep_auv])
    assert len(read_rows(log_path)) == 6

    logger.log(0.5, [deep_auv])
    logger.close()
    rows = read_rows(log_path)
    assert len(rows) == 7
    assert np.isclose(float(rows[-1][0]), 0.5)


def test_logger_creates_parent_directory(tmp_path, deep_auv):
    log_path = tmp_path / "nested" / "run" / "forces.csv"
    with ForceLogger(log_path) as logger:
        logger.log(0.0, [deep_auv])
    assert log_path.exists()
