"""Tests for the package logger."""

from __future__ import annotations

import numpy as np
import pytest

from pynormals.logger import LogLevel, NormalsLogger, get_logger, set_logger
from pynormals.normal_estimation import NormalEstimation


class TestNormalsLogger:
    def test_console_levels(self, capsys):
        logger = NormalsLogger(mode="console", console_level=LogLevel.INFO, include_timestamp=False)
        logger.debug("hidden")
        logger.info("shown")
        logger.warning("careful")
        out, err = capsys.readouterr()
        assert "hidden" not in out
        assert "[INFO] shown" in out
        assert "[WARNING] careful" in err

    def test_callable_with_string_level(self, capsys):
        logger = NormalsLogger(mode="console", include_timestamp=False)
        logger("boom", "error")
        assert "[ERROR] boom" in capsys.readouterr().err

    def test_file_mode(self, tmp_path, capsys):
        path = tmp_path / "logs" / "run.log"
        logger = NormalsLogger(mode="file", log_file=str(path), file_level=LogLevel.DEBUG)
        logger.debug("to file")
        assert "to file" in path.read_text()
        assert capsys.readouterr().out == ""

    def test_is_enabled_for(self):
        logger = NormalsLogger(mode="console", console_level=LogLevel.WARNING)
        assert not logger.isEnabledFor(LogLevel.INFO)
        assert logger.isEnabledFor(LogLevel.ERROR)

    @pytest.mark.parametrize("kwargs", [{"mode": "syslog"}, {"mode": "file"}])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            NormalsLogger(**kwargs)


class TestDefaultLogger:
    def test_set_and_reset(self):
        custom = NormalsLogger(mode="console")
        set_logger(custom)
        assert get_logger() is custom
        set_logger(None)
        assert get_logger() is not custom

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            set_logger("not a logger")

    def test_estimation_reports_undefined_normals(self, tmp_path):
        path = tmp_path / "est.log"
        set_logger(NormalsLogger(mode="file", log_file=str(path), file_level=LogLevel.DEBUG))
        pts = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0]], dtype=np.float64)
        NormalEstimation(pts).estimate_normals_radius(0.5)
        text = path.read_text()
        assert "[estimate_normals_radius] 3 points, radius=0.5" in text
        assert "3/3 normals undefined" in text

    def test_in_place_without_cloud_is_logged(self, tmp_path):
        path = tmp_path / "est.log"
        set_logger(NormalsLogger(mode="file", log_file=str(path), file_level=LogLevel.DEBUG))
        NormalEstimation(np.zeros((4, 3))).estimate_normals_knn_in_place(3)
        assert "nothing to do" in path.read_text()
