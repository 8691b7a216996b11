"""
Command Line and Logging Tests
"""

import json
import logging

import numpy as np
import pytest

from redeye import __version__
from redeye.cli import build_parser, main
from redeye.core.image_processor import ImageProcessor
from redeye.logging_config import setup_logging


@pytest.fixture
def input_png(tmp_path, red_patch_image):
    path = tmp_path / "input.png"
    ImageProcessor.save_image(path, red_patch_image)
    return path


class TestMain:

    def test_corrects_image(self, tmp_path, input_png, restore_logging):
        output = tmp_path / "output.png"

        assert main([str(input_png), str(output), "--log-level", "WARNING"]) == 0

        result = ImageProcessor.load_image(output)
        assert result.shape == (25, 25, 4)
        assert result[12, 12, :3].max() <= 2

    def test_debug_dir(self, tmp_path, input_png, restore_logging):
        debug_dir = tmp_path / "debug" / "masks"

        code = main([str(input_png), str(tmp_path / "out.png"), "--debug-dir", str(debug_dir)])

        assert code == 0
        names = sorted(path.stem for path in debug_dir.glob("*.png"))
        assert names == sorted([
            'alpha_mask', 'false_color', 'lab_l', 'no_holes',
            'no_small_islands', 'redness_mask', 'threshold',
        ])

    def test_config_file(self, tmp_path, input_png, restore_logging):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({'blur_size': 5}), encoding="utf-8")

        code = main([str(input_png), str(tmp_path / "out.png"), "--config", str(config)])

        assert code == 0

    def test_missing_input(self, tmp_path, restore_logging):
        code = main([str(tmp_path / "missing.png"), str(tmp_path / "out.png")])
        assert code == 1
        assert not (tmp_path / "out.png").exists()

    def test_bad_config(self, tmp_path, input_png, restore_logging):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({'blur_size': 4}), encoding="utf-8")

        code = main([str(input_png), str(tmp_path / "out.png"), "--config", str(config)])

        assert code == 1

    def test_config_with_wrong_type(self, tmp_path, input_png, restore_logging):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({'blur_size': 3.0}), encoding="utf-8")

        code = main([str(input_png), str(tmp_path / "out.png"), "--config", str(config)])

        assert code == 1
        assert not (tmp_path / "out.png").exists()

    def test_image_too_small(self, tmp_path, restore_logging):
        path = tmp_path / "tiny.png"
        ImageProcessor.save_image(path, np.zeros((2, 2, 3), dtype=np.uint8))

        assert main([str(path), str(tmp_path / "out.png")]) == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(["--version"])
        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestLogging:

    def test_console_handler(self, restore_logging):
        root = setup_logging("WARNING")

        assert root is logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.WARNING
        assert logging.getLogger('numba').level == logging.WARNING

    def test_repeated_setup_does_not_duplicate(self, restore_logging):
        setup_logging()
        root = setup_logging()
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back_to_info(self, restore_logging):
        root = setup_logging("LOUD")
        assert root.handlers[0].level == logging.INFO

    def test_log_file(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "redeye.log"

        root = setup_logging("INFO", log_file)
        logging.getLogger("redeye.test").debug("written to file only")
        for handler in root.handlers:
            handler.flush()

        assert len(root.handlers) == 2
        assert "written to file only" in log_file.read_text(encoding="utf-8")
