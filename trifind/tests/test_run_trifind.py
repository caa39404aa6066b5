"""
Tests for the run_trifind command-line entry point.
"""

import json

import cv2
import pytest

from trifind import run_trifind


class TestParseArguments:

    def test_minimal_arguments(self):
        args = run_trifind.parse_arguments(["--input", "a.png", "b.png", "--templates", "t"])
        assert args.input == ["a.png", "b.png"]
        assert args.templates == "t"
        assert args.scale is None
        assert args.stride is None
        assert args.threshold is None
        assert args.no_log_file is False

    def test_input_is_required(self):
        with pytest.raises(SystemExit):
            run_trifind.parse_arguments(["--templates", "t"])


class TestMain:

    def test_writes_detections_to_json(self, tmp_path, template_dir, triangle_frame, triangle_origin):
        frame_path = tmp_path / "frame.png"
        cv2.imwrite(str(frame_path), triangle_frame)
        output_path = tmp_path / "out.json"

        run_trifind.main([
            "--templates", str(template_dir),
            "--input", str(frame_path),
            "--output_json", str(output_path),
            "--scale", "1.0",
            "--stride", "2",
            "--threshold", "0.9",
            "--no-log-file",
        ])

        results = json.loads(output_path.read_text())
        assert len(results) == 1
        assert results[0]["image"] == str(frame_path)
        assert results[0]["annotator"].startswith("trifind v")

        x, y = triangle_origin
        detections = results[0]["detections"]
        assert [d["bbox"] for d in detections] == [[x, y, x + 40, y + 40]]
        assert detections[0]["label"] == "triangle"

    def test_missing_template_directory_exits(self, tmp_path, triangle_frame):
        frame_path = tmp_path / "frame.png"
        cv2.imwrite(str(frame_path), triangle_frame)

        with pytest.raises(SystemExit) as excinfo:
            run_trifind.main([
                "--templates", str(tmp_path / "missing"),
                "--input", str(frame_path),
                "--no-log-file",
            ])
        assert excinfo.value.code == 1

    def test_empty_template_directory_exits(self, tmp_path, triangle_frame):
        frame_path = tmp_path / "frame.png"
        cv2.imwrite(str(frame_path), triangle_frame)
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()

        with pytest.raises(SystemExit) as excinfo:
            run_trifind.main([
                "--templates", str(empty_dir),
                "--input", str(frame_path),
                "--no-log-file",
            ])
        assert excinfo.value.code == 1
