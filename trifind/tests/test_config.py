"""
Unit tests for configuration module - parameters, settings file and CLI config.
"""

import argparse

import pytest

from trifind.trifindlib.config import (
    Constants,
    Detection,
    DetectionParams,
    FinderConfig,
    FinderSettings,
    Match,
    load_settings,
)


class TestConstants:

    def test_constants_have_expected_values(self):
        assert Constants.LABEL == "triangle"
        assert Constants.NMS_IOU_THRESHOLD == 0.3
        assert Constants.EDGE_NOISE_FLOOR == 50
        assert Constants.PADDING_RATIO == 0.3
        assert "trifind" in Constants.ANNOTATOR_NAME

    def test_template_extensions(self):
        assert ".png" in Constants.VALID_TEMPLATE_EXTENSIONS
        assert ".jpeg" in Constants.VALID_TEMPLATE_EXTENSIONS


class TestResultTypes:

    def test_match_bounding_box(self):
        match = Match(x=5, y=7, width=10, height=20, score=0.9)
        assert match.bounding_box() == (5, 7, 15, 27)

    def test_detection_accessors(self):
        detection = Detection(bbox=(1, 2, 3, 4), score=0.5)
        assert detection.label == "triangle"
        assert (detection.min_x, detection.min_y, detection.max_x, detection.max_y) == (1, 2, 3, 4)
        assert detection.to_dict() == {"bbox": [1, 2, 3, 4], "score": 0.5, "label": "triangle"}


class TestDetectionParams:

    def test_default_values(self):
        params = DetectionParams()
        assert params.scale == 0.5
        assert params.stride == 2
        assert params.threshold == 0.75

    @pytest.mark.parametrize("kwargs", [
        {"scale": 0.0},
        {"scale": -1.0},
        {"stride": 0},
        {"stride": 1.5},
        {"stride": 2.0},
        {"stride": True},
    ])
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            DetectionParams(**kwargs)


class TestLoadSettings:

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "finder.yaml"
        path.write_text("templates_dir: /tmp/templates\nscale: 0.25\nstride: 3\nthreshold: 0.8\n")
        settings = load_settings(path)
        assert settings.templates_dir == "/tmp/templates"
        assert settings.detection_params() == DetectionParams(scale=0.25, stride=3, threshold=0.8)

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        settings = load_settings(path)
        assert settings == FinderSettings()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("stride: 0\n")
        with pytest.raises(ValueError):
            load_settings(path)


class TestFinderConfig:

    @pytest.fixture
    def input_image(self, tmp_path):
        path = tmp_path / "frame.png"
        path.write_bytes(b"placeholder")
        return str(path)

    def make_args(self, **overrides):
        values = dict(
            templates=None,
            input=[],
            config=None,
            output_json=None,
            scale=None,
            stride=None,
            threshold=None,
            verbose=False,
            no_log_file=True,
        )
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_defaults_apply(self, template_dir, input_image):
        config = FinderConfig(self.make_args(templates=str(template_dir), input=[input_image]))
        assert config.detection_params == DetectionParams()
        assert config.log_to_file is False

    def test_command_line_overrides_settings(self, tmp_path, template_dir, input_image):
        settings = tmp_path / "finder.yaml"
        settings.write_text(f"templates_dir: {template_dir}\nscale: 0.25\nthreshold: 0.6\n")
        config = FinderConfig(self.make_args(
            config=str(settings), input=[input_image], threshold=0.9
        ))
        assert config.templates_dir == str(template_dir)
        assert config.scale == 0.25
        assert config.threshold == 0.9
        assert config.stride == Constants.DEFAULT_STRIDE

    def test_missing_template_dir_raises(self, input_image):
        with pytest.raises(ValueError):
            FinderConfig(self.make_args(input=[input_image]))

    def test_nonexistent_template_dir_raises(self, tmp_path, input_image):
        with pytest.raises(FileNotFoundError):
            FinderConfig(self.make_args(templates=str(tmp_path / "nope"), input=[input_image]))

    def test_missing_input_raises(self, template_dir, tmp_path):
        with pytest.raises(FileNotFoundError):
            FinderConfig(self.make_args(
                templates=str(template_dir), input=[str(tmp_path / "missing.png")]
            ))

    def test_invalid_scale_raises(self, template_dir, input_image):
        with pytest.raises(ValueError):
            FinderConfig(self.make_args(templates=str(template_dir), input=[input_image], scale=0.0))

    def test_float_stride_raises(self, template_dir, input_image):
        with pytest.raises(ValueError):
            FinderConfig(self.make_args(templates=str(template_dir), input=[input_image], stride=2.0))
