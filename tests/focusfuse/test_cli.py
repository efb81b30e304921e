"""Unit tests for cli module."""

from pathlib import Path
from unittest.mock import Mock, patch

import cv2
import pytest

from focusfuse.cli import _build_parser, main, options_from_args
from focusfuse.common.enums import AlignmentMode, FusionMethod
from focusfuse.common.exceptions import (
    FocusFuseAlignmentException,
    FocusFuseValidationException,
)
from focusfuse.internal.config.depth import ViewPoint


def parse(*argv: str):
    return _build_parser().parse_args(list(argv))


class TestOptionsFromArgs:
    """Test mapping of command line flags onto stacking options."""

    def test_defaults(self) -> None:
        options = options_from_args(parse("a.jpg"))

        assert options.alignment_mode == AlignmentMode.CHAINED
        assert options.align_max_resolution == 2048
        assert options.fusion_method == FusionMethod.PYRAMID_BLEND
        assert options.render_preview is False
        assert options.viewpoint == ViewPoint(1, 1, 1, 2)

    @pytest.mark.parametrize(
        "method,expected",
        [
            ("pyramid", FusionMethod.PYRAMID_BLEND),
            ("wavelet", FusionMethod.PYRAMID_BLEND),
            ("label", FusionMethod.LABEL_SELECTION),
            ("laplacian", FusionMethod.LABEL_SELECTION),
        ],
    )
    def test_merge_methods(self, method: str, expected: FusionMethod) -> None:
        options = options_from_args(parse("a.jpg", "--merge-method", method))

        assert options.fusion_method == expected

    def test_alignment_flags(self) -> None:
        options = options_from_args(
            parse(
                "a.jpg",
                "--global-align",
                "--full-resolution-align",
                "--no-whitebalance",
                "--no-contrast",
                "--no-transform",
                "--align-keep-size",
                "--reference",
                "0",
            )
        )

        assert options.alignment_mode == AlignmentMode.DIRECT
        assert options.align_max_resolution == 0
        assert options.no_whitebalance and options.no_contrast and options.no_transform
        assert options.align_keep_size
        assert options.reference_index == 0

    def test_depth_and_preview_flags(self) -> None:
        options = options_from_args(
            parse(
                "a.jpg",
                "--3dview",
                "view.png",
                "--3dviewpoint",
                "0:1:1:4",
                "--remove-bg",
                "-40",
                "--wavelet-levels",
                "3",
            )
        )

        assert options.render_preview is True
        assert options.viewpoint == ViewPoint(0, 1, 1, 4)
        assert options.remove_background == -40
        assert options.pyramid_levels == 3


class TestMain:
    """Test the command line entry point."""

    def test_version(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--version"]) == 0
        assert "focusfuse" in capsys.readouterr().out

    def test_opencv_version(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--opencv-version"]) == 0
        assert capsys.readouterr().out.strip() == cv2.__version__

    def test_no_inputs_is_usage_error(self) -> None:
        assert main([]) == 2

    @patch("focusfuse.cli.stack_images")
    def test_arguments_reach_stack_images(self, mock_stack: Mock) -> None:
        exit_code = main(
            [
                "a.jpg",
                "b.jpg",
                "--output",
                "out.png",
                "--depthmap",
                "depth.png",
                "--jpgquality",
                "80",
                "--save-steps",
            ]
        )

        assert exit_code == 0
        args, kwargs = mock_stack.call_args
        assert args == (["a.jpg", "b.jpg"], "out.png")
        assert kwargs["depth_map_path"] == "depth.png"
        assert kwargs["preview_path"] is None
        assert kwargs["jpeg_quality"] == 80
        assert kwargs["save_steps"] is True

    @patch("focusfuse.cli.stack_images")
    def test_validation_error_exit_code(self, mock_stack: Mock) -> None:
        mock_stack.side_effect = FocusFuseValidationException("bad input")

        assert main(["a.jpg"]) == 2

    @patch("focusfuse.cli.stack_images")
    def test_processing_error_exit_code(self, mock_stack: Mock) -> None:
        mock_stack.side_effect = FocusFuseAlignmentException("Alignment failed")

        assert main(["a.jpg"]) == 1

    @patch("focusfuse.cli.stack_images")
    @patch("focusfuse.cli.cv2.setNumThreads")
    def test_threads_configure_opencv(
        self, mock_set_threads: Mock, mock_stack: Mock
    ) -> None:
        assert main(["a.jpg", "--threads", "4"]) == 0
        mock_set_threads.assert_called_once_with(4)

    @patch("focusfuse.cli.stack_images")
    @patch("focusfuse.cli.cv2.setNumThreads")
    def test_zero_threads_keeps_opencv_default(
        self, mock_set_threads: Mock, mock_stack: Mock
    ) -> None:
        """Test that the default thread count leaves OpenCV untouched."""
        assert main(["a.jpg"]) == 0
        mock_set_threads.assert_not_called()

    @pytest.mark.parametrize("threads", ["-1", "1025"])
    @patch("focusfuse.cli.stack_images")
    @patch("focusfuse.cli.cv2.setNumThreads")
    def test_out_of_range_threads_exit_code(
        self, mock_set_threads: Mock, mock_stack: Mock, threads: str
    ) -> None:
        assert main(["a.jpg", "--threads", threads]) == 2
        mock_set_threads.assert_not_called()
        mock_stack.assert_not_called()

    def test_invalid_option_value_exit_code(self) -> None:
        """Test that out of range options are reported as usage errors."""
        assert main(["a.jpg", "--consistency", "5"]) == 2

    def test_end_to_end(
        self, image_paths: list[Path], temp_dir: Path, output_path: Path
    ) -> None:
        """Test a real run writing the merged image and depth map."""
        depth_path = temp_dir / "depth.png"

        exit_code = main(
            [str(p) for p in image_paths]
            + [
                "--output",
                str(output_path),
                "--depthmap",
                str(depth_path),
                "--no-align",
            ]
        )

        assert exit_code == 0
        assert output_path.is_file()
        assert depth_path.is_file()
