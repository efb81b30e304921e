"""Unit tests for PyramidBlendBlender class."""

from typing import Callable

import numpy as np
import pytest

from focusfuse.internal.config.blender import PyramidBlendConfig
from focusfuse.internal.models.focus import FocusScorer
from focusfuse.internal.models.stack.pyramid_blend import PyramidBlendBlender
from focusfuse.internal.util.image import ImageUtils


@pytest.fixture
def blender() -> PyramidBlendBlender:
    return PyramidBlendBlender(config=PyramidBlendConfig(denoise_level=0))


class TestPyramidConstruction:
    """Test pyramid decomposition and reconstruction."""

    def test_level_count(
        self, blender: PyramidBlendBlender, textured_frame: np.ndarray
    ) -> None:
        """Test that L detail levels plus the base are produced."""
        pyramid = blender.build_laplacian_pyramid(ImageUtils.to_float(textured_frame))

        assert len(pyramid) == 6
        assert pyramid[0].shape == textured_frame.shape
        assert pyramid[-1].shape == (3, 4, 3)

    @pytest.mark.parametrize("shape", [(96, 120), (33, 47), (17, 64), (5, 5)])
    def test_round_trip_is_identity(
        self,
        blender: PyramidBlendBlender,
        texture_factory: Callable,
        shape: tuple[int, int],
    ) -> None:
        """Test that decompose then reconstruct returns the image, odd sizes included."""
        image = ImageUtils.to_float(texture_factory(*shape))

        pyramid = blender.build_laplacian_pyramid(image)
        restored = blender.reconstruct_from_laplacian_pyramid(pyramid)

        assert restored.shape == image.shape
        assert np.abs(restored - image).max() < 1e-4

    def test_small_images_stop_early(self, blender: PyramidBlendBlender) -> None:
        """Test that halving stops before a side drops below the minimum size."""
        image = np.zeros((3, 3, 3), dtype=np.float32)

        gaussian = blender.build_gaussian_pyramid(image)

        assert [level.shape[:2] for level in gaussian] == [(3, 3), (2, 2)]

    @pytest.mark.parametrize("levels", [1, 3, 10])
    def test_configured_levels(self, texture_factory: Callable, levels: int) -> None:
        """Test that the pyramid depth follows the configuration up to the size limit."""
        blender = PyramidBlendBlender(config=PyramidBlendConfig(levels=levels))

        gaussian = blender.build_gaussian_pyramid(
            ImageUtils.to_float(texture_factory(256, 256))
        )

        assert len(gaussian) == min(levels, 7) + 1


class TestPyramidBlend:
    """Test the coefficient selection merge."""

    def test_single_frame_is_identity(
        self, blender: PyramidBlendBlender, textured_frame: np.ndarray
    ) -> None:
        """Test that blending one frame gives that frame back."""
        responses = FocusScorer().responses([textured_frame])

        result = blender.blend([textured_frame], responses)

        assert np.array_equal(result.composite, textured_frame)
        assert not result.labels.any()

    def test_identical_frames_reproduce_frame(
        self, blender: PyramidBlendBlender, textured_frame: np.ndarray
    ) -> None:
        """Test that ties everywhere keep the first frame's coefficients."""
        frames = [textured_frame.copy() for _ in range(3)]
        responses = FocusScorer().responses(frames)

        result = blender.blend(frames, responses)

        assert np.array_equal(result.composite, textured_frame)
        assert not result.labels.any()

    def test_merge_is_sharper_than_any_frame(
        self, blender: PyramidBlendBlender, focus_stack: list[np.ndarray]
    ) -> None:
        """Test that the merged image carries the detail of every band."""
        scorer = FocusScorer()
        responses = scorer.responses(focus_stack)

        result = blender.blend(focus_stack, responses)

        merged_sharpness = scorer.response(result.composite).mean()
        for response in responses:
            assert merged_sharpness > response.mean()
        assert result.composite.dtype == np.uint8
        assert result.composite.shape == focus_stack[0].shape

    def test_labels_follow_sharp_bands(self, focus_stack: list[np.ndarray]) -> None:
        """Test that the depth labels are still derived from the responses."""
        blender = PyramidBlendBlender(config=PyramidBlendConfig())
        responses = FocusScorer().responses(focus_stack)

        result = blender.blend(focus_stack, responses)

        assert np.mean(result.labels[8:-8, 6:34] == 0) > 0.95
        assert np.mean(result.labels[8:-8, 86:114] == 2) > 0.95


class TestDenoise:
    """Test the final edge-preserving pass."""

    def test_level_zero_is_noop(
        self, blender: PyramidBlendBlender, textured_frame: np.ndarray
    ) -> None:
        assert blender.denoise(textured_frame) is textured_frame

    def test_denoise_smooths_noise(self, texture_factory: Callable) -> None:
        """Test that denoising reduces pixel noise."""
        blender = PyramidBlendBlender(config=PyramidBlendConfig(denoise_level=3))
        noisy = texture_factory(64, 64, sigma=0.5)

        smoothed = blender.denoise(noisy)

        assert smoothed.shape == noisy.shape
        assert smoothed.astype(np.float32).std() < noisy.astype(np.float32).std()
