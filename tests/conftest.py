"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import cv2
import numpy as np
import pytest

from focusfuse.common.enums import AlignmentMode, FusionMethod
from focusfuse.internal.models.validation import StackingOptions

FRAME_HEIGHT = 96
FRAME_WIDTH = 120


def make_texture(
    height: int = FRAME_HEIGHT, width: int = FRAME_WIDTH, sigma: float = 1.0, seed: int = 7
) -> np.ndarray:
    """Gray RGB texture of smoothed noise stretched to the full 0-255 range."""
    rng = np.random.default_rng(seed)
    noise = rng.random((height, width)).astype(np.float32)
    smooth = cv2.GaussianBlur(noise, (0, 0), sigma)
    smooth = cv2.normalize(smooth, None, 0, 255, cv2.NORM_MINMAX)
    gray = smooth.astype(np.uint8)
    return np.dstack([gray, gray, gray])


def make_focus_stack(frame_count: int = 3) -> list[np.ndarray]:
    """Frames that are each sharp in one vertical band and blurred elsewhere."""
    sharp = make_texture()
    blurred = cv2.GaussianBlur(sharp, (0, 0), 4.0)
    band = FRAME_WIDTH // frame_count
    frames = []
    for index in range(frame_count):
        frame = blurred.copy()
        frame[:, index * band : (index + 1) * band] = sharp[
            :, index * band : (index + 1) * band
        ]
        frames.append(frame)
    return frames


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory(prefix="test_focusfuse_") as tmp:
        yield Path(tmp)


@pytest.fixture
def textured_frame() -> np.ndarray:
    """Single RGB frame with alignable texture."""
    return make_texture(sigma=3.0)


@pytest.fixture
def focus_stack() -> list[np.ndarray]:
    """Three frames, sharp in the left, middle and right band respectively."""
    return make_focus_stack(3)


@pytest.fixture
def gray_stack() -> list[np.ndarray]:
    """Three solid gray frames without any texture."""
    return [np.full((FRAME_HEIGHT, FRAME_WIDTH, 3), 128, dtype=np.uint8) for _ in range(3)]


@pytest.fixture
def unaligned_options() -> StackingOptions:
    """Options that skip alignment and all optional filtering."""
    return StackingOptions(
        disable_alignment=True,
        denoise=0,
        depthmap_threshold=0,
        depthmap_smooth_xy=0,
        depthmap_smooth_z=0,
        halo_radius=0,
    )


@pytest.fixture
def default_alignment_mode() -> AlignmentMode:
    """Default alignment mode for testing."""
    return AlignmentMode.CHAINED


@pytest.fixture
def default_fusion_method() -> FusionMethod:
    """Default fusion method for testing."""
    return FusionMethod.PYRAMID_BLEND


@pytest.fixture
def image_paths(temp_dir: Path, focus_stack: list[np.ndarray]) -> list[Path]:
    """The focus stack written to PNG files."""
    paths = []
    for index, frame in enumerate(focus_stack):
        path = temp_dir / f"frame_{index}.png"
        cv2.imwrite(str(path), cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
        paths.append(path)
    return paths


@pytest.fixture
def output_path(temp_dir: Path) -> Path:
    """Output path for test results."""
    return temp_dir / "test_output.png"


@pytest.fixture
def texture_factory():
    """Factory for textured frames of a given size and smoothness."""
    return make_texture
