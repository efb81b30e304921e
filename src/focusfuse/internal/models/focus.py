"""Per-pixel focus response, label selection and label map cleanup."""

import logging

import cv2
import numpy as np

from ..util.image import ImageUtils

logger = logging.getLogger(__name__)


class FocusScorer:
    """Sharpness response from the smoothed absolute Laplacian of a frame."""

    def __init__(self, laplacian_kernel_size: int = 3, blur_sigma: float = 1.2) -> None:
        self.laplacian_kernel_size = laplacian_kernel_size
        self.blur_sigma = blur_sigma

    def response(self, frame: np.ndarray) -> np.ndarray:
        """Return a float32 response map the size of the frame."""
        gray = ImageUtils.to_gray_float(frame)
        laplacian = ImageUtils.laplacian_filter(
            gray, cv2.CV_32F, self.laplacian_kernel_size
        )
        return ImageUtils.gaussian_blur(np.abs(laplacian), self.blur_sigma)

    def responses(self, frames: list[np.ndarray]) -> list[np.ndarray]:
        logger.info(f"Computing focus responses for {len(frames)} frames")
        return [self.response(frame) for frame in frames]


def label_dtype(frame_count: int) -> type:
    return np.uint8 if frame_count <= 256 else np.uint16


def select_labels(responses: list[np.ndarray]) -> tuple[np.ndarray, np.ndarray]:
    """Pick the frame with the strongest response at every pixel.

    Frames are visited in index order and a later frame only wins where its
    response is strictly greater, so ties go to the earliest frame.

    Returns:
        (labels, best_response)
    """
    best_response = responses[0].copy()
    labels = np.zeros(best_response.shape, dtype=label_dtype(len(responses)))
    for index in range(1, len(responses)):
        better = responses[index] > best_response
        best_response[better] = responses[index][better]
        labels[better] = index
    return labels, best_response


def apply_consistency_filter(
    labels: np.ndarray, level: int, kernel_sizes: tuple[int, int] = (3, 5)
) -> np.ndarray:
    """Remove isolated label speckles with an opening followed by a closing.

    Level 0 returns the labels unchanged; levels 1 and 2 use the first and
    second round kernel size respectively.
    """
    if level <= 0:
        return labels
    kernel = ImageUtils.ellipse_kernel(kernel_sizes[min(level, 2) - 1])
    opened = ImageUtils.morphology(labels, cv2.MORPH_OPEN, kernel)
    return ImageUtils.morphology(opened, cv2.MORPH_CLOSE, kernel)
