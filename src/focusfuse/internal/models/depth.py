import logging

import cv2
import numpy as np

from ..config.depth import DepthConfig
from ..util.image import ImageUtils

logger = logging.getLogger(__name__)


class DepthMapDeriver:
    """Turn a label map into an 8-bit depth map and clean it up.

    Post-filters run in a fixed order: confidence threshold, XY smoothing,
    Z smoothing, halo removal, background removal. Each is skipped when its
    parameter is zero.
    """

    def __init__(self, *, config: DepthConfig) -> None:
        self.config = config

    def derive(
        self,
        labels: np.ndarray,
        best_response: np.ndarray,
        composite: np.ndarray,
        frame_count: int,
    ) -> np.ndarray:
        depth = self.labels_to_depth(labels, frame_count)

        if self.config.threshold > 0:
            depth = self.apply_confidence_threshold(
                depth, best_response, self.config.threshold
            )
        if self.config.smooth_xy > 0:
            depth = self.smooth_xy(depth, self.config.smooth_xy)
        if self.config.smooth_z > 0:
            depth = self.smooth_z(depth, self.config.smooth_z)
        if self.config.halo_radius > 0:
            depth = self.remove_halos(depth, self.config.halo_radius)
        if self.config.remove_background != 0:
            depth = self.remove_background(
                depth, composite, self.config.remove_background
            )

        logger.info("Depth map derived")
        return depth

    @staticmethod
    def labels_to_depth(labels: np.ndarray, frame_count: int) -> np.ndarray:
        """Spread labels linearly over 0..255; a single frame gives zero depth."""
        scale = 0.0 if frame_count <= 1 else 255.0 / (frame_count - 1)
        return np.rint(np.clip(labels.astype(np.float32) * scale, 0, 255)).astype(
            np.uint8
        )

    @staticmethod
    def apply_confidence_threshold(
        depth: np.ndarray, best_response: np.ndarray, threshold: int
    ) -> np.ndarray:
        """Zero depth where the normalized best response is at or below threshold."""
        confidence = ImageUtils.normalize_min_max(best_response, 0.0, 255.0)
        result = depth.copy()
        result[confidence <= threshold] = 0
        return result

    @staticmethod
    def smooth_xy(depth: np.ndarray, strength: int) -> np.ndarray:
        return ImageUtils.gaussian_blur(depth, max(0.1, strength / 10.0))

    def smooth_z(self, depth: np.ndarray, strength: int) -> np.ndarray:
        """Flatten noise inside a depth layer while keeping layer edges."""
        return ImageUtils.bilateral_filter(
            depth, max(1.0, float(strength)), self.config.z_spatial_sigma
        )

    @staticmethod
    def remove_halos(depth: np.ndarray, halo_radius: int) -> np.ndarray:
        radius = max(1, halo_radius // 2)
        kernel = ImageUtils.ellipse_kernel(radius * 2 + 1)
        return ImageUtils.morphology(depth, cv2.MORPH_CLOSE, kernel)

    @staticmethod
    def remove_background(
        depth: np.ndarray, composite: np.ndarray, threshold: int
    ) -> np.ndarray:
        """Zero depth on a black (threshold > 0) or white (threshold < 0) background.

        A positive threshold removes pixels whose gray level is at or below it;
        a negative one removes pixels at or above ``255 + threshold``.
        """
        gray = ImageUtils.rgb_to_grayscale(composite)
        if threshold > 0:
            background = gray <= threshold
        else:
            background = gray >= 255 + threshold
        result = depth.copy()
        result[background] = 0
        return result
