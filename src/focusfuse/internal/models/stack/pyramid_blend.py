import logging

import cv2
import numpy as np

from ....common.enums import FusionMethod
from ...config.blender import PyramidBlendConfig
from ...models.decorators import Blender
from ...util.image import ImageUtils
from .base import Blender as BlenderBase
from .base import FusionResult

logger = logging.getLogger(__name__)


@Blender(FusionMethod.PYRAMID_BLEND)
class PyramidBlendBlender(BlenderBase):
    def __init__(self, *, config: PyramidBlendConfig) -> None:
        self.config = config

    def blend(
        self, frames: list[np.ndarray], responses: list[np.ndarray]
    ) -> FusionResult:
        """Merge frames by keeping the strongest Laplacian coefficient per level.

        Pyramids are folded into the running selection one frame at a time in
        index order, so only two pyramids are alive at once and ties keep the
        earlier frame's coefficient.
        """
        logger.info(f"Starting pyramid blend with {len(frames)} frames")

        merged_pyramid = self.build_laplacian_pyramid(ImageUtils.to_float(frames[0]))
        merged_energy = [self._coefficient_energy(level) for level in merged_pyramid]

        for index in range(1, len(frames)):
            pyramid = self.build_laplacian_pyramid(ImageUtils.to_float(frames[index]))
            for level_idx, level in enumerate(pyramid):
                energy = self._coefficient_energy(level)
                stronger = energy > merged_energy[level_idx]
                merged_pyramid[level_idx][stronger] = level[stronger]
                merged_energy[level_idx][stronger] = energy[stronger]

            logger.info(f"Merged pyramid of frame {index + 1}/{len(frames)}")

        reconstructed = self.reconstruct_from_laplacian_pyramid(merged_pyramid)
        composite = ImageUtils.to_uint8(reconstructed)

        # Labels are still needed to derive the depth map
        labels, best_response = self.select_labels(responses)

        logger.info("Pyramid blend completed successfully")
        return FusionResult(
            composite=composite, labels=labels, best_response=best_response
        )

    def build_gaussian_pyramid(self, image: np.ndarray) -> list[np.ndarray]:
        """Repeatedly blur and halve, up to ``levels`` times."""
        pyramid = [image]
        for _level in range(self.config.levels):
            height, width = pyramid[-1].shape[:2]
            if (min(height, width) + 1) // 2 < self.config.minimum_pyramid_size:
                break
            pyramid.append(ImageUtils.pyramid_down(pyramid[-1]))
        return pyramid

    def build_laplacian_pyramid(self, image: np.ndarray) -> list[np.ndarray]:
        """Detail levels from fine to coarse followed by the coarse base."""
        gaussian_pyramid = self.build_gaussian_pyramid(image)
        laplacian_pyramid = []

        for i in range(len(gaussian_pyramid) - 1):
            height, width = gaussian_pyramid[i].shape[:2]
            upsampled = ImageUtils.pyramid_up(gaussian_pyramid[i + 1], (width, height))
            laplacian_pyramid.append(gaussian_pyramid[i] - upsampled)

        laplacian_pyramid.append(gaussian_pyramid[-1])
        return laplacian_pyramid

    def reconstruct_from_laplacian_pyramid(
        self, laplacian_pyramid: list[np.ndarray]
    ) -> np.ndarray:
        """Invert ``build_laplacian_pyramid``; the result is not clamped."""
        result = laplacian_pyramid[-1].copy()
        for i in range(len(laplacian_pyramid) - 2, -1, -1):
            height, width = laplacian_pyramid[i].shape[:2]
            result = ImageUtils.pyramid_up(result, (width, height)) + laplacian_pyramid[i]
        return result

    @staticmethod
    def _coefficient_energy(coefficients: np.ndarray) -> np.ndarray:
        """Single-channel magnitude of a colour coefficient map."""
        return cv2.cvtColor(np.abs(coefficients), cv2.COLOR_RGB2GRAY)
