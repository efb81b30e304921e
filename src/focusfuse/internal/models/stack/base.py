import abc
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from ...util.image import ImageUtils
from ..focus import apply_consistency_filter, select_labels

if TYPE_CHECKING:
    from ...config.base import BlenderConfig


@dataclass
class FusionResult:
    """Merged image before denoising, with the label map that drives depth."""

    composite: np.ndarray
    labels: np.ndarray
    best_response: np.ndarray


class Blender(abc.ABC):
    config: "BlenderConfig"

    @abc.abstractmethod
    def blend(
        self, frames: list[np.ndarray], responses: list[np.ndarray]
    ) -> FusionResult:
        """Merge aligned frames into one all-in-focus image.

        Args:
            frames: Aligned RGB uint8 frames of identical size
            responses: One focus response map per frame, same order

        Returns:
            FusionResult with the raw composite, filtered labels and the best
            response per pixel
        """
        raise NotImplementedError

    def select_labels(
        self, responses: list[np.ndarray]
    ) -> tuple[np.ndarray, np.ndarray]:
        """Winner-take-all labels cleaned by the configured consistency filter."""
        labels, best_response = select_labels(responses)
        labels = apply_consistency_filter(
            labels, self.config.consistency_level, self.config.consistency_kernel_sizes
        )
        return labels, best_response

    def denoise(self, composite: np.ndarray) -> np.ndarray:
        """Edge-preserving smoothing of the merged image; level 0 is a no-op."""
        level = self.config.denoise_level
        if level <= 0:
            return composite
        sigma = self.config.denoise_sigma_base + level * self.config.denoise_sigma_per_level
        return ImageUtils.bilateral_filter(composite, sigma, sigma)
