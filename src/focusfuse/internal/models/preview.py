import logging

import cv2
import numpy as np

from ..config.depth import PreviewConfig
from ..util.image import ImageUtils

logger = logging.getLogger(__name__)


class ReliefPreviewRenderer:
    """Shade the composite with diffuse lighting of the depth surface."""

    def __init__(self, *, config: PreviewConfig) -> None:
        self.config = config

    def render(self, composite: np.ndarray, depth_map: np.ndarray) -> np.ndarray:
        shading = self.shading(depth_map)
        color = ImageUtils.to_float(composite) * shading[..., np.newaxis]
        logger.info("Rendered 3D preview")
        return ImageUtils.to_uint8(color)

    def shading(self, depth_map: np.ndarray) -> np.ndarray:
        """Diffuse term per pixel, rescaled to [ambient_floor, 1].

        A flat depth map has no range to rescale and is shaded at the floor.
        """
        view = self.config.viewpoint
        depth = ImageUtils.to_float(depth_map)

        grad_x = ImageUtils.sobel_filter(depth, 1, 0, cv2.CV_32F, 3)
        grad_y = ImageUtils.sobel_filter(depth, 0, 1, cv2.CV_32F, 3)

        normal_x = -grad_x * view.x
        normal_y = -grad_y * view.y
        normal_z = np.full(
            depth.shape,
            1.0 / max(self.config.min_z_scale, view.z_scale),
            dtype=np.float32,
        )
        length = np.sqrt(normal_x**2 + normal_y**2 + normal_z**2)

        diffuse = (normal_x * view.x + normal_y * view.y + normal_z * view.z) / length
        return ImageUtils.normalize_min_max(diffuse, self.config.ambient_floor, 1.0)
