import abc
import logging

import cv2
import numpy as np

from ....common.exceptions import FocusFuseAlignmentException
from ...config.base import AlignerConfig
from ...util.image import ImageUtils
from .base import AlignmentResult
from .base import Aligner as AlignerBase
from .crop import crop_to_common_area, full_mask
from .photometric import PhotometricMatcher

logger = logging.getLogger(__name__)


class EccAligner(AlignerBase):
    """Intensity-based Euclidean registration shared by the alignment modes.

    Subclasses only decide which frame each frame is aligned against; the
    order they return is the order frames are processed in, so a target must
    be aligned before any frame that uses it.

    The Euclidean motion model has three degrees of freedom, rotation and
    translation. Magnification changes between frames, such as lens focus
    breathing, are not corrected.
    """

    def __init__(self, *, config: AlignerConfig) -> None:
        self.config = config

    @abc.abstractmethod
    def alignment_order(
        self, frame_count: int, reference_index: int
    ) -> list[tuple[int, int]]:
        """Return (moving_index, target_index) pairs in processing order."""
        raise NotImplementedError

    def align(self, frames: list[np.ndarray], reference_index: int) -> AlignmentResult:
        """Align frames photometrically and geometrically, then crop borders."""
        logger.info(
            f"{type(self).__name__} aligning {len(frames)} frames "
            f"to reference {reference_index}"
        )

        aligned = [frame.copy() for frame in frames]
        masks = [full_mask(frame.shape) for frame in frames]

        for moving_index, target_index in self.alignment_order(
            len(frames), reference_index
        ):
            aligned[moving_index], masks[moving_index] = self._align_frame(
                aligned[moving_index],
                aligned[target_index],
                masks[moving_index],
                moving_index,
            )

        if not self.config.crop:
            return AlignmentResult(frames=aligned, masks=masks)

        cropped, cropped_masks, rect = crop_to_common_area(aligned, masks)
        return AlignmentResult(frames=cropped, masks=cropped_masks, crop=rect)

    def _align_frame(
        self,
        moving: np.ndarray,
        target: np.ndarray,
        mask: np.ndarray,
        index: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        if self.config.white_balance:
            moving = PhotometricMatcher.match_white_balance(moving, target)
        if self.config.contrast:
            moving = PhotometricMatcher.match_contrast(moving, target)
        if not self.config.transform:
            return moving, mask

        warp = self.find_transform(moving, target, index)

        height, width = moving.shape[:2]
        warped = ImageUtils.warp_affine(
            moving,
            warp,
            (width, height),
            interpolation=cv2.INTER_LINEAR,
            border_mode=cv2.BORDER_REFLECT,
        )
        warped_mask = ImageUtils.warp_affine(
            mask,
            warp,
            (width, height),
            interpolation=cv2.INTER_NEAREST,
            border_mode=cv2.BORDER_CONSTANT,
            border_value=0,
        )
        return warped, warped_mask

    def fit_scale(self, shape: tuple[int, ...]) -> float:
        """Downscale factor applied to both operands of the ECC fit."""
        largest = max(shape[:2])
        limit = self.config.max_resolution
        if limit <= 0 or largest <= limit:
            return 1.0
        return limit / largest

    def find_transform(
        self, moving: np.ndarray, target: np.ndarray, index: int
    ) -> np.ndarray:
        """Estimate the 2x3 warp mapping target coordinates into the moving frame.

        Raises:
            FocusFuseAlignmentException: On size mismatch or if ECC fails to converge
        """
        if moving.shape[:2] != target.shape[:2]:
            raise FocusFuseAlignmentException(
                f"Frame {index} size {moving.shape[:2]} does not match "
                f"alignment target size {target.shape[:2]}"
            )

        target_gray = ImageUtils.to_gray_float(target)
        moving_gray = ImageUtils.to_gray_float(moving)

        scale = self.fit_scale(target_gray.shape)
        if scale < 1.0:
            height, width = target_gray.shape
            size = (max(1, round(width * scale)), max(1, round(height * scale)))
            target_gray = ImageUtils.resize_image(target_gray, size, cv2.INTER_AREA)
            moving_gray = ImageUtils.resize_image(moving_gray, size, cv2.INTER_AREA)

        warp = np.eye(2, 3, dtype=np.float32)
        criteria = (
            cv2.TERM_CRITERIA_EPS | cv2.TERM_CRITERIA_COUNT,
            self.config.max_iterations,
            self.config.epsilon,
        )
        try:
            correlation, warp = cv2.findTransformECC(
                target_gray,
                moving_gray,
                warp,
                cv2.MOTION_EUCLIDEAN,
                criteria,
                None,
                self.config.gauss_filter_size,
            )
        except cv2.error as e:
            msg = f"ECC registration did not converge for frame {index}: {e}"
            logger.error(msg)
            raise FocusFuseAlignmentException(msg) from e

        if scale < 1.0:
            warp[:, 2] /= scale

        logger.info(
            f"Aligned frame {index}: correlation {correlation:.4f}, "
            f"shift ({warp[0, 2]:.2f}, {warp[1, 2]:.2f})"
        )
        return warp
