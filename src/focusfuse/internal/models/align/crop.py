"""Validity-mask intersection and largest interior rectangle cropping."""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import largestinteriorrectangle
import numpy as np

logger = logging.getLogger(__name__)

MASK_VALID = 255


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle in integer pixel coordinates."""

    x: int
    y: int
    w: int
    h: int

    @property
    def area(self) -> int:
        return max(0, self.w) * max(0, self.h)

    @property
    def x2(self) -> int:
        return self.x + self.w

    @property
    def y2(self) -> int:
        return self.y + self.h

    def apply(self, image: np.ndarray) -> np.ndarray:
        """Return an owned copy of the image region covered by the rectangle."""
        return image[self.y : self.y2, self.x : self.x2].copy()


def full_mask(shape: tuple[int, ...]) -> np.ndarray:
    """Fully valid mask for a frame of the given shape."""
    return np.full(shape[:2], MASK_VALID, dtype=np.uint8)


def intersect_masks(masks: list[np.ndarray]) -> np.ndarray:
    """Pixels valid in every mask."""
    combined = masks[0].copy()
    for mask in masks[1:]:
        combined = cv2.bitwise_and(combined, mask)
    return combined


def largest_valid_rectangle(mask: np.ndarray) -> Optional[Rectangle]:
    """Find the largest axis-aligned rectangle made only of valid pixels.

    The search runs inside the outline of the largest valid region, so a
    mask split into several islands is cropped to the biggest one.

    Returns:
        The rectangle, or None when the mask has no valid pixel
    """
    valid = mask > 0
    height, width = valid.shape
    if valid.all():
        return Rectangle(0, 0, width, height)
    if not valid.any():
        return None

    mask_u8 = np.where(valid, MASK_VALID, 0).astype(np.uint8)
    contours, _ = cv2.findContours(mask_u8, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)
    if not contours:
        return None
    contour = max(contours, key=cv2.contourArea)[:, 0, :]
    x, y, w, h = largestinteriorrectangle.lir(valid, contour)
    rect = Rectangle(int(x), int(y), int(w), int(h))
    if rect.area == 0 or not valid[rect.y : rect.y2, rect.x : rect.x2].all():
        logger.debug(f"Interior rectangle {rect} is not fully valid, discarding it")
        return None
    return rect


def crop_to_common_area(
    frames: list[np.ndarray], masks: list[np.ndarray]
) -> tuple[list[np.ndarray], list[np.ndarray], Optional[Rectangle]]:
    """Crop every frame and mask to the largest area valid in all masks.

    An empty intersection is not an error: the stack is returned uncropped.
    """
    rect = largest_valid_rectangle(intersect_masks(masks))
    if rect is None or rect.area == 0:
        logger.warning("No common valid area after alignment, skipping crop")
        return frames, masks, None

    height, width = frames[0].shape[:2]
    if rect.w == width and rect.h == height:
        logger.info("Aligned frames fully overlap, no crop needed")
        return frames, masks, rect

    logger.info(
        f"Cropping aligned stack from {width}x{height} to {rect.w}x{rect.h} "
        f"at ({rect.x}, {rect.y})"
    )
    return (
        [rect.apply(frame) for frame in frames],
        [rect.apply(mask) for mask in masks],
        rect,
    )
