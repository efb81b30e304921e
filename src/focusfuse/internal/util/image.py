"""Image utility functions for common OpenCV operations."""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from ...common.exceptions import (
    FocusFuseDirectoryException,
    FocusFuseFileException,
    FocusFuseImageProcessingException,
    FocusFuseMemoryException,
)
from .resource_monitor import ResourceMonitor

logger = logging.getLogger(__name__)

JPEG_EXTENSIONS = {".jpg", ".jpeg"}


class ImageUtils:
    """Utility class for common image operations using OpenCV.

    Frames are handled in RGB channel order throughout the package; the BGR
    order OpenCV uses on disk is only seen by ``load_image`` and ``save_image``.
    """

    @staticmethod
    def load_image(path: Union[str, Path]) -> np.ndarray:
        """Load image from path and convert to RGB format.

        Args:
            path: Path to the image file

        Returns:
            Image array in RGB format (uint8, three channels)

        Raises:
            FocusFuseFileException: If image cannot be loaded
            FocusFuseImageProcessingException: If image processing fails
            FocusFuseMemoryException: If insufficient memory
        """
        path = Path(path)

        try:
            # Rough estimate: decoded frame is ~4x the compressed file size
            file_size_gb = path.stat().st_size / (1024**3)
            ResourceMonitor.check_memory_availability(file_size_gb * 4)
        except FocusFuseMemoryException:
            raise
        except Exception as e:
            logger.warning(f"Could not estimate memory for {path}: {e}")

        try:
            img = cv2.imread(str(path), cv2.IMREAD_COLOR)
            if img is None:
                raise FocusFuseFileException(f"Could not load image from {path}")

            return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
        except MemoryError as e:
            raise FocusFuseMemoryException(
                f"Insufficient memory to load image {path}: {e}"
            ) from e
        except Exception as e:
            if isinstance(e, (FocusFuseFileException, FocusFuseMemoryException)):
                raise
            raise FocusFuseImageProcessingException(
                f"Image processing failed while loading {path}: {e}"
            ) from e

    @staticmethod
    def save_image(image: np.ndarray, path: Union[str, Path], quality: int = 95) -> None:
        """Save an RGB or single-channel image to path.

        Args:
            image: Image array in RGB format, or a single-channel map
            path: Destination path for the image
            quality: JPEG quality (0-100), ignored for other formats

        Raises:
            FocusFuseFileException: If image cannot be saved
            FocusFuseImageProcessingException: If image processing fails
            FocusFuseDirectoryException: If insufficient disk space
        """
        path = Path(path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise FocusFuseFileException(
                f"Permission denied creating directory for {path}: {e}"
            ) from e
        except OSError as e:
            raise FocusFuseFileException(
                f"Failed to create directory for {path}: {e}"
            ) from e

        if image.dtype != np.uint8:
            image = np.clip(image, 0, 255).astype(np.uint8)

        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

        params = []
        if path.suffix.lower() in JPEG_EXTENSIONS:
            params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]

        try:
            success = cv2.imwrite(str(path), image, params)
            if not success:
                raise FocusFuseFileException(f"Failed to save image to {path}")
        except MemoryError as e:
            raise FocusFuseMemoryException(
                f"Insufficient memory to save image {path}: {e}"
            ) from e
        except OSError as e:
            if "No space left" in str(e):
                raise FocusFuseDirectoryException(
                    f"Insufficient disk space to save image {path}: {e}"
                ) from e
            raise FocusFuseFileException(f"Failed to save image to {path}: {e}") from e
        except Exception as e:
            if isinstance(e, (FocusFuseFileException, FocusFuseMemoryException)):
                raise
            raise FocusFuseImageProcessingException(
                f"Image processing failed while saving {path}: {e}"
            ) from e

    @staticmethod
    def rgb_to_grayscale(image: np.ndarray) -> np.ndarray:
        """Convert RGB image to grayscale, passing single-channel input through."""
        if len(image.shape) == 3:
            return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
        return image

    @staticmethod
    def to_gray_float(image: np.ndarray) -> np.ndarray:
        """Convert an RGB uint8 frame to a float32 intensity map in [0, 1]."""
        gray = ImageUtils.rgb_to_grayscale(image)
        return gray.astype(np.float32) * np.float32(1.0 / 255.0)

    @staticmethod
    def to_float(image: np.ndarray) -> np.ndarray:
        """Convert a uint8 image to float32 in [0, 1]."""
        return image.astype(np.float32) * np.float32(1.0 / 255.0)

    @staticmethod
    def to_uint8(image: np.ndarray) -> np.ndarray:
        """Clamp a float image in [0, 1] and convert it back to uint8."""
        return np.rint(np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)

    @staticmethod
    def resize_image(
        image: np.ndarray, size: tuple[int, int], interpolation: int = cv2.INTER_AREA
    ) -> np.ndarray:
        """Resize image to specified dimensions.

        Args:
            image: Input image array
            size: Target size as (width, height)
            interpolation: Interpolation method

        Returns:
            Resized image array
        """
        return cv2.resize(image, size, interpolation=interpolation)

    @staticmethod
    def gaussian_blur(image: np.ndarray, sigma: float) -> np.ndarray:
        """Gaussian blur with the kernel size derived from sigma."""
        return cv2.GaussianBlur(image, (0, 0), sigma)

    @staticmethod
    def laplacian_filter(
        image: np.ndarray, ddepth: int = cv2.CV_32F, ksize: int = 3
    ) -> np.ndarray:
        """Apply Laplacian filter for edge detection.

        Args:
            image: Input image array
            ddepth: Output image depth
            ksize: Aperture size of the Laplacian kernel

        Returns:
            Laplacian filtered image array
        """
        return cv2.Laplacian(image, ddepth, ksize=ksize)

    @staticmethod
    def sobel_filter(
        image: np.ndarray, dx: int, dy: int, ddepth: int = cv2.CV_32F, ksize: int = 3
    ) -> np.ndarray:
        """Apply Sobel filter for gradient calculation.

        Args:
            image: Input image array
            dx: Order of derivative in x direction
            dy: Order of derivative in y direction
            ddepth: Output image depth
            ksize: Kernel size

        Returns:
            Sobel filtered image array
        """
        return cv2.Sobel(image, ddepth, dx, dy, ksize=ksize)

    @staticmethod
    def pyramid_down(image: np.ndarray) -> np.ndarray:
        """Blur and halve an image (rounding odd sizes up)."""
        return cv2.pyrDown(image)

    @staticmethod
    def pyramid_up(image: np.ndarray, size: tuple[int, int]) -> np.ndarray:
        """Upsample image to an exact target size.

        Args:
            image: Input image array
            size: Target size as (width, height); must be within one pixel of
                twice the input size

        Returns:
            Upsampled image array
        """
        return cv2.pyrUp(image, dstsize=size)

    @staticmethod
    def warp_affine(
        image: np.ndarray,
        matrix: np.ndarray,
        size: tuple[int, int],
        interpolation: int = cv2.INTER_LINEAR,
        border_mode: int = cv2.BORDER_REFLECT,
        border_value: int = 0,
    ) -> np.ndarray:
        """Warp an image with an inverse-mapped 2x3 transform.

        The matrix maps output coordinates to input coordinates, which is the
        convention ``cv2.findTransformECC`` returns its warp in.
        """
        return cv2.warpAffine(
            image,
            matrix,
            size,
            flags=interpolation | cv2.WARP_INVERSE_MAP,
            borderMode=border_mode,
            borderValue=border_value,
        )

    @staticmethod
    def bilateral_filter(
        image: np.ndarray, sigma_color: float, sigma_space: float
    ) -> np.ndarray:
        """Edge-preserving smoothing with the diameter derived from sigma_space."""
        return cv2.bilateralFilter(image, 0, sigma_color, sigma_space)

    @staticmethod
    def ellipse_kernel(size: int) -> np.ndarray:
        """Round structuring element of size x size pixels."""
        return cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size))

    @staticmethod
    def morphology(image: np.ndarray, op: int, kernel: np.ndarray) -> np.ndarray:
        """Apply a morphological operation (cv2.MORPH_OPEN, cv2.MORPH_CLOSE, ...)."""
        return cv2.morphologyEx(image, op, kernel)

    @staticmethod
    def normalize_min_max(
        image: np.ndarray,
        low: float = 0.0,
        high: float = 255.0,
    ) -> np.ndarray:
        """Linearly rescale image values to [low, high] as float32.

        Args:
            image: Input single-channel array
            low: Output minimum
            high: Output maximum

        Returns:
            Rescaled float32 array
        """
        values = image.astype(np.float32)
        vmin = float(values.min())
        vmax = float(values.max())
        if vmax - vmin <= np.finfo(np.float32).eps:
            return np.full(values.shape, low, dtype=np.float32)
        scale = (high - low) / (vmax - vmin)
        return ((values - vmin) * scale + low).astype(np.float32)
