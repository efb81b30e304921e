"""Resource monitoring utilities for memory and disk space management."""

import gc
import logging
import shutil
from pathlib import Path
from typing import Optional, Union

import psutil

from ...common.exceptions import (
    FocusFuseDirectoryException,
    FocusFuseMemoryException,
)

logger = logging.getLogger(__name__)


class ResourceMonitor:
    """Monitor system resources and provide early warnings for potential issues."""

    MEMORY_WARNING_THRESHOLD = 0.85
    MEMORY_CRITICAL_THRESHOLD = 0.95
    MIN_FREE_DISK_GB = 0.5

    # float32 single-channel maps per frame besides the pyramid: gray, response
    FLOAT_MAPS_PER_FRAME = 2

    @staticmethod
    def get_memory_info() -> dict:
        """Get detailed memory information."""
        memory = psutil.virtual_memory()
        return {
            "total_gb": memory.total / (1024**3),
            "available_gb": memory.available / (1024**3),
            "used_gb": memory.used / (1024**3),
            "percent": memory.percent,
        }

    @staticmethod
    def get_disk_usage(path: Union[str, Path]) -> dict:
        """Get disk usage information for a specific path."""
        usage = shutil.disk_usage(Path(path))
        return {
            "total_gb": usage.total / (1024**3),
            "used_gb": usage.used / (1024**3),
            "free_gb": usage.free / (1024**3),
            "percent": (usage.used / usage.total) * 100,
        }

    @classmethod
    def check_memory_availability(
        cls,
        estimated_usage_gb: Optional[float] = None,
        warning_threshold: Optional[float] = None,
        critical_threshold: Optional[float] = None,
    ) -> None:
        """Check if sufficient memory is available.

        Args:
            estimated_usage_gb: Estimated additional memory needed in GB
            warning_threshold: Memory usage threshold for warnings (0.0-1.0)
            critical_threshold: Memory usage threshold for critical errors (0.0-1.0)

        Raises:
            FocusFuseMemoryException: If memory is critically low
        """
        warning_threshold = warning_threshold or cls.MEMORY_WARNING_THRESHOLD
        critical_threshold = critical_threshold or cls.MEMORY_CRITICAL_THRESHOLD

        memory_info = cls.get_memory_info()
        current_usage = memory_info["percent"] / 100.0

        if estimated_usage_gb:
            projected_usage = current_usage + estimated_usage_gb / memory_info["total_gb"]
            if projected_usage > critical_threshold:
                raise FocusFuseMemoryException(
                    f"Projected memory usage ({projected_usage:.1%}) would exceed "
                    f"critical threshold ({critical_threshold:.1%}). "
                    f"Available: {memory_info['available_gb']:.1f}GB, "
                    f"Estimated needed: {estimated_usage_gb:.1f}GB"
                )

        if current_usage > critical_threshold:
            raise FocusFuseMemoryException(
                f"Memory usage ({current_usage:.1%}) exceeds critical threshold "
                f"({critical_threshold:.1%}). Available: {memory_info['available_gb']:.1f}GB"
            )
        elif current_usage > warning_threshold:
            logger.warning(
                f"Memory usage ({current_usage:.1%}) is high. "
                f"Available: {memory_info['available_gb']:.1f}GB"
            )

    @classmethod
    def check_disk_space(
        cls,
        path: Union[str, Path],
        estimated_usage_gb: Optional[float] = None,
        min_free_gb: Optional[float] = None,
    ) -> None:
        """Check if sufficient disk space is available at path.

        Raises:
            FocusFuseDirectoryException: If free space is below the minimum or
                below the estimated need
        """
        min_free_gb = min_free_gb or cls.MIN_FREE_DISK_GB
        free_gb = cls.get_disk_usage(path)["free_gb"]

        if free_gb < min_free_gb:
            raise FocusFuseDirectoryException(
                f"Insufficient free disk space: {free_gb:.1f}GB available, "
                f"minimum required: {min_free_gb:.1f}GB"
            )
        if estimated_usage_gb and free_gb < estimated_usage_gb:
            raise FocusFuseDirectoryException(
                f"Insufficient free disk space: {free_gb:.1f}GB available, "
                f"estimated needed: {estimated_usage_gb:.1f}GB"
            )

    @classmethod
    def estimate_stack_memory_usage(
        cls,
        width: int,
        height: int,
        frame_count: int,
        channels: int = 3,
        pyramid_levels: int = 5,
    ) -> float:
        """Estimate peak memory for fusing a stack, in GB.

        Counts the uint8 frames, an aligned copy of them, and the float32
        working set for each frame: gray map, response map and a colour
        pyramid whose level k holds a quarter of the pixels of level k - 1.
        """
        pixels = width * height
        pyramid_factor = sum(0.25**level for level in range(max(0, pyramid_levels) + 1))
        uint8_bytes = 2 * pixels * channels
        float_bytes = 4 * pixels * (cls.FLOAT_MAPS_PER_FRAME + channels * pyramid_factor)
        return frame_count * (uint8_bytes + float_bytes) / (1024**3)

    @classmethod
    def force_garbage_collection(cls) -> dict:
        """Force garbage collection and return memory info."""
        gc.collect()
        return cls.get_memory_info()

    @classmethod
    def log_resource_status(cls, context: str = "") -> None:
        """Log current resource status."""
        memory_info = cls.get_memory_info()
        logger.info(
            f"{context} - Memory: {memory_info['used_gb']:.1f}GB/{memory_info['total_gb']:.1f}GB "
            f"({memory_info['percent']:.1f}%), Available: {memory_info['available_gb']:.1f}GB"
        )


def check_resources_before_processing(frames: list, levels: int = 5) -> None:
    """Check memory headroom for fusing an in-memory stack.

    Args:
        frames: Frames about to be processed (all the same size)
        levels: Pyramid detail levels the blender will build

    Raises:
        FocusFuseMemoryException: If memory is insufficient
    """
    logger.info("Performing resource availability checks...")

    if frames:
        height, width = frames[0].shape[:2]
        channels = frames[0].shape[2] if frames[0].ndim == 3 else 1
        estimated_gb = ResourceMonitor.estimate_stack_memory_usage(
            width, height, len(frames), channels, levels
        )
        logger.info(
            f"Estimated working set for {len(frames)} frames of {width}x{height} "
            f"({levels} pyramid levels): {estimated_gb:.2f}GB"
        )
        ResourceMonitor.check_memory_availability(estimated_gb)

    ResourceMonitor.log_resource_status("Before processing")
    logger.info("Resource checks completed successfully")
