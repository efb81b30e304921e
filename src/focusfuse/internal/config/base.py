"""Base configuration classes for aligners, blenders and the depth/preview stages."""

from dataclasses import dataclass
from typing import Optional

from ..models.align.base import Aligner
from ..models.depth import DepthMapDeriver
from ..models.focus import FocusScorer
from ..models.preview import ReliefPreviewRenderer
from ..models.stack.base import Blender


@dataclass
class FocusStackingConfig:
    """Complete focus stacking configuration."""

    aligner: Optional[Aligner]
    blender: Blender
    focus_scorer: FocusScorer
    depth_deriver: DepthMapDeriver
    preview_renderer: Optional[ReliefPreviewRenderer] = None


@dataclass
class AlignerConfig:
    """Base config class for aligners."""

    white_balance: bool = True
    contrast: bool = True
    transform: bool = True
    crop: bool = True

    # Largest side used for the ECC fit; 0 fits at full resolution
    max_resolution: int = 2048

    max_iterations: int = 150
    epsilon: float = 1e-6
    gauss_filter_size: int = 5


@dataclass
class BlenderConfig:
    """Base config class for blenders."""

    levels: int = 5
    consistency_level: int = 2
    denoise_level: float = 1.0

    # Focus response
    laplacian_kernel_size: int = 3
    response_blur_sigma: float = 1.2

    # Label map opening/closing kernel for consistency levels 1 and 2
    consistency_kernel_sizes: tuple[int, int] = (3, 5)

    denoise_sigma_base: float = 5.0
    denoise_sigma_per_level: float = 5.0
