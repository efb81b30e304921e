from dataclasses import dataclass

from ...common.enums import FusionMethod
from ..models.decorators import BlenderConfigDecorator
from .base import BlenderConfig


@BlenderConfigDecorator(FusionMethod.PYRAMID_BLEND)
@dataclass
class PyramidBlendConfig(BlenderConfig):
    """Laplacian pyramid max-energy coefficient selection parameters."""

    # Stop halving once a side would drop below this many pixels
    minimum_pyramid_size: int = 2


@BlenderConfigDecorator(FusionMethod.LABEL_SELECTION)
@dataclass
class LabelSelectionConfig(BlenderConfig):
    """Winner-take-all per-pixel frame selection parameters."""
