"""Registry for auto-discovered aligners and blenders."""

from ...common.enums import AlignmentMode, FusionMethod
from ..config.base import AlignerConfig, BlenderConfig
from .align.base import Aligner as AlignerBase
from .stack.base import Blender as BlenderBase

# Registry dictionaries for auto-discovered components
_aligner_map: dict[AlignmentMode, type[AlignerBase]] = {}
_blenders_map: dict[FusionMethod, type[BlenderBase]] = {}
_aligner_config_map: dict[AlignmentMode, type[AlignerConfig]] = {}
_blender_config_map: dict[FusionMethod, type[BlenderConfig]] = {}


def register_aligner(
    choice: AlignmentMode, cls: type[AlignerBase]
) -> type[AlignerBase]:
    """Register an aligner class with its alignment mode."""
    _aligner_map[choice] = cls
    return cls


def register_aligner_config(
    choice: AlignmentMode, cls: type[AlignerConfig]
) -> type[AlignerConfig]:
    """Register an aligner config class with its alignment mode."""
    _aligner_config_map[choice] = cls
    return cls


def register_blender(
    choice: FusionMethod, cls: type[BlenderBase]
) -> type[BlenderBase]:
    """Register a blender class with its fusion method."""
    _blenders_map[choice] = cls
    return cls


def register_blender_config(
    choice: FusionMethod, cls: type[BlenderConfig]
) -> type[BlenderConfig]:
    """Register a blender config class with its fusion method."""
    _blender_config_map[choice] = cls
    return cls
