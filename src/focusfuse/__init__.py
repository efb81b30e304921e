"""focusfuse - focus stacking with ECC alignment, pyramid fusion and depth maps."""

from .internal.config.depth import ViewPoint
from .internal.models.validation import StackingOptions
from .stack import StackResult, stack_frames, stack_images

__version__ = "0.1.0"
__all__ = [
    "StackResult",
    "StackingOptions",
    "ViewPoint",
    "stack_frames",
    "stack_images",
]
