from .enums import AlignmentMode, FusionMethod
from .exceptions import (
    FocusFuseAlignmentException,
    FocusFuseConfigurationException,
    FocusFuseDirectoryException,
    FocusFuseException,
    FocusFuseFileException,
    FocusFuseImageProcessingException,
    FocusFuseMemoryException,
    FocusFuseStackingException,
    FocusFuseValidationException,
)

__all__ = [
    "AlignmentMode",
    "FusionMethod",
    "FocusFuseException",
    "FocusFuseValidationException",
    "FocusFuseAlignmentException",
    "FocusFuseStackingException",
    "FocusFuseFileException",
    "FocusFuseMemoryException",
    "FocusFuseConfigurationException",
    "FocusFuseImageProcessingException",
    "FocusFuseDirectoryException",
]
