class FocusFuseException(Exception):
    """Base exception for focusfuse."""

    pass


class FocusFuseValidationException(FocusFuseException):
    """Exception raised when a validation error occurs."""

    pass


class FocusFuseAlignmentException(FocusFuseException):
    """Exception raised when frame registration fails."""

    pass


class FocusFuseStackingException(FocusFuseException):
    """Exception raised when fusion or depth derivation fails."""

    pass


class FocusFuseFileException(FocusFuseException):
    """Exception raised when file operations fail."""

    pass


class FocusFuseMemoryException(FocusFuseException):
    """Exception raised when memory or resource limits are exceeded."""

    pass


class FocusFuseConfigurationException(FocusFuseException):
    """Exception raised when configuration parameters are invalid."""

    pass


class FocusFuseImageProcessingException(FocusFuseException):
    """Exception raised when image processing operations fail."""

    pass


class FocusFuseDirectoryException(FocusFuseException):
    """Exception raised when directory operations fail."""

    pass
