import abc
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .crop import Rectangle


@dataclass
class AlignmentResult:
    """Aligned frames with their validity masks and the crop that was applied."""

    frames: list[np.ndarray]
    masks: list[np.ndarray] = field(default_factory=list)
    crop: Optional[Rectangle] = None


class Aligner(abc.ABC):
    @abc.abstractmethod
    def align(self, frames: list[np.ndarray], reference_index: int) -> AlignmentResult:
        """Align every frame of a stack to the reference frame.

        Args:
            frames: RGB uint8 frames of identical size, in focus order
            reference_index: Index of the frame that stays untouched

        Returns:
            AlignmentResult holding new arrays; the input frames are not modified
        """
        raise NotImplementedError
