import logging

import numpy as np

from ....common.enums import FusionMethod
from ...config.blender import LabelSelectionConfig
from ...models.decorators import Blender
from .base import Blender as BlenderBase
from .base import FusionResult

logger = logging.getLogger(__name__)


@Blender(FusionMethod.LABEL_SELECTION)
class LabelSelectionBlender(BlenderBase):
    def __init__(self, *, config: LabelSelectionConfig) -> None:
        self.config = config

    def blend(
        self, frames: list[np.ndarray], responses: list[np.ndarray]
    ) -> FusionResult:
        """Copy every pixel from the frame that is sharpest there."""
        logger.info(f"Starting label selection merge with {len(frames)} frames")

        labels, best_response = self.select_labels(responses)
        composite = self.assemble(frames, labels)

        logger.info("Label selection merge completed successfully")
        return FusionResult(
            composite=composite, labels=labels, best_response=best_response
        )

    @staticmethod
    def assemble(frames: list[np.ndarray], labels: np.ndarray) -> np.ndarray:
        composite = np.zeros_like(frames[0])
        for index, frame in enumerate(frames):
            chosen = labels == index
            composite[chosen] = frame[chosen]
        return composite
