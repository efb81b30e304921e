from ....common.enums import AlignmentMode
from ...config.aligner import DirectAlignerConfig
from ...models.decorators import Aligner
from .ecc import EccAligner


@Aligner(AlignmentMode.DIRECT)
class DirectAligner(EccAligner):
    """Align every frame straight against the reference frame."""

    def __init__(self, *, config: DirectAlignerConfig) -> None:
        super().__init__(config=config)

    def alignment_order(
        self, frame_count: int, reference_index: int
    ) -> list[tuple[int, int]]:
        return [(i, reference_index) for i in range(frame_count) if i != reference_index]
