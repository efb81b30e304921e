from ....common.enums import AlignmentMode
from ...config.aligner import ChainedAlignerConfig
from ...models.decorators import Aligner
from .ecc import EccAligner


@Aligner(AlignmentMode.CHAINED)
class ChainedAligner(EccAligner):
    """Align each frame to its already aligned neighbour closer to the reference."""

    def __init__(self, *, config: ChainedAlignerConfig) -> None:
        super().__init__(config=config)

    def alignment_order(
        self, frame_count: int, reference_index: int
    ) -> list[tuple[int, int]]:
        below = [(i, i + 1) for i in range(reference_index - 1, -1, -1)]
        above = [(i, i - 1) for i in range(reference_index + 1, frame_count)]
        return below + above
