from dataclasses import dataclass

from ...common.enums import AlignmentMode
from ..models.decorators import AlignerConfigDecorator
from .base import AlignerConfig


@AlignerConfigDecorator(AlignmentMode.CHAINED)
@dataclass
class ChainedAlignerConfig(AlignerConfig):
    """ECC parameters for neighbour-to-neighbour alignment."""

    max_iterations: int = 150
    epsilon: float = 1e-6


@AlignerConfigDecorator(AlignmentMode.DIRECT)
@dataclass
class DirectAlignerConfig(AlignerConfig):
    """ECC parameters for aligning every frame against the reference."""

    max_iterations: int = 100
    epsilon: float = 1e-5
