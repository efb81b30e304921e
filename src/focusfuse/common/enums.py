from enum import Enum


class FusionMethod(Enum):
    PYRAMID_BLEND = "pyramid_blend"
    LABEL_SELECTION = "label_selection"


class AlignmentMode(Enum):
    CHAINED = "chained"
    DIRECT = "direct"
