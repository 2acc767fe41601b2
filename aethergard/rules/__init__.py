"""Rules layer: pattern detection, resonance and win checking."""

from .patterns import (
    classify_bent_triple,
    convertible_positions,
    detect_bent_triples,
    detect_cores,
    detect_cores_touching,
    is_bent_triple,
)
from .resonance import activate_resonance, propagate_resonance
from .victory import check_win, find_winning_line

__all__ = [
    "activate_resonance",
    "check_win",
    "classify_bent_triple",
    "convertible_positions",
    "detect_bent_triples",
    "detect_cores",
    "detect_cores_touching",
    "find_winning_line",
    "is_bent_triple",
    "propagate_resonance",
]
