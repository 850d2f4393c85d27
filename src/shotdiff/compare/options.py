"""Comparison options shared by the classifier and the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ColorScheme(Enum):
    TWO_TONE = "two-tone"
    RED = "red"


@dataclass(frozen=True)
class CompareOptions:
    """Tolerances and rendering choice for one comparison.

    Attributes:
        threshold: Perceptual colour tolerance in [0, 1]; higher is more tolerant.
        alpha: Alpha-only difference tolerated in [0, 1] of full opacity.
        include_aa: Count anti-aliased pixels as mismatches. When False,
            anti-aliasing detection runs and those pixels are excluded.
        color_scheme: How mismatched pixels are painted in the diff image.
    """

    threshold: float = 0.1
    alpha: float = 0.1
    include_aa: bool = True
    color_scheme: ColorScheme = ColorScheme.TWO_TONE

    def __post_init__(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha must be within [0, 1], got {self.alpha}")
        if not isinstance(self.color_scheme, ColorScheme):
            object.__setattr__(self, "color_scheme", ColorScheme(self.color_scheme))
