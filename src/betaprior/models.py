from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SearchLimits:
    """
    Bounds of the integer shape grid.

    max_equivalent_sample_size caps a + b through the prior mean
    (a <= m * max_equivalent_sample_size); max_shape_a caps a directly.
    """
    max_equivalent_sample_size: int = 300
    max_shape_a: int = 100


@dataclass(frozen=True)
class CalibrationConfig:
    method: str = "grid"
    target_coverage: float = 0.95
    limits: SearchLimits = field(default_factory=SearchLimits)


DEFAULT_CONFIG = CalibrationConfig()
