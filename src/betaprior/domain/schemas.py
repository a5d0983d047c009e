from typing import Tuple
from pydantic import BaseModel, Field, model_validator


class CalibrationRequest(BaseModel):
    target_mean: float = Field(gt=0.0, lt=1.0)
    lower_bound: float = Field(ge=0.0, le=1.0)
    upper_bound: float = Field(ge=0.0, le=1.0)
    target_coverage: float = Field(default=0.95, gt=0.0, lt=1.0)
    max_equivalent_sample_size: int = Field(default=300, gt=0)
    max_shape_a: int = Field(default=100, gt=0)

    model_config = {"frozen": True}

    @model_validator(mode='after')
    def check_interval(self) -> 'CalibrationRequest':
        if self.lower_bound >= self.upper_bound:
            raise ValueError(
                f"lower_bound ({self.lower_bound}) must be smaller than upper_bound ({self.upper_bound})"
            )
        return self

    @property
    def effective_max_shape_a(self) -> int:
        # round() is half-to-even, matching np.rint in the search
        return int(round(min(self.target_mean * self.max_equivalent_sample_size, self.max_shape_a)))


class CandidateEvaluation(BaseModel):
    shape_a: int = Field(ge=1)
    shape_b: int = Field(ge=1)
    coverage: float = Field(ge=0.0, le=1.0)
    squared_deviation: float = Field(ge=0.0)

    model_config = {"frozen": True}

    @property
    def equivalent_sample_size(self) -> int:
        return self.shape_a + self.shape_b


class CalibrationResult(BaseModel):
    request: CalibrationRequest
    best_shape_a: int = Field(ge=1)
    best_shape_b: int = Field(ge=1)
    best_coverage: float
    minimal_deviation: float
    is_minimum_unique: bool
    evaluations: Tuple[CandidateEvaluation, ...]
    skipped_shape_a: Tuple[int, ...] = ()

    model_config = {"frozen": True}

    @property
    def equivalent_sample_size(self) -> int:
        """Pseudo-trials of the selected prior (a + b)."""
        return self.best_shape_a + self.best_shape_b
