import json
import logging
import warnings
from datetime import datetime
from abc import ABC, abstractmethod
from typing import Optional
import numpy as np
import pandas as pd
from pydantic import ValidationError
from betaprior.domain.exceptions import InvalidRequest, NonUniqueMinimumWarning
from betaprior.domain.schemas import CalibrationRequest, CandidateEvaluation, CalibrationResult
from betaprior.core.math_engine import derive_shape_b, interval_coverage, squared_deviation, select_minimum
from betaprior.models import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

EVALUATION_COLUMNS = ["shape_a", "shape_b", "equivalent_sample_size", "coverage", "squared_deviation"]


class PriorCalibration(ABC):
    @abstractmethod
    def fit(self, request: CalibrationRequest, warn_stacklevel: int = 2) -> CalibrationResult:
        pass

    @abstractmethod
    def evaluations_frame(self) -> pd.DataFrame:
        pass

    @abstractmethod
    def save(self) -> str:
        """Serializes the fitted calibration to a JSON string."""
        pass

    @classmethod
    @abstractmethod
    def load(cls, json_str: str) -> 'PriorCalibration':
        """Deserializes a JSON string into a fitted calibration."""
        pass


class IntegerGridBeta(PriorCalibration):
    method = "integer_grid"

    def __init__(self):
        self.result: Optional[CalibrationResult] = None

    def fit(self, request: CalibrationRequest, warn_stacklevel: int = 2) -> CalibrationResult:
        """
        Brute-force search over integer shape_a in [1, effective_max_shape_a].

        For each a the second parameter is b = round(a * (1 - m) / m), the
        Beta mass inside [lower_bound, upper_bound] is compared against the
        target coverage, and the candidate with the smallest squared
        deviation wins (first occurrence, i.e. smallest a, on ties).

        A non-unique minimum is reported through warnings.warn only, with
        `warn_stacklevel` frames so it points at the caller of fit().
        """
        m = request.target_mean
        max_a = request.effective_max_shape_a
        if max_a < 1:
            raise InvalidRequest(
                f"Empty search domain: round(min({m} * {request.max_equivalent_sample_size}, "
                f"{request.max_shape_a})) = {max_a}"
            )

        if not request.lower_bound < m < request.upper_bound:
            logger.warning(
                "Target mean %.4f lies outside the interval [%.4f, %.4f]",
                m, request.lower_bound, request.upper_bound,
            )

        shape_a = np.arange(1, max_a + 1)
        shape_b = derive_shape_b(shape_a, m)

        degenerate = shape_b < 1
        skipped = tuple(int(a) for a in shape_a[degenerate])
        if skipped:
            logger.debug("Skipping %d degenerate candidates (b < 1): a=%s", len(skipped), list(skipped))

        shape_a = shape_a[~degenerate]
        shape_b = shape_b[~degenerate]
        if shape_a.size == 0:
            raise InvalidRequest(
                f"Every candidate in a=1..{max_a} yields shape_b < 1 for target_mean={m}"
            )

        coverage = interval_coverage(request.lower_bound, request.upper_bound, shape_a, shape_b)
        deviation = squared_deviation(request.target_coverage, coverage)
        logger.debug("Evaluated %d candidates for mean=%.4f", shape_a.size, m)

        idx, unique = select_minimum(deviation)

        evaluations = tuple(
            CandidateEvaluation(
                shape_a=int(a), shape_b=int(b),
                coverage=float(c), squared_deviation=float(d),
            )
            for a, b, c, d in zip(shape_a, shape_b, coverage, deviation)
        )

        if not unique:
            tied = [e.shape_a for e in evaluations if e.squared_deviation == deviation[idx]]
            message = (
                f"Minimal squared deviation {deviation[idx]:.3e} is shared by shape_a={tied}; "
                f"keeping the smallest (a={int(shape_a[idx])})."
            )
            warnings.warn(message, NonUniqueMinimumWarning, stacklevel=warn_stacklevel)

        self.result = CalibrationResult(
            request=request,
            best_shape_a=int(shape_a[idx]),
            best_shape_b=int(shape_b[idx]),
            best_coverage=float(coverage[idx]),
            minimal_deviation=float(deviation[idx]),
            is_minimum_unique=unique,
            evaluations=evaluations,
            skipped_shape_a=skipped,
        )
        logger.info(
            "Selected Beta(%d, %d): coverage=%.6f, deviation=%.3e",
            self.result.best_shape_a, self.result.best_shape_b,
            self.result.best_coverage, self.result.minimal_deviation,
        )
        return self.result

    def evaluations_frame(self) -> pd.DataFrame:
        if self.result is None:
            raise RuntimeError("The calibration has not been fitted.")
        return evaluations_to_dataframe(self.result)

    def save(self) -> str:
        if self.result is None:
            raise RuntimeError("The calibration has not been fitted.")

        data = {
            "method": self.method,
            "timestamp": datetime.now().isoformat(),
            "result": self.result.model_dump(mode="json"),
        }
        return json.dumps(data, indent=4)

    @classmethod
    def load(cls, json_str: str) -> 'IntegerGridBeta':
        data = json.loads(json_str)
        if not isinstance(data, dict):
            raise ValueError("Malformed betaprior file: expected a JSON object.")
        if data.get("method") != cls.method:
            raise ValueError(f"Invalid method in betaprior file: {data.get('method')}")

        if not data.get("result"):
            raise ValueError("Missing result in the loaded calibration.")

        instance = cls()
        try:
            instance.result = CalibrationResult.model_validate(data["result"])
        except ValidationError as e:
            raise ValueError(f"Malformed result in the loaded calibration: {e}") from e
        return instance


def evaluations_to_dataframe(result: CalibrationResult) -> pd.DataFrame:
    """Audit table of every evaluated candidate, ordered by shape_a."""
    return pd.DataFrame(
        [
            {
                "shape_a": e.shape_a,
                "shape_b": e.shape_b,
                "equivalent_sample_size": e.equivalent_sample_size,
                "coverage": e.coverage,
                "squared_deviation": e.squared_deviation,
            }
            for e in result.evaluations
        ],
        columns=EVALUATION_COLUMNS,
    )


class CalibrationFactory:
    @staticmethod
    def create(method: str) -> PriorCalibration:
        if method == "default" or method == "grid":
            return IntegerGridBeta()
        else:
            raise ValueError(f"Unknown calibration method: {method}")


def build_request(
    m: float, l: float, u: float,
    p: float = DEFAULT_CONFIG.target_coverage,
    max_ess: int = DEFAULT_CONFIG.limits.max_equivalent_sample_size,
    max_a: int = DEFAULT_CONFIG.limits.max_shape_a,
) -> CalibrationRequest:
    try:
        return CalibrationRequest(
            target_mean=m,
            lower_bound=l,
            upper_bound=u,
            target_coverage=p,
            max_equivalent_sample_size=max_ess,
            max_shape_a=max_a,
        )
    except ValidationError as e:
        raise InvalidRequest(str(e)) from e


def calibrate(
    m: float, l: float, u: float,
    p: float = DEFAULT_CONFIG.target_coverage,
    max_ess: int = DEFAULT_CONFIG.limits.max_equivalent_sample_size,
    max_a: int = DEFAULT_CONFIG.limits.max_shape_a,
    method: str = DEFAULT_CONFIG.method,
) -> CalibrationResult:
    """
    Finds integer Beta shape parameters whose mass inside [l, u] best
    matches p while keeping the prior mean at m.

    Raises InvalidRequest for malformed inputs or an empty search domain.
    A non-unique minimum is reported on the result and through a
    NonUniqueMinimumWarning, never as an error.
    """
    request = build_request(m, l, u, p=p, max_ess=max_ess, max_a=max_a)
    return CalibrationFactory.create(method).fit(request, warn_stacklevel=3)
