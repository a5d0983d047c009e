import numpy as np
from scipy import stats
from typing import Tuple, Dict, Any


def derive_shape_b(shape_a: np.ndarray, mean: float) -> np.ndarray:
    """
    Second shape parameter that keeps the prior mean at `mean`:
        b = round(a * (1 - m) / m)
    Rounding is half-to-even. Values below 1 mark degenerate candidates.
    """
    return np.rint(shape_a * (1.0 - mean) / mean).astype(int)


def interval_coverage(
    lower: float, upper: float,
    shape_a: np.ndarray, shape_b: np.ndarray
) -> np.ndarray:
    """Beta probability mass in [lower, upper] for each (a, b) pair."""
    coverage = stats.beta.cdf(upper, shape_a, shape_b) - stats.beta.cdf(lower, shape_a, shape_b)
    # CDF differences can drift a few ulps outside [0, 1]
    return np.clip(coverage, 0.0, 1.0)


def squared_deviation(target: float, coverage: np.ndarray) -> np.ndarray:
    return (target - coverage) ** 2


def select_minimum(deviation: np.ndarray) -> Tuple[int, bool]:
    """
    Index of the smallest deviation and whether it is unique.

    np.argmin returns the first occurrence, so ties resolve to the smallest
    shape_a when `deviation` is ordered by ascending shape_a.
    """
    if deviation.size == 0:
        raise ValueError("No candidates to select from.")

    idx = int(np.argmin(deviation))
    others = np.delete(deviation, idx)
    if others.size == 0:
        return idx, True
    return idx, bool(np.min(others) != deviation[idx])


def prior_summary(shape_a: float, shape_b: float, coverage: float = 0.95) -> Dict[str, Any]:
    """Moments and equal-tailed credible interval of Beta(shape_a, shape_b)."""
    if shape_a <= 0 or shape_b <= 0:
        raise ValueError("Shape parameters must be positive.")
    if not 0.0 < coverage < 1.0:
        raise ValueError("coverage must lie in (0, 1).")

    total = shape_a + shape_b
    mean = shape_a / total
    variance = (shape_a * shape_b) / (total ** 2 * (total + 1.0))

    if shape_a > 1 and shape_b > 1:
        mode = (shape_a - 1.0) / (total - 2.0)
    else:
        mode = None

    tail = (1.0 - coverage) / 2.0
    lower, upper = stats.beta.ppf([tail, 1.0 - tail], shape_a, shape_b)

    return {
        "mean": float(mean),
        "variance": float(variance),
        "std": float(np.sqrt(variance)),
        "mode": mode,
        "equivalent_sample_size": float(total),
        "interval_coverage": float(coverage),
        "interval_lower": float(lower),
        "interval_upper": float(upper),
    }
