"""
Sweep axis generation.

The resolution axis is generated ascending and snapped to the Resolution enum;
the quality axis is generated descending (best quality first is read as "max
CRF first" in the matrix rows). Both use exact round-half-up interpolation and
keep duplicate samples.
"""

from typing import Union

from ..models import AxisSpec, Resolution
from ..utils import InvalidAxisError, round_half_up

ResolutionLike = Union[Resolution, str]


def _check_steps(steps: int) -> None:
    if isinstance(steps, bool) or not isinstance(steps, int):
        raise InvalidAxisError(f"steps must be an integer, got {steps!r}")
    if steps < 1:
        raise InvalidAxisError(f"steps must be at least 1, got {steps}")


def generate_resolutions(
    min_res: ResolutionLike,
    max_res: ResolutionLike,
    steps: int,
) -> list[Resolution]:
    """
    Generate the resolution axis.

    Index i maps to min_index + round(i * (max_index - min_index) / (steps - 1))
    in the canonical resolution list. A single step yields only max_res.

    Args:
        min_res: First resolution of the sweep
        max_res: Last resolution of the sweep
        steps: Number of samples (>= 1)

    Returns:
        Ordered list of resolutions, length == steps

    Raises:
        InvalidAxisError: If steps < 1 or a bound is not a supported resolution
    """
    _check_steps(steps)
    low = Resolution.parse(min_res)
    high = Resolution.parse(max_res)

    if steps == 1:
        return [high]

    ordered = Resolution.ordered()
    min_index = ordered.index(low)
    span = ordered.index(high) - min_index

    return [ordered[min_index + round_half_up(i * span, steps - 1)] for i in range(steps)]


def generate_quality_levels(min_quality: int, max_quality: int, steps: int) -> list[int]:
    """
    Generate the quality (CRF) axis in descending order.

    Index i maps to max - round(i * (max - min) / (steps - 1)). A single step
    yields only max_quality.

    Args:
        min_quality: Lowest quality level (best quality)
        max_quality: Highest quality level (smallest output)
        steps: Number of samples (>= 1)

    Returns:
        List of quality levels, length == steps

    Raises:
        InvalidAxisError: If steps < 1 or a bound is not an integer
    """
    _check_steps(steps)
    for bound in (min_quality, max_quality):
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise InvalidAxisError(f"quality bounds must be integers, got {bound!r}")

    if steps == 1:
        return [max_quality]

    span = max_quality - min_quality
    return [max_quality - round_half_up(i * span, steps - 1) for i in range(steps)]


def generate_resolution_axis(spec: AxisSpec[ResolutionLike]) -> list[Resolution]:
    """Generate the resolution axis from an AxisSpec."""
    return generate_resolutions(spec.minimum, spec.maximum, spec.steps)


def generate_quality_axis(spec: AxisSpec[int]) -> list[int]:
    """Generate the quality axis from an AxisSpec."""
    return generate_quality_levels(spec.minimum, spec.maximum, spec.steps)
