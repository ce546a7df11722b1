"""Bisection over a black-box loan simulation.

Both solvers look for the point where the balance left at the end of the
term crosses zero: the payment solver along the payment axis, the principal
solver along the principal axis. They differ only in their bounds, their
tolerance and in which way the balance moves as the searched quantity grows,
so the search itself lives here once.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, NamedTuple, Optional

from .constants import MAX_SOLVER_ITERATIONS

logger = logging.getLogger(__name__)


class Probe(NamedTuple):
    """Outcome of evaluating the objective at one candidate.

    ``residual`` is the signed balance at the horizon: positive when debt is
    left over, negative when the payments overshoot it. ``payload`` is handed
    back unchanged once the residual falls within tolerance.
    """

    residual: Decimal
    payload: Any


class Root(NamedTuple):
    value: Decimal
    payload: Any
    iterations: int


def bisect(
    evaluate: Callable[[Decimal], Optional[Probe]],
    low: Decimal,
    high: Decimal,
    tolerance: Decimal,
    residual_falls_as_value_rises: bool,
    max_iterations: int = MAX_SOLVER_ITERATIONS,
) -> Optional[Root]:
    """Search ``[low, high]`` for a candidate whose residual is near zero.

    Parameters
    ----------
    evaluate: Callable
        Called with each midpoint. Returns a ``Probe`` or ``None`` when the
        candidate cannot clear the debt at all; ``None`` is read as "debt
        remains".
    low, high: Decimal
        Initial bracket.
    tolerance: Decimal
        A probe with ``abs(residual) < tolerance`` is accepted.
    residual_falls_as_value_rises: bool
        ``True`` when a larger candidate leaves less debt (a larger payment),
        ``False`` when it leaves more (a larger principal).
    max_iterations: int
        Evaluation budget.

    Returns
    -------
    Optional[Root]
        The accepted candidate with its payload, or ``None`` if the budget ran
        out first.
    """
    for iteration in range(1, max_iterations + 1):
        mid = (low + high) / 2
        probe = evaluate(mid)

        if probe is not None and abs(probe.residual) < tolerance:
            logger.debug("bisect accepted %s after %d iterations", mid, iteration)
            return Root(value=mid, payload=probe.payload, iterations=iteration)

        debt_remains = probe is None or probe.residual > 0
        # Move towards the side that shrinks the debt when some remains and
        # towards the side that grows it when the payments overshoot.
        if debt_remains == residual_falls_as_value_rises:
            low = mid
        else:
            high = mid
        logger.debug(
            "bisect iteration %d: candidate=%s residual=%s bracket=[%s, %s]",
            iteration,
            mid,
            "n/a" if probe is None else probe.residual,
            low,
            high,
        )

    logger.debug("bisect gave up after %d iterations in [%s, %s]", max_iterations, low, high)
    return None
