"""
Bisection Root Finder
=====================
Plain interval-halving search for a zero of a continuous scalar function.
Convergence is linear (one bit per iteration); there are no secant or
inverse-quadratic steps.
"""

import logging
from typing import Callable

from .results import Ok, Err, Failure, Result

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-5
DEFAULT_MAX_ITER = 100


def bisect(f: Callable[[float], float], a: float, b: float,
           tol: float = DEFAULT_TOLERANCE,
           max_iter: int = DEFAULT_MAX_ITER) -> Result[float]:
    """
    Find t in [a, b] with f(t) ≈ 0.

    Returns ``Err(NO_ROOT_BRACKETED)`` when f(a) and f(b) share a sign.
    Stops when |f(mid)| < tol or the half-width drops below tol. If
    ``max_iter`` runs out first, the midpoint of the last bracket is
    returned as a best-effort estimate.
    """
    if tol <= 0:
        raise ValueError(f"tol must be positive, got {tol}")
    if a > b:
        a, b = b, a

    fa = f(a)
    fb = f(b)

    if fa * fb > 0:
        logger.debug("no sign change on [%g, %g]: f(a)=%g f(b)=%g", a, b, fa, fb)
        return Err(Failure.NO_ROOT_BRACKETED, f"f({a:g}) and f({b:g}) share a sign")
    if fa == 0:
        return Ok(a)
    if fb == 0:
        return Ok(b)

    for _ in range(max_iter):
        c = (a + b) / 2
        fc = f(c)

        if abs(fc) < tol or (b - a) / 2 < tol:
            return Ok(c)

        if fa * fc < 0:
            b = c
            fb = fc
        else:
            a = c
            fa = fc

    logger.debug("bisection hit max_iter=%d, returning midpoint", max_iter)
    return Ok((a + b) / 2)
