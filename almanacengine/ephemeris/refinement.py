"""Root-finding and extremum helpers for refining event timestamps.

The routines operate on any scalar function of a Julian Date and know
nothing about astronomy; the visibility engine composes them.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Tuple

__all__ = [
    "NonConvergenceError",
    "RefineResult",
    "bisection",
    "bracket_root",
    "false_position",
    "golden_section_maximum",
    "golden_section_minimum",
    "parabolic_vertex_offset",
    "refine_root",
]

_GOLDEN_R = 0.61803399
_GOLDEN_C = 1.0 - _GOLDEN_R


class NonConvergenceError(RuntimeError):
    """Raised when an iterative computation exhausts its iteration cap."""

    def __init__(
        self,
        message: str,
        *,
        iterations: int,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.context = dict(context or {})


@dataclass(frozen=True, slots=True)
class RefineResult:
    """Result metadata returned by the bracketing root finders.

    Attributes
    ----------
    root:
        Best estimate of the root (Julian Date).
    residual:
        Function value at ``root``.
    iterations:
        Number of iterations executed across all methods.
    method:
        Textual description of the algorithm(s) used (e.g.
        ``"false_position+bisection"``).
    status:
        ``"ok"`` when the residual tolerance was met, otherwise ``"max_iter"``
        or ``"bad_bracket"`` to indicate why no root was accepted.
    """

    root: float
    residual: float
    iterations: int
    method: str
    status: str

    @property
    def converged(self) -> bool:
        return self.status == "ok"


def bracket_root(
    f: Callable[[float], float], t0_jd: float, t1_jd: float
) -> Tuple[float, float]:
    """Return a bracket ``(t_lo, t_hi)`` ensuring opposite signs.

    Raises
    ------
    ValueError
        If ``f`` evaluated at both endpoints yields the same sign and neither
        endpoint is already a root.
    """

    f0 = f(t0_jd)
    if f0 == 0.0:
        return (t0_jd, t0_jd)
    f1 = f(t1_jd)
    if f1 == 0.0:
        return (t1_jd, t1_jd)
    if f0 * f1 > 0.0:
        raise ValueError("bad_bracket: function has same sign at bracket ends")
    return (t0_jd, t1_jd)


def _opposite(a: float, b: float) -> bool:
    return (a < 0.0 < b) or (b < 0.0 < a)


def false_position(
    f: Callable[[float], float],
    t_lo: float,
    t_hi: float,
    *,
    tolerance: float,
    max_iter: int = 20,
) -> RefineResult:
    """Regula falsi on ``[t_lo, t_hi]`` until ``|f| < tolerance``."""

    f_lo = f(t_lo)
    f_hi = f(t_hi)
    t_new = 0.5 * (t_lo + t_hi)
    f_new = f_lo
    for iteration in range(1, max_iter + 1):
        denom = f_hi - f_lo
        if denom == 0.0:
            break
        t_new = (t_lo * f_hi - t_hi * f_lo) / denom
        f_new = f(t_new)
        if abs(f_new) < tolerance:
            return RefineResult(t_new, f_new, iteration, "false_position", "ok")
        if _opposite(f_lo, f_new):
            t_hi, f_hi = t_new, f_new
        else:
            t_lo, f_lo = t_new, f_new
    else:
        iteration = max_iter
    return RefineResult(t_new, f_new, iteration, "false_position", "max_iter")


def bisection(
    f: Callable[[float], float],
    t_lo: float,
    t_hi: float,
    *,
    tolerance: float,
    max_iter: int = 20,
) -> RefineResult:
    """Interval halving on ``[t_lo, t_hi]`` until ``|f| < tolerance``."""

    f_lo = f(t_lo)
    t_mid = 0.5 * (t_lo + t_hi)
    f_mid = f_lo
    for iteration in range(1, max_iter + 1):
        t_mid = 0.5 * (t_lo + t_hi)
        f_mid = f(t_mid)
        if abs(f_mid) < tolerance:
            return RefineResult(t_mid, f_mid, iteration, "bisection", "ok")
        if _opposite(f_lo, f_mid):
            t_hi = t_mid
        else:
            t_lo, f_lo = t_mid, f_mid
    return RefineResult(t_mid, f_mid, max_iter, "bisection", "max_iter")


def refine_root(
    f: Callable[[float], float],
    t_lo_jd: float,
    t_hi_jd: float,
    *,
    tolerance: float,
    max_false_position: int = 20,
    max_bisection: int = 20,
) -> RefineResult:
    """Refine a root of ``f`` within ``[t_lo_jd, t_hi_jd]``.

    False position runs first; when it fails to bring the residual under
    ``tolerance`` the search restarts from the original bracket with
    bisection.  The returned status is ``"max_iter"`` only when both methods
    were exhausted.
    """

    try:
        t_lo, t_hi = bracket_root(f, t_lo_jd, t_hi_jd)
    except ValueError:
        mid = 0.5 * (t_lo_jd + t_hi_jd)
        return RefineResult(mid, f(mid), 0, "none", "bad_bracket")
    if t_lo == t_hi:
        return RefineResult(t_lo, 0.0, 0, "bracket", "ok")

    first = false_position(f, t_lo, t_hi, tolerance=tolerance, max_iter=max_false_position)
    if first.converged:
        return first
    second = bisection(f, t_lo, t_hi, tolerance=tolerance, max_iter=max_bisection)
    return RefineResult(
        second.root,
        second.residual,
        first.iterations + second.iterations,
        "false_position+bisection",
        second.status,
    )


def parabolic_vertex_offset(
    f_minus: float, f_zero: float, f_plus: float, h: float
) -> float:
    """Return the offset from the centre sample to the vertex of a parabola.

    The parabola passes through ``(-h, f_minus)``, ``(0, f_zero)`` and
    ``(+h, f_plus)``.  A degenerate (straight-line) fit yields ``0.0``.
    """

    curvature = f_plus - 2.0 * f_zero + f_minus
    if curvature == 0.0:
        return 0.0
    return -0.5 * h * (f_plus - f_minus) / curvature


def golden_section_minimum(
    f: Callable[[float], float],
    xa: float,
    xb: float,
    xc: float,
    *,
    tolerance: float,
    max_iter: int = 200,
) -> float:
    """Golden-section search for a minimum bracketed by ``xa < xb < xc``."""

    x0, x3 = xa, xc
    if abs(xc - xb) > abs(xb - xa):
        x1 = xb
        x2 = xb + _GOLDEN_C * (xc - xb)
    else:
        x1 = xb - _GOLDEN_C * (xb - xa)
        x2 = xb
    f1 = f(x1)
    f2 = f(x2)

    iterations = 0
    while abs(x3 - x0) > tolerance:
        iterations += 1
        if iterations > max_iter:
            raise NonConvergenceError(
                "golden-section search did not converge",
                iterations=max_iter,
                context={"bracket": (x0, x3), "tolerance": tolerance},
            )
        if f2 < f1:
            x0, x1 = x1, x2
            x2 = _GOLDEN_R * x1 + _GOLDEN_C * x3
            f1, f2 = f2, f(x2)
        else:
            x3, x2 = x2, x1
            x1 = _GOLDEN_R * x2 + _GOLDEN_C * x0
            f2, f1 = f1, f(x1)

    return x1 if f1 < f2 else x2


def golden_section_maximum(
    f: Callable[[float], float],
    xa: float,
    xb: float,
    xc: float,
    *,
    tolerance: float,
    max_iter: int = 200,
) -> float:
    """Golden-section search for a maximum bracketed by ``xa < xb < xc``."""

    return golden_section_minimum(
        lambda x: -f(x), xa, xb, xc, tolerance=tolerance, max_iter=max_iter
    )
