"""Polynomial basis utilities for minimum-derivative trajectories.

Coefficients are stored highest degree first, so a segment of order n is
``c[0] * tau**n + ... + c[n]`` with nondimensional time tau in [0, 1].
Derivatives with respect to real time t = t0 + tau * T carry a factor
``1 / T**k`` for the k-th derivative.
"""

from typing import Sequence, Tuple

import numpy as np


def _powers(order: int) -> np.ndarray:
    """Monomial power of each coefficient slot, highest degree first."""
    return np.arange(order, -1, -1)


def derivative_coefficients(order: int, derivative_order: int) -> np.ndarray:
    """Build the derivative coefficient table.

    Row k holds the multiplier p! / (p - k)! of each coefficient for the
    k-th derivative, zero where the power p is below k. Evaluating row k
    against the coefficients gives the k-th derivative at tau = 1.

    Args:
        order: Polynomial order n
        derivative_order: Highest derivative to tabulate

    Returns:
        (derivative_order + 1, order + 1) table
    """
    if order < 0 or derivative_order < 0:
        raise ValueError("order and derivative_order must be non-negative")

    powers = _powers(order)
    table = np.zeros((derivative_order + 1, order + 1))
    table[0, :] = 1.0
    for k in range(1, derivative_order + 1):
        # Falling factorial built up one derivative at a time
        table[k, :] = table[k - 1, :] * np.maximum(powers - (k - 1), 0)
    return table


def basis_row(order: int, derivative: int, tau: float) -> np.ndarray:
    """Row mapping coefficients to the ``derivative``-th tau-derivative at tau."""
    powers = _powers(order)
    multipliers = derivative_coefficients(order, derivative)[derivative]
    exponents = np.maximum(powers - derivative, 0)
    return multipliers * np.power(float(tau), exponents)


def cost_matrix(
    order: int,
    derivative_order: int,
    t0: float,
    t1: float,
) -> np.ndarray:
    """Cost matrix of the squared r-th derivative integrated over [t0, t1].

    For coefficients c in nondimensional time, ``c @ Q @ c`` equals the
    integral of (d^r x / dt^r)^2 over the real segment duration.

    Args:
        order: Polynomial order n
        derivative_order: Minimized derivative r
        t0: Segment start time
        t1: Segment end time

    Returns:
        Symmetric positive-semidefinite (n+1, n+1) matrix

    Raises:
        ValueError: If the segment duration is not positive
    """
    duration = float(t1) - float(t0)
    if not duration > 0:
        raise ValueError(f"Segment duration must be positive, got {duration}")

    powers = _powers(order)
    multipliers = derivative_coefficients(order, derivative_order)[derivative_order]
    reduced = powers - derivative_order
    active = reduced >= 0

    Q = np.zeros((order + 1, order + 1))
    idx = np.flatnonzero(active)
    for i in idx:
        for j in idx:
            Q[i, j] = (
                multipliers[i] * multipliers[j] / (reduced[i] + reduced[j] + 1)
            )

    return Q * duration ** (1 - 2 * derivative_order)


def regularize(Q: np.ndarray, weight: float) -> np.ndarray:
    """Add a diagonal term proportional to the mean diagonal of ``Q``.

    The added term is ``weight * trace(Q) / N * I``, so its effect relative
    to the cost does not depend on the segment duration.

    Args:
        Q: (N, N) cost matrix
        weight: Relative weight; zero returns ``Q`` unchanged

    Returns:
        (N, N) matrix
    """
    if weight <= 0:
        return Q
    scale = np.trace(Q) / Q.shape[0]
    return Q + weight * scale * np.eye(Q.shape[0])


def evaluate_segment(
    coefficients: Sequence[float],
    tau: float,
    duration: float = 1.0,
    max_derivative: int = 0,
) -> np.ndarray:
    """Evaluate a segment and its derivatives at nondimensional time tau.

    Args:
        coefficients: (n+1,) coefficients, highest degree first
        tau: Nondimensional time
        duration: Real duration used to scale derivatives; 1.0 returns
            derivatives with respect to tau
        max_derivative: Highest derivative returned

    Returns:
        (max_derivative + 1,) array of value and derivatives
    """
    coefficients = np.asarray(coefficients, dtype=float)
    order = coefficients.shape[0] - 1
    values = np.zeros(max_derivative + 1)
    for k in range(max_derivative + 1):
        if k > order:
            break
        values[k] = basis_row(order, k, tau) @ coefficients / duration**k
    return values


def evaluate_polynomial(
    time: float,
    coefficients: Sequence[float],
    segment_times: Tuple[float, float],
    max_derivative: int = 0,
) -> np.ndarray:
    """Evaluate a segment at real time on its [t0, t1] span.

    Args:
        time: Real evaluation time
        coefficients: (n+1,) coefficients, highest degree first
        segment_times: (t0, t1) real span of the segment
        max_derivative: Highest derivative returned

    Returns:
        (max_derivative + 1,) array of value and real-time derivatives
    """
    t0, t1 = float(segment_times[0]), float(segment_times[1])
    duration = t1 - t0
    if not duration > 0:
        raise ValueError(f"Segment duration must be positive, got {duration}")
    tau = (float(time) - t0) / duration
    return evaluate_segment(coefficients, tau, duration, max_derivative)
