"""Linear-prediction analysis of a single sample window.

Computes the autocorrelation of a window and solves the normal equations with
the Levinson-Durbin recursion, yielding prediction coefficients, reflection
coefficients and the residual prediction energy. Degenerate windows are
reported through :class:`LpcStatus` values instead of exceptions.
"""

import functools
import operator
import warnings
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Sequence, Tuple

import numpy as np
from scipy import signal


class LpcStatus(IntEnum):
    """Outcome of a Levinson-Durbin run."""
    OK = 0
    ZERO_ENERGY = 1
    NON_POSITIVE_RESIDUAL = 2


@dataclass
class LpcResult:
    """Result of one linear-prediction analysis.

    Attributes
    ----------
    r : np.ndarray, shape (p+1,)
        Autocorrelation coefficients r[0..p]
    rc : np.ndarray, shape (p+1,)
        Reflection coefficients; rc[0] is unused and left at 0
    a : np.ndarray, shape (p+1,)
        Prediction coefficients with a[0] = 1
    status : LpcStatus
        OK, ZERO_ENERGY or NON_POSITIVE_RESIDUAL
    residual_energy : float
        Residual energy after the last step that was run
    energies : np.ndarray, shape (p+1,)
        energies[0] = r[0] and energies[k] = residual after step k.
        Steps that were never reached stay at 0.
    order_reached : int
        Last recursion step that was run (0 for ZERO_ENERGY)
    """
    r: np.ndarray
    rc: np.ndarray
    a: np.ndarray
    status: LpcStatus
    residual_energy: float
    energies: np.ndarray = field(default_factory=lambda: np.zeros(0))
    order_reached: int = 0

    @property
    def ok(self) -> bool:
        return self.status == LpcStatus.OK

    @property
    def order(self) -> int:
        return len(self.a) - 1


def _check_order(order: int) -> None:
    if order < 1:
        raise ValueError(f"Prediction order must be at least 1, got {order}")


def autocorrelation(samples: Sequence[float], order: int) -> np.ndarray:
    """Autocorrelation r[i] = sum_k x[k] * x[k+i] for lags 0..order.

    Lags at or beyond the window length give 0.
    """
    _check_order(order)
    x = np.asarray(samples, dtype=np.float64)
    n = len(x)
    r = np.zeros(order + 1)
    for i in range(min(order, n - 1) + 1):
        r[i] = np.dot(x[:n - i], x[i:])
    return r


def _zero_energy_result(r: np.ndarray, order: int) -> LpcResult:
    return LpcResult(
        r=r,
        rc=np.zeros(order + 1),
        a=np.zeros(order + 1),
        status=LpcStatus.ZERO_ENERGY,
        residual_energy=0.0,
        energies=np.zeros(order + 1),
        order_reached=0,
    )


def levinson_durbin(r: Sequence[float], order: int) -> LpcResult:
    """Levinson-Durbin recursion written with explicit index loops.

    Parameters
    ----------
    r : Sequence[float], length >= order+1
        Autocorrelation coefficients
    order : int
        Prediction order p

    Returns
    -------
    LpcResult
        Coefficients and status. On NON_POSITIVE_RESIDUAL the coefficients
        hold the partial solution up to and including the failing step.
    """
    _check_order(order)
    r_arr = np.asarray(r, dtype=np.float64)[:order + 1]
    r_list: List[float] = r_arr.tolist()
    if r_list[0] == 0.0:
        return _zero_energy_result(r_arr.copy(), order)

    a = [0.0] * (order + 1)
    rc = [0.0] * (order + 1)
    energies = [0.0] * (order + 1)

    pe = r_list[0]
    energies[0] = pe
    a[0] = 1.0
    for k in range(1, order + 1):
        acc = 0.0
        for i in range(1, k + 1):
            acc -= a[k - i] * r_list[i]
        akk = acc / pe
        rc[k] = akk

        a[k] = akk
        for i in range(1, k // 2 + 1):
            # both sides read the pre-update values
            a[i], a[k - i] = a[i] + akk * a[k - i], a[k - i] + akk * a[i]

        pe *= 1.0 - akk * akk
        energies[k] = pe
        if pe <= 0.0:
            return LpcResult(r_arr.copy(), np.array(rc), np.array(a),
                             LpcStatus.NON_POSITIVE_RESIDUAL, pe,
                             np.array(energies), k)

    return LpcResult(r_arr.copy(), np.array(rc), np.array(a),
                     LpcStatus.OK, pe, np.array(energies), order)


def levinson_durbin_reduce(r: Sequence[float], order: int) -> LpcResult:
    """Levinson-Durbin recursion built from reductions and vector updates.

    Produces bit-identical output to :func:`levinson_durbin`: the dot product
    is accumulated left to right by ``functools.reduce`` and the coupled
    coefficient update is a single elementwise numpy expression evaluated
    before assignment.
    """
    _check_order(order)
    r_arr = np.asarray(r, dtype=np.float64)[:order + 1]
    if r_arr[0] == 0.0:
        return _zero_energy_result(r_arr.copy(), order)

    a = np.zeros(order + 1)
    rc = np.zeros(order + 1)
    energies = np.zeros(order + 1)

    pe = float(r_arr[0])
    energies[0] = pe
    a[0] = 1.0
    for k in range(1, order + 1):
        # sum_{i=1..k} a[k-i] * r[i], in increasing i
        products = map(operator.mul, a[k - 1::-1].tolist(), r_arr[1:k + 1].tolist())
        akk = -functools.reduce(operator.add, products, 0.0) / pe
        rc[k] = akk

        a[k] = akk
        a[1:k] = a[1:k] + akk * a[k - 1:0:-1]

        pe *= 1.0 - akk * akk
        energies[k] = pe
        if pe <= 0.0:
            return LpcResult(r_arr.copy(), rc, a, LpcStatus.NON_POSITIVE_RESIDUAL,
                             pe, energies, k)

    return LpcResult(r_arr.copy(), rc, a, LpcStatus.OK, pe, energies, order)


_RECURSIONS = {
    "loop": levinson_durbin,
    "reduce": levinson_durbin_reduce,
}


def lpc_analyze(samples: Sequence[float], order: int, method: str = "loop") -> LpcResult:
    """Autocorrelation followed by the Levinson-Durbin recursion.

    Parameters
    ----------
    samples : Sequence[float]
        Sample window of length n (n >= order+1 expected, not enforced)
    order : int
        Prediction order p
    method : str, default="loop"
        'loop' or 'reduce', selecting the recursion implementation

    Returns
    -------
    LpcResult
        Callers must check ``status`` before trusting the coefficients.

    Examples
    --------
    >>> result = lpc_analyze(np.sin(np.arange(64) * 0.3), order=2)
    >>> result.status
    <LpcStatus.OK: 0>
    """
    try:
        recursion = _RECURSIONS[method]
    except KeyError:
        raise ValueError(f"Unknown LPC method '{method}'. Available: {list(_RECURSIONS)}")
    return recursion(autocorrelation(samples, order), order)


def prediction_residual(samples: Sequence[float], a: Sequence[float]) -> np.ndarray:
    """Inverse-filter a window: e[n] = sum_i a[i] * x[n-i]."""
    return signal.lfilter(np.asarray(a, dtype=np.float64), [1.0],
                          np.asarray(samples, dtype=np.float64))


class LinearPredictor:
    """Linear-prediction analyzer with a fixed order.

    Parameters
    ----------
    order : int
        Prediction order p (number of lag terms)
    method : str, default="loop"
        Recursion implementation, 'loop' or 'reduce'
    """

    def __init__(self, order: int, method: str = "loop"):
        _check_order(order)
        if method not in _RECURSIONS:
            raise ValueError(f"Unknown LPC method '{method}'. Available: {list(_RECURSIONS)}")
        self.order = order
        self.method = method

    def analyze(self, samples: Sequence[float]) -> LpcResult:
        return lpc_analyze(samples, self.order, self.method)

    def analyze_frames(self, frames: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Analyze each row of a 2-D frame matrix.

        Parameters
        ----------
        frames : np.ndarray, shape (n_frames, frame_length)
            One sample window per row

        Returns
        -------
        coefficients : np.ndarray, shape (n_frames, order+1)
            Prediction coefficients per frame (as returned, also for failed frames)
        statuses : np.ndarray, shape (n_frames,)
            LpcStatus value per frame
        """
        frames = np.atleast_2d(np.asarray(frames, dtype=np.float64))
        coefficients = np.zeros((frames.shape[0], self.order + 1))
        statuses = np.zeros(frames.shape[0], dtype=int)

        for idx, frame in enumerate(frames):
            result = self.analyze(frame)
            coefficients[idx] = result.a
            statuses[idx] = int(result.status)
            if not result.ok:
                warnings.warn(f"Frame {idx} unusable for prediction: {result.status.name}")

        return coefficients, statuses

    def residual(self, samples: Sequence[float]) -> np.ndarray:
        """Prediction residual of a window using its own coefficients."""
        result = self.analyze(samples)
        if not result.ok:
            raise ValueError(f"Cannot inverse-filter window: {result.status.name}")
        return prediction_residual(samples, result.a)
