"""
Maximum-likelihood fitting strategies.

A fitter minimizes a negative log-likelihood over a parameter vector and
either returns the optimum or raises NonConvergence. Models hand the fitter
an objective (and optionally its gradient) and never depend on the numerical
method behind it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional
import logging

import numpy as np
from scipy.optimize import minimize

from nba_quant.config import settings
from nba_quant.exceptions import NonConvergence

logger = logging.getLogger(__name__)

Objective = Callable[[np.ndarray], float]
Gradient = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class FitResult:
    """Optimum found by a fitter."""

    params: np.ndarray
    neg_log_likelihood: float
    n_iterations: int
    method: str
    message: str = ""


class MaximumLikelihoodFitter(ABC):
    """Strategy interface for minimizing a negative log-likelihood."""

    @abstractmethod
    def minimize(
        self,
        objective: Objective,
        x0: np.ndarray,
        gradient: Optional[Gradient] = None,
    ) -> FitResult:
        """
        Minimize ``objective`` starting from ``x0``.

        The objective may return +inf for infeasible parameters.

        Raises:
            NonConvergence: The optimizer stopped without meeting its tolerance
        """


class ScipyMaximumLikelihoodFitter(MaximumLikelihoodFitter):
    """
    Nelder-Mead search followed by an optional gradient-based polish.

    Nelder-Mead only compares objective values, so it copes with the +inf
    returned outside the feasible region. When a gradient is available, BFGS
    polishes the simplex optimum; the polish is kept only if it converges to
    a finite, lower objective value.
    """

    def __init__(
        self,
        tolerance: Optional[float] = None,
        max_iter: Optional[int] = None,
        polish: bool = True,
    ):
        """
        Args:
            tolerance: Absolute tolerance on parameters and objective
            max_iter: Iteration cap for the simplex search
            polish: Run BFGS from the simplex optimum when a gradient is given
        """
        self.tolerance = tolerance if tolerance is not None else settings.FIT_TOLERANCE
        self.max_iter = max_iter if max_iter is not None else settings.FIT_MAX_ITER
        self.polish = polish

    def minimize(
        self,
        objective: Objective,
        x0: np.ndarray,
        gradient: Optional[Gradient] = None,
    ) -> FitResult:
        x0 = np.asarray(x0, dtype=float)
        start_value = objective(x0)
        if not np.isfinite(start_value):
            raise NonConvergence(f"Objective is not finite at the start point {x0.tolist()}")

        result = minimize(
            objective,
            x0,
            method="Nelder-Mead",
            options={
                "maxiter": self.max_iter,
                "maxfev": self.max_iter * 2,
                "xatol": self.tolerance,
                "fatol": self.tolerance,
            },
        )
        if not result.success:
            raise NonConvergence(
                f"Nelder-Mead stopped after {result.nit} iterations: {result.message}"
            )
        if not np.isfinite(result.fun):
            raise NonConvergence("Nelder-Mead converged to a non-finite objective value")

        best = FitResult(
            params=np.asarray(result.x, dtype=float),
            neg_log_likelihood=float(result.fun),
            n_iterations=int(result.nit),
            method="Nelder-Mead",
            message=str(result.message),
        )
        logger.debug(f"Nelder-Mead: f={best.neg_log_likelihood:.6f} after {best.n_iterations} iterations")

        if self.polish and gradient is not None:
            best = self._polish(objective, gradient, best)
        return best

    def _polish(self, objective: Objective, gradient: Gradient, start: FitResult) -> FitResult:
        with np.errstate(invalid="ignore", over="ignore"):
            result = minimize(
                objective,
                start.params,
                method="BFGS",
                jac=gradient,
                options={"maxiter": self.max_iter, "gtol": self.tolerance},
            )

        improved = (
            result.success
            and np.isfinite(result.fun)
            and np.all(np.isfinite(result.x))
            and result.fun <= start.neg_log_likelihood
        )
        if not improved:
            logger.debug(f"BFGS polish not kept: {result.message}")
            return start

        logger.debug(f"BFGS polish: f={result.fun:.6f} after {result.nit} iterations")
        return FitResult(
            params=np.asarray(result.x, dtype=float),
            neg_log_likelihood=float(result.fun),
            n_iterations=start.n_iterations + int(result.nit),
            method="Nelder-Mead+BFGS",
            message=str(result.message),
        )
