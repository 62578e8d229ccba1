"""N-subjettiness, which measures how consistent a jet is with N subjets."""

from warnings import warn

import numpy as np

from boostv.data import to_momenta
from boostv.math import kinematics
from boostv.math.subjet import kt_axes, refine_axes
from boostv.utils.errors import DegenerateAxisSetWarning

__all__ = ["Nsubjettiness"]


class Nsubjettiness:
    """Computes the N-subjettiness of a set of jet constituents.

    .. math::

        \\tau_N = \\frac{\\sum_i p_{T,i} \\min_J \\Delta R_{i,J}^\\kappa}
                       {\\sum_i p_{T,i} R_0^\\kappa}

    The N axes are seeded with exclusive kt clustering and refined by moving
    each axis to the centroid of the constituents closest to it.
    """

    def __init__(self, n, kappa=1.0, r0=0.8, max_iterations=100):
        """Initialize the N-subjettiness parameters.

        Parameters
        ----------
        n : int
            Number of subjet axes
        kappa : float, default 1.
            Angular exponent (beta)
        r0 : float, default 0.8
            Characteristic jet radius used to normalize the result
        max_iterations : int, default 100
            Maximum number of axis refinement passes
        """
        if n < 1:
            raise ValueError(f"The number of axes must be at least 1, got {n}.")
        if kappa <= 0.0:
            raise ValueError(f"`kappa` must be positive, got {kappa}.")
        if r0 <= 0.0:
            raise ValueError(f"`r0` must be positive, got {r0}.")

        self.n = n
        self.kappa = kappa
        self.r0 = r0
        self.max_iterations = max_iterations

    def __call__(self, constituents):
        """Alias of :meth:`compute`."""
        return self.compute(constituents)

    def axes(self, momenta):
        """Finds the refined subjet axes of a set of constituents.

        Parameters
        ----------
        momenta : np.ndarray
            (N, 4) Constituent four-momenta, with at least `n` rows

        Returns
        -------
        np.ndarray
            (n, 2) Axis directions as (eta, phi)
        float
            Transverse momentum weighted angular sum to the axes
        """
        seeds = kt_axes(momenta, self.n)

        return refine_axes(momenta, seeds, float(self.kappa), self.max_iterations)

    def compute(self, constituents):
        """Computes tau_N.

        Parameters
        ----------
        constituents : Union[List[Particle], np.ndarray]
            Constituent particles or their (N, 4) four-momenta

        Returns
        -------
        float
            Non-negative tau_N value. If there are fewer constituents than
            axes, a :class:`DegenerateAxisSetWarning` is emitted and 0 is
            returned.
        """
        momenta = constituents
        if not isinstance(constituents, np.ndarray):
            momenta = to_momenta(constituents)
        momenta = np.ascontiguousarray(momenta, dtype=np.float64).reshape(-1, 4)

        if not len(momenta):
            return 0.0

        if self.n > len(momenta):
            warn(
                f"Requested {self.n} axes for a jet with {len(momenta)} "
                "constituent(s), tau is set to 0.",
                DegenerateAxisSetWarning,
            )
            return 0.0

        norm = np.sum(kinematics(momenta)[:, 0]) * self.r0**self.kappa
        if norm <= 0.0:
            return 0.0

        _, total = self.axes(momenta)

        return float(total / norm)
