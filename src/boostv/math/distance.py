"""Numba JIT compiled implementation of angular distance routines.

Directions are expressed as (eta, phi) pairs, the azimuthal difference is
always wrapped to (-pi, pi] before being squared.
"""

import numba as nb
import numpy as np

__all__ = ["delta_phi", "delta_r2", "delta_r", "closest"]


@nb.njit(cache=True)
def delta_phi(phi1: nb.float64, phi2: nb.float64) -> nb.float64:
    """Azimuthal difference `phi2 - phi1`, wrapped to (-pi, pi].

    Parameters
    ----------
    phi1 : float
        First azimuthal angle
    phi2 : float
        Second azimuthal angle

    Returns
    -------
    float
        Wrapped azimuthal difference
    """
    dphi = phi2 - phi1
    while dphi > np.pi:
        dphi -= 2.0 * np.pi
    while dphi <= -np.pi:
        dphi += 2.0 * np.pi

    return dphi


@nb.njit(cache=True)
def delta_r2(
    eta1: nb.float64, phi1: nb.float64, eta2: nb.float64, phi2: nb.float64
) -> nb.float64:
    """Squared angular separation between two directions.

    Parameters
    ----------
    eta1 : float
        Pseudorapidity of the first direction
    phi1 : float
        Azimuth of the first direction
    eta2 : float
        Pseudorapidity of the second direction
    phi2 : float
        Azimuth of the second direction

    Returns
    -------
    float
        Squared Delta-R
    """
    deta = eta2 - eta1
    dphi = delta_phi(phi1, phi2)

    return deta * deta + dphi * dphi


@nb.njit(cache=True)
def delta_r(
    eta1: nb.float64, phi1: nb.float64, eta2: nb.float64, phi2: nb.float64
) -> nb.float64:
    """Angular separation between two directions.

    Parameters
    ----------
    eta1 : float
        Pseudorapidity of the first direction
    phi1 : float
        Azimuth of the first direction
    eta2 : float
        Pseudorapidity of the second direction
    phi2 : float
        Azimuth of the second direction

    Returns
    -------
    float
        Delta-R
    """
    return np.sqrt(delta_r2(eta1, phi1, eta2, phi2))


@nb.njit(cache=True)
def closest(x: nb.float64[:], targets: nb.float64[:, :]) -> (nb.int64, nb.float64):
    """Finds the direction in a set which is closest to a reference.

    Parameters
    ----------
    x : np.ndarray
        (2) Reference direction (eta, phi)
    targets : np.ndarray
        (M, 2) Candidate directions

    Returns
    -------
    int
        Index of the closest direction (-1 if the set is empty)
    float
        Delta-R to the closest direction (inf if the set is empty)
    """
    best, best_dr = -1, np.inf
    for i in range(len(targets)):
        dr = delta_r(x[0], x[1], targets[i, 0], targets[i, 1])
        if dr < best_dr:
            best, best_dr = i, dr

    return best, best_dr
