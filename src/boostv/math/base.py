"""Numba JIT compiled implementation of basic four-momentum kinematics.

Four-momenta are stored as `(px, py, pz, E)` rows, in that order.
"""

import numba as nb
import numpy as np

__all__ = [
    "pt2",
    "pt",
    "eta",
    "phi",
    "mass",
    "kinematics",
    "from_pt_eta_phi_m",
]

# Pseudorapidity assigned to momenta with no transverse component
MAX_RAP = 1e5


@nb.njit(cache=True)
def pt2(mom: nb.float64[:]) -> nb.float64:
    """Squared transverse momentum of a four-momentum.

    Parameters
    ----------
    mom : np.ndarray
        (4) Four-momentum (px, py, pz, E)

    Returns
    -------
    float
        Squared transverse momentum
    """
    return mom[0] * mom[0] + mom[1] * mom[1]


@nb.njit(cache=True)
def pt(mom: nb.float64[:]) -> nb.float64:
    """Transverse momentum of a four-momentum.

    Parameters
    ----------
    mom : np.ndarray
        (4) Four-momentum (px, py, pz, E)

    Returns
    -------
    float
        Transverse momentum
    """
    return np.sqrt(pt2(mom))


@nb.njit(cache=True)
def eta(mom: nb.float64[:]) -> nb.float64:
    """Pseudorapidity of a four-momentum.

    Momenta with no transverse component are pushed to +/- `MAX_RAP`.

    Parameters
    ----------
    mom : np.ndarray
        (4) Four-momentum (px, py, pz, E)

    Returns
    -------
    float
        Pseudorapidity
    """
    trans = pt(mom)
    if trans == 0.0:
        if mom[2] >= 0.0:
            return MAX_RAP
        return -MAX_RAP

    return np.arcsinh(mom[2] / trans)


@nb.njit(cache=True)
def phi(mom: nb.float64[:]) -> nb.float64:
    """Azimuthal angle of a four-momentum, in (-pi, pi].

    Parameters
    ----------
    mom : np.ndarray
        (4) Four-momentum (px, py, pz, E)

    Returns
    -------
    float
        Azimuthal angle
    """
    if mom[0] == 0.0 and mom[1] == 0.0:
        return 0.0

    return np.arctan2(mom[1], mom[0])


@nb.njit(cache=True)
def mass(mom: nb.float64[:]) -> nb.float64:
    """Invariant mass of a four-momentum.

    Space-like four-momenta (negative squared mass) return a negative mass.

    Parameters
    ----------
    mom : np.ndarray
        (4) Four-momentum (px, py, pz, E)

    Returns
    -------
    float
        Invariant mass
    """
    m2 = mom[3] * mom[3] - mom[0] * mom[0] - mom[1] * mom[1] - mom[2] * mom[2]
    if m2 < 0.0:
        return -np.sqrt(-m2)

    return np.sqrt(m2)


@nb.njit(cache=True)
def kinematics(moms: nb.float64[:, :]) -> nb.float64[:, :]:
    """Converts a set of four-momenta to (pt, eta, phi, m) coordinates.

    Parameters
    ----------
    moms : np.ndarray
        (N, 4) Four-momenta (px, py, pz, E)

    Returns
    -------
    np.ndarray
        (N, 4) Array of (pt, eta, phi, m) values
    """
    res = np.empty((len(moms), 4), dtype=np.float64)
    for i in range(len(moms)):
        res[i, 0] = pt(moms[i])
        res[i, 1] = eta(moms[i])
        res[i, 2] = phi(moms[i])
        res[i, 3] = mass(moms[i])

    return res


@nb.njit(cache=True)
def from_pt_eta_phi_m(
    pts: nb.float64[:], etas: nb.float64[:], phis: nb.float64[:], ms: nb.float64[:]
) -> nb.float64[:, :]:
    """Builds four-momenta from (pt, eta, phi, m) coordinates.

    Parameters
    ----------
    pts : np.ndarray
        (N) Transverse momenta
    etas : np.ndarray
        (N) Pseudorapidities
    phis : np.ndarray
        (N) Azimuthal angles
    ms : np.ndarray
        (N) Masses

    Returns
    -------
    np.ndarray
        (N, 4) Four-momenta (px, py, pz, E)
    """
    res = np.empty((len(pts), 4), dtype=np.float64)
    for i in range(len(pts)):
        res[i, 0] = pts[i] * np.cos(phis[i])
        res[i, 1] = pts[i] * np.sin(phis[i])
        res[i, 2] = pts[i] * np.sinh(etas[i])
        p2 = res[i, 0] ** 2 + res[i, 1] ** 2 + res[i, 2] ** 2
        res[i, 3] = np.sqrt(p2 + ms[i] * ms[i])

    return res
