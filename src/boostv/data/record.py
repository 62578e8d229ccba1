"""Module with the data classes which hold the per-event analysis output."""

from dataclasses import dataclass, field

import numpy as np

from .base import DataBase

__all__ = ["JetRecord", "AnalysisRecord"]


@dataclass(eq=False)
class JetRecord(DataBase):
    """Kinematics and substructure of one retained jet.

    Attributes
    ----------
    momentum : np.ndarray
        (4) Four-momentum (px, py, pz, E) of the pruned jet
    pt : float
        Transverse momentum
    eta : float
        Pseudorapidity
    phi : float
        Azimuthal angle
    m : float
        Invariant mass
    area : float
        Catchment area of the unpruned jet
    tau1 : float
        1-subjettiness
    tau2 : float
        2-subjettiness
    tau3 : float
        3-subjettiness
    min_trig_dr : float
        Delta-R to the closest matching trigger object
    """

    momentum: np.ndarray = None
    pt: float = -1.0
    eta: float = -1.0
    phi: float = -1.0
    m: float = -1.0
    area: float = -1.0
    tau1: float = -1.0
    tau2: float = -1.0
    tau3: float = -1.0
    min_trig_dr: float = -1.0

    # Fixed-length attributes
    _fixed_length_attrs = (("momentum", 4),)

    # Four-momentum attributes
    _mom_attrs = ("momentum",)

    @classmethod
    def from_jet(cls, jet, area=-1.0, taus=None, min_trig_dr=-1.0):
        """Builds a record from a (pruned) jet.

        Parameters
        ----------
        jet : Jet
            Jet to summarize
        area : float, default -1
            Catchment area to attach to the record
        taus : Dict[int, float], optional
            N-subjettiness values, keyed by N
        min_trig_dr : float, default -1
            Delta-R to the closest matching trigger object

        Returns
        -------
        JetRecord
            Jet record
        """
        taus = taus or {}
        return cls(
            momentum=jet.momentum.copy(),
            pt=float(jet.pt),
            eta=float(jet.eta),
            phi=float(jet.phi),
            m=float(jet.m),
            area=float(area),
            tau1=float(taus.get(1, -1.0)),
            tau2=float(taus.get(2, -1.0)),
            tau3=float(taus.get(3, -1.0)),
            min_trig_dr=float(min_trig_dr),
        )


@dataclass(eq=False)
class AnalysisRecord(DataBase):
    """Output of the reconstruction pipeline for one event.

    Attributes
    ----------
    run : int
        Run ID
    event : int
        Event ID
    n_parts : int
        Number of particle-flow candidates in the event
    num_jets : int
        Number of jets produced by the clustering
    lead_cand_pt : float
        Transverse momentum of the first clustered candidate
    lead_cand_eta : float
        Pseudorapidity of the first clustered candidate
    lead_cand_phi : float
        Azimuth of the first clustered candidate
    trigger : int
        Bitmask of the trigger paths found in the event
    jet1 : JetRecord
        Leading jet
    jet2 : JetRecord
        Sub-leading jet (left unfilled if there is none)
    n_gen_parts : int
        Number of stable generator-level particles (simulation only)
    num_gen_jets : int
        Number of generator-level jets (simulation only)
    gen_jet1 : JetRecord
        Leading generator-level jet (simulation only)
    gen_jet2 : JetRecord
        Sub-leading generator-level jet (simulation only)
    """

    run: int = -1
    event: int = -1
    n_parts: int = -1
    num_jets: int = -1
    lead_cand_pt: float = -1.0
    lead_cand_eta: float = -1.0
    lead_cand_phi: float = -1.0
    trigger: int = 0
    jet1: JetRecord = field(default_factory=JetRecord)
    jet2: JetRecord = field(default_factory=JetRecord)
    n_gen_parts: int = -1
    num_gen_jets: int = -1
    gen_jet1: JetRecord = field(default_factory=JetRecord)
    gen_jet2: JetRecord = field(default_factory=JetRecord)
