"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import os

import h5py
import numpy as np
import pytest

from boostv.data import EventInputs, MCParticle, PFCandidate, PFJet, TriggerObject
from boostv.math import from_pt_eta_phi_m


def momenta(pts, etas, phis, ms=None):
    """Builds (N, 4) four-momenta from lists of (pt, eta, phi, m) values."""
    pts = np.asarray(pts, dtype=np.float64)
    ms = np.zeros(len(pts)) if ms is None else np.asarray(ms, dtype=np.float64)

    return from_pt_eta_phi_m(
        pts, np.asarray(etas, dtype=np.float64), np.asarray(phis, dtype=np.float64), ms
    )


@pytest.fixture(name="make_momenta")
def fixture_make_momenta():
    """Returns a function which builds four-momenta from (pt, eta, phi, m)."""
    return momenta


@pytest.fixture(name="make_event")
def fixture_make_event():
    """Returns a function which builds the inputs of one event.

    The candidates of the event are all put in a single jet of the primary
    jet collection, in the order they are provided.
    """

    def make_event(moms, triggers=None, mc=None, run=1, event=1):
        cands = [PFCandidate(*mom) for mom in moms]
        jets = []
        if len(cands):
            total = np.sum(moms, axis=0)
            jets = [PFJet(*total, candidates=cands)]
        trigger_objects = None
        if triggers is not None:
            trigger_objects = [TriggerObject(n, e, p) for n, e, p in triggers]
        mc_particles = None
        if mc is not None:
            mc_particles = [MCParticle(*mom, status=s) for mom, s in mc]

        return EventInputs(
            jets=jets,
            candidates=cands,
            trigger_objects=trigger_objects,
            mc_particles=mc_particles,
            is_data=mc is None,
            run=run,
            event=event,
        )

    return make_event


@pytest.fixture(name="boosted_event")
def fixture_boosted_event(make_momenta):
    """Four-momenta of a hard two-prong jet with some soft radiation.

    The two prongs carry 150 and 100 GeV, 0.3 apart, the soft particles are
    spread within 0.5 of the jet axis.
    """
    rng = np.random.default_rng(seed=0)
    num_soft = 10
    pts = np.concatenate(([150.0, 100.0], rng.uniform(0.5, 2.0, num_soft)))
    etas = np.concatenate(([0.0, 0.3], rng.uniform(-0.4, 0.4, num_soft)))
    phis = np.concatenate(([0.0, 0.0], rng.uniform(-0.4, 0.4, num_soft)))

    return make_momenta(pts, etas, phis)


def write_events(path, events):
    """Writes a list of event inputs to an HDF5 file readable by `HDF5Reader`.

    Parameters
    ----------
    path : str
        Path to the output file
    events : List[EventInputs]
        Events to store
    """
    info = np.array(
        [(e.run, e.event, e.is_data) for e in events],
        dtype=[("run", np.int64), ("event", np.int64), ("is_data", np.bool_)],
    )

    def mom(objs):
        return np.array([(o.px, o.py, o.pz, o.e) for o in objs]).reshape(-1, 4)

    def offsets(counts):
        return np.concatenate(([0], np.cumsum(counts))).astype(np.int64)

    jets = [j for e in events for j in e.jets]
    with h5py.File(path, "w") as out_file:
        out_file.create_dataset("events", data=info)

        group = out_file.create_group("jets")
        group.create_dataset("momentum", data=mom(jets))
        group.create_dataset("offsets", data=offsets([len(e.jets) for e in events]))
        group.create_dataset(
            "candidate_offsets", data=offsets([len(j.candidates) for j in jets])
        )
        out_file.create_group("jet_candidates").create_dataset(
            "momentum", data=mom([c for j in jets for c in j.candidates])
        )

        group = out_file.create_group("candidates")
        cands = [c for e in events for c in e.candidates]
        group.create_dataset("momentum", data=mom(cands))
        group.create_dataset(
            "offsets", data=offsets([len(e.candidates) for e in events])
        )

        if all(e.trigger_objects is not None for e in events):
            objs = [o for e in events for o in e.trigger_objects]
            group = out_file.create_group("trigger_objects")
            group.create_dataset(
                "name", data=np.array([o.name for o in objs], dtype=h5py.string_dtype())
            )
            group.create_dataset("eta", data=np.array([o.eta for o in objs]))
            group.create_dataset("phi", data=np.array([o.phi for o in objs]))
            group.create_dataset(
                "offsets", data=offsets([len(e.trigger_objects) for e in events])
            )

        if all(e.mc_particles is not None for e in events):
            parts = [p for e in events for p in e.mc_particles]
            group = out_file.create_group("mc_particles")
            group.create_dataset("momentum", data=mom(parts))
            group.create_dataset(
                "status", data=np.array([p.status for p in parts], dtype=np.int64)
            )
            group.create_dataset(
                "offsets", data=offsets([len(e.mc_particles) for e in events])
            )


@pytest.fixture(name="event_writer")
def fixture_event_writer():
    """Returns the function which writes events to an HDF5 file."""
    return write_events


@pytest.fixture(name="event_file")
def fixture_event_file(tmp_path, make_event, boosted_event):
    """Writes a small event file with three events.

    The first event holds a boosted jet with matching trigger objects, the
    second event has no jet and the third event holds a soft jet.

    Parameters
    ----------
    tmp_path : str
       Generic pytest fixture used to handle temporary test files
    """
    soft = boosted_event * 0.3
    triggers = [
        ("hltMonoCentralPFJet80_PFMETnoMu", 0.1, 0.05),
        ("HLT_MET120_HBHENoiseCleaned_v3", 1.0, 2.0),
    ]
    events = [
        make_event(boosted_event, triggers=triggers, event=1),
        make_event(np.empty((0, 4)), triggers=[], event=2),
        make_event(soft, triggers=[], event=3),
    ]

    path = os.path.join(tmp_path, "events.h5")
    write_events(path, events)

    return path
