"""Per-event boosted-jet reconstruction pipeline.

The pipeline chains the reconstruction stages for one event:

1. Collect particles from the leading jet(s) of the event
2. Cluster them with Cambridge/Aachen, measure the jet areas
3. Prune the two hardest jets
4. Compute the N-subjettiness of the pruned jets
5. Match the pruned jets to the trigger objects of the event

and assembles the result into an :class:`AnalysisRecord`. It is driven by
three explicit hooks: :meth:`BoostedVPipeline.prepare`,
:meth:`BoostedVPipeline.process_event` and :meth:`BoostedVPipeline.finalize`.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from typing import Dict, Optional

from .ana import AccumulationContext
from .data import AnalysisRecord, JetRecord, to_momenta
from .reco import (
    JetClusterer,
    Nsubjettiness,
    ParticleCollector,
    Pruner,
    TriggerMatcher,
)
from .utils.errors import (
    BelowThreshold,
    EventSkip,
    MissingCollectionError,
    NoJetsFound,
)
from .utils.globals import MAX_PARTICLES
from .utils.logger import logger

__all__ = ["PipelineConfig", "Summary", "BoostedVPipeline"]


@dataclass
class PipelineConfig:
    """Parameters of the reconstruction pipeline.

    Attributes
    ----------
    cone_size : float
        Jet radius parameter R
    algorithm : str
        Recombination algorithm
    area : dict, optional
        Ghost area definition, `None` to skip the area computation
    pruning : dict
        Pruning parameters (`zcut`, `rcut_factor`)
    min_leading_pt : float
        Minimum transverse momentum of the pruned leading jet
    max_jets : int
        Number of jets of the primary collection to take candidates from
    max_particles : int, optional
        Maximum number of particles allowed in one event (`None` for no cap)
    trigger : dict
        Trigger matching parameters (`match_pattern`, `bits`)
    nsubjettiness : dict
        N-subjettiness parameters (`kappa`, `n_axes`, `r0`, `max_iterations`)
    histograms : dict, optional
        Histogram binning, by name (default binning if not specified)
    """

    cone_size: float = 0.8
    algorithm: str = "cambridge"
    area: Optional[dict] = field(default_factory=dict)
    pruning: dict = field(default_factory=dict)
    min_leading_pt: float = 100.0
    max_jets: int = 1
    max_particles: Optional[int] = MAX_PARTICLES
    trigger: dict = field(default_factory=dict)
    nsubjettiness: dict = field(default_factory=dict)
    histograms: Optional[dict] = None

    @classmethod
    def from_dict(cls, cfg):
        """Builds the configuration from a dictionary, checks its keys.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary (e.g. the `analysis` YAML block)

        Returns
        -------
        PipelineConfig
            Pipeline configuration
        """
        cfg = {} if cfg is None else cfg
        known = {f.name for f in fields(cls)}
        unknown = set(cfg).difference(known)
        if unknown:
            raise ValueError(
                f"Unrecognized pipeline configuration key(s): {sorted(unknown)}. "
                f"Must be one of {sorted(known)}."
            )

        return cls(**cfg)


@dataclass
class Summary:
    """Outcome of a run, as reported by :meth:`BoostedVPipeline.finalize`.

    Attributes
    ----------
    num_events : int
        Number of events fed to the pipeline
    num_analyzed : int
        Number of events which went through the jet reconstruction
    num_records : int
        Number of records emitted
    skips : Dict[str, int]
        Number of skipped events, by reason
    counters : Dict[str, int]
        All the event counters
    histograms : Dict[str, hist.Hist]
        Accumulated histograms
    times : Dict[str, Time]
        Cumulative time spent in each stage
    """

    num_events: int = 0
    num_analyzed: int = 0
    num_records: int = 0
    skips: Dict[str, int] = field(default_factory=dict)
    counters: Dict[str, int] = field(default_factory=dict)
    histograms: dict = field(default_factory=dict)
    times: dict = field(default_factory=dict)


class BoostedVPipeline:
    """Reconstructs boosted jets and their substructure, one event at a time.

    Typical configuration should look like:

    .. code-block:: yaml

        analysis:
          cone_size: 0.8
          area:
            ghost_area: 0.01
            ghost_eta_max: 7.0
          pruning:
            zcut: 0.1
            rcut_factor: 0.5
          min_leading_pt: 100.
          nsubjettiness:
            kappa: 1.
            n_axes: [1, 2, 3]
    """

    # Stages timed by the pipeline
    stages = ("collect", "cluster", "prune", "nsub", "match")

    def __init__(self, config=None):
        """Initialize the pipeline, prepare it if a configuration is provided.

        Parameters
        ----------
        config : Union[PipelineConfig, dict], optional
            Pipeline configuration
        """
        self.config = None
        self.context = None
        if config is not None:
            self.prepare(config)

    def prepare(self, config=None):
        """Builds the reconstruction stages and resets the accumulators.

        Parameters
        ----------
        config : Union[PipelineConfig, dict], optional
            Pipeline configuration (defaults used if not specified)
        """
        if config is None or isinstance(config, dict):
            config = PipelineConfig.from_dict(config)
        self.config = config

        self.collector = ParticleCollector(
            max_jets=config.max_jets, max_particles=config.max_particles
        )
        self.clusterer = JetClusterer(
            cone_size=config.cone_size, algorithm=config.algorithm, area=config.area
        )
        self.pruner = Pruner(**config.pruning)
        self.matcher = TriggerMatcher(**config.trigger)

        nsub_cfg = dict(config.nsubjettiness)
        n_axes = nsub_cfg.pop("n_axes", (1, 2, 3))
        nsub_cfg.setdefault("r0", config.cone_size)
        self.nsubjettiness = {n: Nsubjettiness(n, **nsub_cfg) for n in n_axes}

        self.context = AccumulationContext(config.histograms, self.stages)

    @contextmanager
    def timed(self, stage):
        """Times the execution of a block under a stage name."""
        self.context.watch.start(stage)
        try:
            yield
        finally:
            self.context.watch.stop(stage)

    def process_event(self, inputs, entry=None):
        """Runs the reconstruction on one event.

        Parameters
        ----------
        inputs : EventInputs
            Input collections of the event
        entry : int, optional
            Index of the event in the input file(s). If provided, the ghost
            layouts of the event only depend on the area seed and on this index.

        Returns
        -------
        AnalysisRecord
            Record of the event, `None` if the event was skipped
        """
        if self.context is None:
            raise RuntimeError(
                "The pipeline must be prepared before processing events."
            )

        self.context.count("events")
        if entry is not None and self.clusterer.area is not None:
            self.clusterer.area.reseed(entry)

        # Cache the trigger objects used for matching, build the trigger mask
        with self.timed("match"):
            try:
                self.matcher.set_event(inputs.trigger_objects)
            except MissingCollectionError as err:
                logger.warning("Run %d, event %d: %s", inputs.run, inputs.event, err)
                self.context.count("missing_trigger")

        record = AnalysisRecord(
            run=inputs.run, event=inputs.event, trigger=self.matcher.mask
        )

        # Generator-level jets, for simulated events only
        if not inputs.is_data:
            self.process_generator(inputs, record)

        self.context.count("analyzed")

        # Reconstructed jets
        try:
            self.process_reco(inputs, record)
        except EventSkip as err:
            self.context.skip(err.reason)
            level = logging.WARNING
            if isinstance(err, (NoJetsFound, BelowThreshold)):
                level = logging.DEBUG
            logger.log(
                level,
                "Run %d, event %d skipped (%s): %s",
                inputs.run,
                inputs.event,
                err.reason,
                err,
            )
            return None

        self.context.count("records")

        return record

    def process_reco(self, inputs, record):
        """Fills the reconstructed jet fields of a record.

        Parameters
        ----------
        inputs : EventInputs
            Input collections of the event
        record : AnalysisRecord
            Record to fill

        Raises
        ------
        EventSkip
            If the event does not yield an acceptable leading jet
        """
        with self.timed("collect"):
            particles = self.collector.from_jets(inputs.jets)

        if particles:
            lead = particles[0]
            record.lead_cand_pt = lead.pt
            record.lead_cand_eta = lead.eta
            record.lead_cand_phi = lead.phi
            self.context.fill("cand_pt", [p.pt for p in particles])
            self.context.fill("cand_eta", [p.eta for p in particles])

        momenta = to_momenta(particles)
        jets, pruned = self.reconstruct(momenta)

        record.n_parts = len(inputs.candidates)
        record.num_jets = len(jets)
        if not jets:
            raise NoJetsFound("Clustering produced no jet.")

        self.context.fill("jet_pt", pruned[0].pt)
        self.context.fill("jet_eta", pruned[0].eta)
        if pruned[0].pt < self.config.min_leading_pt:
            raise BelowThreshold(
                f"Pruned leading jet pt ({pruned[0].pt:.3f}) is below "
                f"{self.config.min_leading_pt}."
            )

        records = self.summarize(jets, pruned, momenta)
        record.jet1 = records[0]
        if len(records) > 1:
            record.jet2 = records[1]

        taus = [records[0].tau1, records[0].tau2, records[0].tau3]
        for i, tau in enumerate(taus):
            if tau >= 0.0:
                self.context.fill(f"tau{i + 1}", tau)
        if taus[0] > 0.0 and taus[1] >= 0.0:
            self.context.fill("tau21", taus[1] / taus[0])
        if taus[1] > 0.0 and taus[2] >= 0.0:
            self.context.fill("tau32", taus[2] / taus[1])

    def process_generator(self, inputs, record):
        """Fills the generator-level jet fields of a record.

        The generator branch never causes the event to be skipped: if it does
        not yield an acceptable leading jet, the generator jet fields are left
        unset.

        Parameters
        ----------
        inputs : EventInputs
            Input collections of the event
        record : AnalysisRecord
            Record to fill
        """
        try:
            if inputs.mc_particles is None:
                raise MissingCollectionError(
                    "Generator particle collection is missing."
                )

            with self.timed("collect"):
                particles = self.collector.from_generator(inputs.mc_particles)

            momenta = to_momenta(particles)
            jets, pruned = self.reconstruct(momenta)
            record.n_gen_parts = len(particles)
            record.num_gen_jets = len(jets)
            if not jets:
                raise NoJetsFound("Generator-level clustering produced no jet.")
            if pruned[0].pt < self.config.min_leading_pt:
                raise BelowThreshold("Pruned generator leading jet below threshold.")

        except MissingCollectionError as err:
            logger.warning("Run %d, event %d: %s", inputs.run, inputs.event, err)
            self.context.count("missing_generator")
            return

        except EventSkip as err:
            logger.debug(
                "Run %d, event %d generator jets not recorded (%s): %s",
                inputs.run,
                inputs.event,
                err.reason,
                err,
            )
            self.context.count(f"generator_{err.reason}")
            return

        records = self.summarize(jets, pruned, momenta)
        record.gen_jet1 = records[0]
        if len(records) > 1:
            record.gen_jet2 = records[1]

    def reconstruct(self, momenta):
        """Clusters particles and prunes the two hardest jets.

        Parameters
        ----------
        momenta : np.ndarray
            (N, 4) Particle four-momenta

        Returns
        -------
        List[Jet]
            All jets, sorted by non-increasing transverse momentum
        List[Jet]
            Pruned versions of (up to) the two hardest jets
        """
        with self.timed("cluster"):
            jets = self.clusterer.cluster(momenta)

        with self.timed("prune"):
            pruned = [self.pruner.prune(jet, momenta) for jet in jets[:2]]

        return jets, pruned

    def summarize(self, jets, pruned, momenta):
        """Builds the records of the pruned jets.

        Parameters
        ----------
        jets : List[Jet]
            Unpruned jets (provide the areas)
        pruned : List[Jet]
            Pruned jets
        momenta : np.ndarray
            (N, 4) Particle four-momenta the constituent indexes refer to

        Returns
        -------
        List[JetRecord]
            One record per pruned jet
        """
        records = []
        for jet, pjet in zip(jets, pruned):
            with self.timed("nsub"):
                constituents = momenta[pjet.constituents]
                taus = {n: calc(constituents) for n, calc in self.nsubjettiness.items()}

            with self.timed("match"):
                min_dr = self.matcher.min_delta_r(pjet.direction)

            records.append(
                JetRecord.from_jet(pjet, area=jet.area, taus=taus, min_trig_dr=min_dr)
            )

        return records

    def finalize(self):
        """Summarizes the run.

        Returns
        -------
        Summary
            Event counts, skip reasons, histograms and stage timings
        """
        if self.context is None:
            raise RuntimeError("The pipeline must be prepared before it is finalized.")

        counters = self.context.counters
        summary = Summary(
            num_events=counters["events"],
            num_analyzed=counters["analyzed"],
            num_records=counters["records"],
            skips=dict(self.context.skips),
            counters=dict(counters),
            histograms=self.context.histograms,
            times=self.context.watch.times_sum(),
        )

        logger.info("Number of events analyzed: %d", summary.num_analyzed)
        logger.info("Number of records emitted: %d", summary.num_records)
        for reason, count in sorted(summary.skips.items()):
            logger.info("Events skipped (%s): %d", reason, count)

        return summary
