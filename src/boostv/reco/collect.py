"""Module which converts upstream input collections into clustering inputs."""

from boostv.data import InputKind, Particle
from boostv.utils.errors import InputTypeError, ParticleLimitExceeded
from boostv.utils.globals import STABLE_STATUS

__all__ = ["ParticleCollector"]


class ParticleCollector:
    """Builds ordered lists of :class:`Particle` objects from input collections.

    The kind of a collection is resolved once, when it is converted. Any
    element which does not carry the expected `kind` tag makes the whole
    collection invalid.
    """

    def __init__(self, max_jets=1, max_particles=None):
        """Initialize the collector.

        Parameters
        ----------
        max_jets : int, default 1
            Number of jets of the primary collection to take candidates from
        max_particles : int, optional
            Maximum number of particles allowed in one collection
        """
        if max_jets is not None and max_jets < 1:
            raise ValueError(f"`max_jets` must be at least 1, got {max_jets}.")
        if max_particles is not None and max_particles < 0:
            raise ValueError(
                f"`max_particles` must be non-negative, got {max_particles}."
            )

        self.max_jets = max_jets
        self.max_particles = max_particles

    @staticmethod
    def resolve_kind(collection, expected):
        """Checks that every element of a collection is of the expected kind.

        Parameters
        ----------
        collection : list
            Input collection
        expected : InputKind
            Kind every element must carry

        Raises
        ------
        InputTypeError
            If any element carries a different (or no) kind tag
        """
        kinds = {getattr(el, "kind", None) for el in collection}
        kinds.discard(expected)
        if kinds:
            names = sorted(str(getattr(k, "value", k)) for k in kinds)
            raise InputTypeError(
                f"Expected a collection of `{expected.value}` objects, "
                f"found element(s) of kind: {names}."
            )

    def check_limit(self, num_particles):
        """Raises if a collection exceeds the particle count cap.

        Parameters
        ----------
        num_particles : int
            Number of particles in the collection
        """
        if self.max_particles is not None and num_particles > self.max_particles:
            raise ParticleLimitExceeded(
                f"Collection of {num_particles} particles exceeds the "
                f"limit of {self.max_particles}."
            )

    def from_candidates(self, candidates, kind=InputKind.PF_CANDIDATE):
        """Converts a flat candidate collection to particles.

        Parameters
        ----------
        candidates : list
            Ordered list of candidates
        kind : InputKind, default PF_CANDIDATE
            Kind expected for every element

        Returns
        -------
        List[Particle]
            Particles, index-aligned with the input collection
        """
        self.resolve_kind(candidates, kind)
        self.check_limit(len(candidates))

        return [
            Particle(c.px, c.py, c.pz, c.e, index=i) for i, c in enumerate(candidates)
        ]

    def from_jets(self, jets):
        """Collects the constituents of the leading jets of a jet collection.

        Only the first `max_jets` jets are checked and considered, the rest of
        the collection is ignored. The index of each particle runs over the
        pushed candidates, in order.

        Parameters
        ----------
        jets : List[PFJet]
            Ordered jet collection

        Returns
        -------
        List[Particle]
            Constituents of the considered jets
        """
        selected = jets if self.max_jets is None else jets[: self.max_jets]
        self.resolve_kind(selected, InputKind.PF_JET)

        candidates = []
        for jet in selected:
            self.resolve_kind(jet.candidates, InputKind.PF_CANDIDATE)
            candidates.extend(jet.candidates)

        self.check_limit(len(candidates))

        return [
            Particle(c.px, c.py, c.pz, c.e, index=i) for i, c in enumerate(candidates)
        ]

    def from_generator(self, particles):
        """Selects the stable generator-level particles.

        Parameters
        ----------
        particles : List[MCParticle]
            Full generator particle collection

        Returns
        -------
        List[Particle]
            Stable particles, indexed by their position in the full collection
        """
        self.resolve_kind(particles, InputKind.MC_PARTICLE)
        stable = [
            Particle(p.px, p.py, p.pz, p.e, index=i)
            for i, p in enumerate(particles)
            if p.status == STABLE_STATUS
        ]
        self.check_limit(len(stable))

        return stable
