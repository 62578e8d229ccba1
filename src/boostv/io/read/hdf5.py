"""Contains a reader class dedicated to loading events from HDF5 files."""

import glob
import os

import h5py
import numpy as np

from boostv.data import EventInputs, MCParticle, PFCandidate, PFJet, TriggerObject
from boostv.utils.logger import logger

__all__ = ["HDF5Reader"]


class HDF5Reader:
    """Class which reads event inputs stored in HDF5 files.

    Every collection is stored flat, across all the events of a file, next to
    an offset array which delimits the objects of each event. The files must be
    structured as follows:

    - `events`: compound dataset with one `(run, event, is_data)` row per event
    - `jets/momentum`: (J, 4) jet four-momenta (px, py, pz, E)
    - `jets/offsets`: (E + 1) jet offsets of each event
    - `jets/candidate_offsets`: (J + 1) constituent offsets of each jet
    - `jet_candidates/momentum`: (C, 4) jet constituent four-momenta
    - `candidates/momentum`: (P, 4) flat candidate four-momenta
    - `candidates/offsets`: (E + 1) candidate offsets of each event
    - `trigger_objects/{name, eta, phi, offsets}`: trigger objects (optional)
    - `mc_particles/{momentum, status, offsets}`: generator particles (optional)

    Optional groups which are absent are returned as `None`.

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          reader:
            name: hdf5
            file_keys: /path/to/events_*.h5
    """

    name = "hdf5"

    def __init__(self, file_keys, n_entry=None, n_skip=None, entry_list=None):
        """Initalize the HDF5 file reader.

        Parameters
        ----------
        file_keys : Union[str, List[str]]
            Path or list of paths (glob patterns accepted) to the HDF5 files
            to be read, or path to a text file listing them
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : List[int], optional
            List of integer entry IDs to load
        """
        # Process the list of files
        self.process_file_paths(file_keys)

        # Loop over the input files, build a map from index to file ID
        self.num_entries = 0
        offsets, index = [], []
        for i, path in enumerate(self.file_paths):
            with h5py.File(path, "r") as in_file:
                if "events" not in in_file:
                    raise KeyError(f"File does not contain an `events` dataset: {path}")

                num_entries = len(in_file["events"])
                offsets.append(self.num_entries)
                index.append(np.full(num_entries, i, dtype=np.int64))
                self.num_entries += num_entries

        logger.info("Total number of entries in the file(s): %d", self.num_entries)

        self.file_offsets = np.array(offsets, dtype=np.int64)
        self.file_index = np.concatenate(index)

        # Process the entry list
        self.process_entry_list(n_entry, n_skip, entry_list)

    def process_file_paths(self, file_keys):
        """Process the list of files.

        Parameters
        ----------
        file_keys : Union[str, List[str]]
            Path, glob pattern, list of those or text file with a file list
        """
        if file_keys is None:
            raise ValueError("No input `file_keys` provided, abort.")

        # A single text file contains a list of file paths
        if isinstance(file_keys, str) and os.path.splitext(file_keys)[-1] == ".txt":
            if not os.path.isfile(file_keys):
                raise FileNotFoundError(f"File list not found: {file_keys}")
            with open(file_keys, "r", encoding="utf-8") as f:
                file_keys = f.read().splitlines()

        if isinstance(file_keys, str):
            file_keys = [file_keys]

        self.file_paths = []
        for file_key in file_keys:
            file_paths = sorted(glob.glob(file_key))
            if not file_paths:
                raise FileNotFoundError(f"File key {file_key} yielded no path.")
            self.file_paths.extend(file_paths)

        logger.info("Will load %d file(s):", len(self.file_paths))
        for path in self.file_paths:
            logger.info("  - %s", path)

    def process_entry_list(self, n_entry=None, n_skip=None, entry_list=None):
        """Create the list of entries that will be loaded.

        Parameters
        ----------
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : List[int], optional
            List of integer entry IDs to load
        """
        if entry_list is not None:
            if n_entry is not None or n_skip is not None:
                raise ValueError(
                    "Cannot specify `entry_list` along with `n_entry` or `n_skip`."
                )
            entry_index = np.asarray(entry_list, dtype=np.int64)
            if len(entry_index) and (
                entry_index.min() < 0 or entry_index.max() >= self.num_entries
            ):
                raise IndexError("Some entries in `entry_list` are out of range.")

        else:
            n_skip = n_skip or 0
            entry_index = np.arange(n_skip, self.num_entries, dtype=np.int64)
            if n_entry is not None and n_entry >= 0:
                entry_index = entry_index[:n_entry]

        if not len(entry_index):
            logger.warning("No entry selected for reading.")

        self.entry_index = entry_index

    def __len__(self):
        """Returns the number of entries to read."""
        return len(self.entry_index)

    def __getitem__(self, idx):
        """Returns a specific entry."""
        return self.get(idx)

    def get(self, idx):
        """Returns the inputs of a specific entry.

        Parameters
        ----------
        idx : int
            Index in the list of selected entries

        Returns
        -------
        EventInputs
            Input collections of the event
        """
        if idx < 0 or idx >= len(self.entry_index):
            raise IndexError(f"Entry {idx} out of range ({len(self.entry_index)}).")

        entry = self.entry_index[idx]
        file_idx = self.file_index[entry]
        local = int(entry - self.file_offsets[file_idx])
        with h5py.File(self.file_paths[file_idx], "r") as in_file:
            info = in_file["events"][local]
            return EventInputs(
                jets=self.load_jets(in_file, local),
                candidates=self.load_candidates(in_file, local),
                trigger_objects=self.load_trigger_objects(in_file, local),
                mc_particles=self.load_mc_particles(in_file, local),
                is_data=bool(info["is_data"]),
                run=int(info["run"]),
                event=int(info["event"]),
            )

    @staticmethod
    def bounds(group, entry):
        """Returns the range of objects which belong to an entry.

        Parameters
        ----------
        group : h5py.Group
            Group which contains an `offsets` dataset
        entry : int
            Entry index in the file

        Returns
        -------
        slice
            Range of the objects of the entry in the flat datasets
        """
        start, end = group["offsets"][entry : entry + 2]
        return slice(int(start), int(end))

    def load_jets(self, in_file, entry):
        """Loads the jets of an entry along with their constituents."""
        group = in_file["jets"]
        span = self.bounds(group, entry)
        momenta = group["momentum"][span]
        cand_offsets = group["candidate_offsets"][span.start : span.stop + 1]
        cand_momenta = np.empty((0, 4))
        if len(cand_offsets):
            cand_momenta = in_file["jet_candidates/momentum"][
                cand_offsets[0] : cand_offsets[-1]
            ]
            cand_offsets = cand_offsets - cand_offsets[0]

        jets = []
        for i, mom in enumerate(momenta):
            cands = cand_momenta[cand_offsets[i] : cand_offsets[i + 1]]
            jets.append(PFJet(*mom, candidates=[PFCandidate(*c) for c in cands]))

        return jets

    def load_candidates(self, in_file, entry):
        """Loads the flat candidate collection of an entry."""
        group = in_file["candidates"]
        momenta = group["momentum"][self.bounds(group, entry)]

        return [PFCandidate(*mom) for mom in momenta]

    def load_trigger_objects(self, in_file, entry):
        """Loads the trigger objects of an entry, `None` if not stored."""
        if "trigger_objects" not in in_file:
            return None

        group = in_file["trigger_objects"]
        span = self.bounds(group, entry)
        names, etas, phis = (group[k][span] for k in ("name", "eta", "phi"))

        return [
            TriggerObject(name=n, eta=float(e), phi=float(p))
            for n, e, p in zip(names, etas, phis)
        ]

    def load_mc_particles(self, in_file, entry):
        """Loads the generator particles of an entry, `None` if not stored."""
        if "mc_particles" not in in_file:
            return None

        group = in_file["mc_particles"]
        span = self.bounds(group, entry)
        momenta, status = group["momentum"][span], group["status"][span]

        return [MCParticle(*mom, status=int(s)) for mom, s in zip(momenta, status)]
