"""boostv driver class.

Takes care of everything in one centralized place:
- Data loading
- Per-event reconstruction (serially or in a pool of worker processes)
- Writing the analysis records to file
- Summarizing the run
"""

import multiprocessing as mp
import time
from copy import deepcopy

import numpy as np
import yaml

from .io import reader_factory, writer_factory
from .pipeline import BoostedVPipeline
from .utils.logger import logger, set_verbosity
from .utils.stopwatch import StopwatchManager
from .version import __version__

__all__ = ["Driver"]


def process_chunk(reader, analysis, entries):
    """Processes a contiguous chunk of entries in a worker process.

    Each call builds its own pipeline, so that no state is shared between
    workers. The accumulation context is returned to be merged by the parent.

    Parameters
    ----------
    reader : object
        Reader which provides the event inputs
    analysis : dict
        Pipeline configuration, with a seeded ghost layout
    entries : List[int]
        Entries to process

    Returns
    -------
    List[AnalysisRecord]
        Records of the accepted events, in entry order
    AccumulationContext
        Histograms, counters and timings accumulated over the chunk
    """
    pipeline = BoostedVPipeline(analysis)
    records = []
    for entry in entries:
        record = pipeline.process_event(
            reader[entry], entry=int(reader.entry_index[entry])
        )
        if record is not None:
            records.append(record)

    return records, pipeline.context


class Driver:
    """Central boostv driver.

    Processes the global configuration and runs the appropriate modules:
      1. Load event inputs
      2. Run the reconstruction pipeline on each event
      3. Write the records of the accepted events to file

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        base:
          <Base driver configuration>
        io:
          <Input/output configuration>
        analysis:
          <Reconstruction pipeline configuration>
    """

    def __init__(self, cfg):
        """Initializes the class attributes.

        Parameters
        ----------
        cfg : dict
            Global configuration dictionary
        """
        # Initialize the timers
        self.watch = StopwatchManager()
        self.watch.initialize(["read", "process", "write"])

        # Process the full configuration dictionary and store it
        base, io, analysis = self.process_config(**cfg)

        # Initialize the base driver configuration parameters
        self.initialize_base(**base)

        # Initialize the input/output
        self.initialize_io(**io)

        # Initialize the reconstruction pipeline
        self.analysis = self.seed_analysis(analysis, self.seed)
        self.pipeline = BoostedVPipeline(self.analysis)

    def process_config(self, io, base=None, analysis=None):
        """Reads the configuration and dumps it to the logger.

        Parameters
        ----------
        io : dict
            I/O configuration dictionary
        base : dict, optional
            Base driver configuration dictionary
        analysis : dict, optional
            Reconstruction pipeline configuration dictionary

        Returns
        -------
        dict
            Processed configuration
        """
        # If there is no base or analysis configuration, use the defaults
        base = {} if base is None else base
        analysis = {} if analysis is None else analysis

        # Set the verbosity of the logger
        set_verbosity(base.get("verbosity", "info"))

        # If the seed is not set, randomize it. This is done here to keep a
        # record of the seed used to lay out the ghosts
        seed = base.get("seed")
        if seed is not None and not isinstance(seed, int):
            raise ValueError(f"The driver seed must be an integer, got: {seed}")
        if seed is None or seed < 0:
            base["seed"] = int(time.time())

        # Rebuild global configuration dictionary
        self.cfg = {"base": base, "io": io, "analysis": analysis}

        # Log environment information and configuration
        logger.info("Release version: %s\n", __version__)
        logger.info(yaml.dump(self.cfg, default_flow_style=None, sort_keys=False))

        return base, io, analysis

    def initialize_base(
        self,
        seed,
        num_workers=0,
        chunk_size=100,
        iterations=None,
        log_step=100,
        verbosity="info",
    ):
        """Initialize the base driver parameters.

        Parameters
        ----------
        seed : int
            Random number generator seed
        num_workers : int, default 0
            Number of worker processes (0 or 1 to run in the main process)
        chunk_size : int, default 100
            Number of consecutive entries handed to a worker at once
        iterations : int, optional
            Number of entries to process (-1 or `None` means all entries)
        log_step : int, default 100
            Number of entries between two progress messages
        verbosity : str, default 'info'
            Verbosity level to pass to the `logging` module. Pick one of
            'debug', 'info', 'warning', 'error', 'critical'.
        """
        if num_workers < 0:
            raise ValueError(f"`num_workers` must be non-negative, got {num_workers}.")
        if chunk_size < 1:
            raise ValueError(f"`chunk_size` must be at least 1, got {chunk_size}.")

        self.seed = seed
        self.num_workers = num_workers
        self.chunk_size = chunk_size
        self.iterations = iterations
        self.log_step = log_step

    def initialize_io(self, reader, writer=None):
        """Initializes the input/output scripts.

        Parameters
        ----------
        reader : dict
            Reader configuration dictionary
        writer : dict, optional
            Writer configuration dictionary
        """
        self.reader = reader_factory(reader)
        self.writer = None
        if writer is not None:
            self.writer = writer_factory(writer)

        # Harmonize the number of iterations with the number of entries
        if self.iterations is None or self.iterations < 0:
            self.iterations = len(self.reader)
        self.iterations = min(self.iterations, len(self.reader))

    @staticmethod
    def seed_analysis(analysis, seed):
        """Provides a seed to the ghost layout if it does not have one.

        Parameters
        ----------
        analysis : dict
            Pipeline configuration
        seed : int
            Seed to use if the ghost layout is not seeded

        Returns
        -------
        dict
            Updated copy of the pipeline configuration
        """
        analysis = deepcopy(analysis)
        area = analysis.get("area", {})
        if isinstance(area, dict) and area.get("seed") is None:
            analysis["area"] = {**area, "seed": int(seed)}

        return analysis

    def __len__(self):
        """Returns the number of entries to process."""
        return self.iterations

    def process(self, entry):
        """Process one entry.

        Parameters
        ----------
        entry : int
            Entry index in the reader

        Returns
        -------
        AnalysisRecord
            Record of the event, `None` if the event was skipped
        """
        self.watch.start("read")
        inputs = self.reader[entry]
        self.watch.stop("read")

        self.watch.start("process")
        record = self.pipeline.process_event(
            inputs, entry=int(self.reader.entry_index[entry])
        )
        self.watch.stop("process")

        return record

    def write(self, records):
        """Writes records to file, if a writer is configured.

        Parameters
        ----------
        records : List[AnalysisRecord]
            Records to write
        """
        if self.writer is None or not records:
            return

        self.watch.start("write")
        self.writer(records)
        self.watch.stop("write")

    def run(self):
        """Loop over the requested number of entries, process them.

        Returns
        -------
        Summary
            Summary of the run
        """
        if self.num_workers > 1:
            self.run_parallel()
        else:
            for entry in range(len(self)):
                record = self.process(entry)
                if record is not None:
                    self.write([record])

                if self.log_step and (entry + 1) % self.log_step == 0:
                    logger.info("Processed %d/%d entries", entry + 1, len(self))

        summary = self.pipeline.finalize()
        for key, value in self.watch.times_sum().items():
            logger.info("Time spent in %s: %.3f s (wall)", key, value.wall)
        for key, value in summary.times.items():
            logger.info("Time spent in stage %s: %.3f s (wall)", key, value.wall)

        return summary

    def run_parallel(self):
        """Processes the entries in a pool of worker processes.

        Entries are split into contiguous chunks. The records come back in
        entry order, the accumulation contexts of the workers are merged into
        the context of the driver pipeline.
        """
        entries = np.arange(len(self))
        chunks = [
            entries[i : i + self.chunk_size]
            for i in range(0, len(entries), self.chunk_size)
        ]
        logger.info(
            "Processing %d entries in %d chunk(s) with %d workers",
            len(entries),
            len(chunks),
            self.num_workers,
        )

        args = [(self.reader, self.analysis, chunk) for chunk in chunks]
        self.watch.start("process")
        with mp.Pool(self.num_workers) as pool:
            for i, (records, context) in enumerate(pool.starmap(process_chunk, args)):
                self.pipeline.context.merge(context)
                self.write(records)
                logger.info("Processed chunk %d/%d", i + 1, len(chunks))
        self.watch.stop("process")
