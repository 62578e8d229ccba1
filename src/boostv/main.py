"""Main functions that call the Driver class.

This is the first module called when launching the command-line interface.
It loads the configuration, applies the command-line overrides and runs the
`Driver`.
"""

import argparse
import sys

import yaml

from .driver import Driver
from .utils.config import load_config, set_nested

__all__ = ["run", "main"]


def run(cfg):
    """Execute the reconstruction over the configured input.

    Parameters
    ----------
    cfg : dict
        Full driver configuration

    Returns
    -------
    Summary
        Summary of the run
    """
    driver = Driver(cfg)

    return driver.run()


def parse_args(argv=None):
    """Parses the command-line arguments.

    Parameters
    ----------
    argv : List[str], optional
        Command-line arguments (defaults to `sys.argv[1:]`)

    Returns
    -------
    argparse.Namespace
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Run boosted-jet reconstruction")
    parser.add_argument(
        "--config", "-c", required=True, help="Path to the configuration file"
    )
    parser.add_argument(
        "--source", "-s", nargs="+", help="Path(s) to the input file(s)"
    )
    parser.add_argument("--output", "-o", help="Path to the output CSV file")
    parser.add_argument("-n", type=int, help="Number of entries to process")
    parser.add_argument("--nskip", type=int, help="Number of entries to skip")
    parser.add_argument(
        "--workers", "-j", type=int, help="Number of worker processes"
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a configuration parameter (e.g. analysis.pruning.zcut=0.2)",
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Command-line entry point.

    Parameters
    ----------
    argv : List[str], optional
        Command-line arguments (defaults to `sys.argv[1:]`)
    """
    args = parse_args(argv)

    # Load the configuration file
    cfg = load_config(args.config)
    if "io" not in cfg:
        raise KeyError("Configuration file must contain an `io` block.")
    cfg.setdefault("base", {})

    # Update the configuration with the command-line arguments
    reader = cfg["io"].setdefault("reader", {"name": "hdf5"})
    if args.source is not None:
        reader["file_keys"] = args.source
    if args.nskip is not None:
        reader["n_skip"] = args.nskip
    if args.output is not None:
        writer = cfg["io"].get("writer") or {"name": "csv"}
        writer["file_name"] = args.output
        cfg["io"]["writer"] = writer
    if args.n is not None:
        cfg["base"]["iterations"] = args.n
    if args.workers is not None:
        cfg["base"]["num_workers"] = args.workers

    for override in args.overrides:
        if "=" not in override:
            raise ValueError(f"Overrides must be of the form KEY=VALUE, got {override}")
        key, value = override.split("=", 1)
        set_nested(cfg, key.strip(), yaml.safe_load(value))

    run(cfg)


if __name__ == "__main__":
    main(sys.argv[1:])
