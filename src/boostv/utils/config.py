"""Module in charge of loading analysis configuration files.

A configuration file is a YAML file with (at most) three top-level blocks:

.. code-block:: yaml

    base:
      verbosity: info
      num_workers: 1
    io:
      reader:
        name: hdf5
        file_keys: events.h5
      writer:
        name: csv
        file_name: records.csv
    analysis:
      cone_size: 0.8
      ...

On top of plain YAML, the loader supports:
- `include: base.yaml` (or a list of files) at the top level, merged first;
- `key: !include block.yaml` to load a single block from another file;
- dot-notation overrides of nested parameters (`analysis.cone_size: 1.2`).
"""

import os
import re
from copy import deepcopy

import yaml

__all__ = ["ConfigLoader", "load_config", "merge_config", "set_nested"]

# Matches `block.sub_block.key` style override keys
OVERRIDE_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)+$")


class ConfigLoader(yaml.SafeLoader):
    """YAML loader which resolves `!include` tags relative to the file."""

    def __init__(self, stream):
        """Initialize the loader.

        Parameters
        ----------
        stream : _io.TextIOWrapper
            Output of python's `open` function on a yaml file
        """
        self._root = os.path.dirname(getattr(stream, "name", "."))
        super().__init__(stream)

    def include(self, node):
        """Load the YAML file referenced by an `!include` node.

        Parameters
        ----------
        node : yaml.Node
            Scalar node containing the path to the file
        """
        path = os.path.join(self._root, self.construct_scalar(node))
        with open(path, "r", encoding="utf-8") as cfg_file:
            return yaml.load(cfg_file, Loader=ConfigLoader)


ConfigLoader.add_constructor("!include", ConfigLoader.include)


def merge_config(base, override):
    """Recursively merges one configuration dictionary into another.

    Parameters
    ----------
    base : dict
        Base configuration
    override : dict
        Configuration which takes precedence

    Returns
    -------
    dict
        New, merged configuration dictionary
    """
    result = deepcopy(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_config(result[key], value)
        else:
            result[key] = value

    return result


def set_nested(cfg, key_path, value):
    """Sets a nested configuration value using dot notation.

    Parameters
    ----------
    cfg : dict
        Configuration dictionary, modified in place
    key_path : str
        Dot-separated path to the key (e.g. "analysis.pruning.zcut")
    value : object
        Value to set

    Returns
    -------
    dict
        Modified configuration dictionary
    """
    keys = key_path.split(".")
    block = cfg
    for key in keys[:-1]:
        block = block.setdefault(key, {})
        if not isinstance(block, dict):
            raise ValueError(f"Cannot set `{key_path}`: `{key}` is not a block.")

    block[keys[-1]] = value

    return cfg


def load_config(cfg_path):
    """Load a configuration file to a dictionary.

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file

    Returns
    -------
    dict
        Loaded and merged configuration dictionary
    """
    root_dir = os.path.dirname(os.path.abspath(cfg_path))
    with open(cfg_path, "r", encoding="utf-8") as cfg_file:
        raw = yaml.load(cfg_file, Loader=ConfigLoader)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration must be a dictionary, got {type(raw)}.")

    # Sort the top-level keys into includes, overrides and regular blocks
    includes = raw.pop("include", [])
    if isinstance(includes, str):
        includes = [includes]
    elif not isinstance(includes, list):
        raise ValueError(
            f"`include` must be a string or a list of strings, got {type(includes)}."
        )

    overrides = {k: raw.pop(k) for k in list(raw) if OVERRIDE_PATTERN.match(k)}

    # Included files are loaded first, in order, the main file on top
    cfg = {}
    for include in includes:
        path = os.path.join(root_dir, include)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Included file not found: {path}")
        cfg = merge_config(cfg, load_config(path))

    cfg = merge_config(cfg, raw)

    # Apply the dot-notation overrides last
    for key_path, value in overrides.items():
        if isinstance(value, str):
            try:
                value = yaml.safe_load(value)
            except yaml.YAMLError:
                pass
        set_nested(cfg, key_path, value)

    return cfg
