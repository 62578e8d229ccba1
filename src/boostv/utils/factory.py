"""Contains functions needed to instantiate a class from a dictionary.

This allows to convert a YAML block into an instantiated reader or writer,
with the appropriate checks that the class exists.
"""

from copy import deepcopy

from .logger import logger

__all__ = ["module_dict", "instantiate"]


def module_dict(module):
    """Converts a module into a dictionary which maps names onto classes.

    Classes are registered under their class name and, if they define one,
    under their short `name` attribute (e.g. `csv` for the CSV writer).

    Parameters
    ----------
    module : module
        Module from which to fetch the classes

    Returns
    -------
    dict
        Dictionary which maps acceptable class names to classes themselves
    """
    classes = {}
    for cls_name in getattr(module, "__all__", dir(module)):
        if cls_name.startswith("_"):
            continue

        cls = getattr(module, cls_name)
        if not isinstance(cls, type):
            continue

        classes[cls_name] = cls
        if getattr(cls, "name", None):
            classes[cls.name] = cls

    return classes


def instantiate(classes, cfg, **kwargs):
    """Instantiates a class based on a configuration dictionary.

    The configuration is either a string (class name, no argument) or a block
    of the form:

    .. code-block:: yaml

        reader:
          name: hdf5
          file_keys: events.h5

    Parameters
    ----------
    classes : dict
        Dictionary which maps a class name onto a class
    cfg : Union[str, dict]
        Configuration
    **kwargs : dict, optional
        Additional parameters to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    config = deepcopy(cfg)
    if "name" not in config:
        raise ValueError("Could not find the name of the class under `name`.")

    class_name = config.pop("name")
    if class_name not in classes:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps names "
            f"to classes. Available names: {list(classes.keys())}"
        )

    for key in kwargs:
        if key in config:
            raise ValueError(f"The argument `{key}` is provided twice. Ambiguous.")
    config.update(kwargs)

    cls = classes[class_name]
    try:
        return cls(**config)

    except Exception as err:
        logger.error(
            "Failed to instantiate %s with these arguments: %s", cls.__name__, config
        )
        raise err
