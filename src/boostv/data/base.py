"""Module with a parent class of all data structures."""

from dataclasses import dataclass

import numpy as np

__all__ = ["DataBase"]


@dataclass(eq=False)
class DataBase:
    """Base class of all data structures.

    Defines basic methods shared by all data structures.
    """

    # Fixed-length attributes as (key, size) or (key, (size, dtype)) pairs
    _fixed_length_attrs = ()

    # Variable-length attributes as (key, dtype) pairs
    _var_length_attrs = ()

    # Attributes specifying four-momentum components
    _mom_attrs = ()

    # Attributes that must never be stored to file
    _skip_attrs = ()

    # Four-momentum component labels
    _mom_axes = ("px", "py", "pz", "e")

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Gives default values to array-like attributes. If a default value was
        provided in the attribute definition, all instances of this class
        would point to the same memory location.
        """
        for attr, dtype in self._var_length_attrs:
            if getattr(self, attr) is None:
                setattr(self, attr, np.empty(0, dtype=dtype))
            else:
                setattr(self, attr, np.asarray(getattr(self, attr), dtype=dtype))

        for attr, size in self._fixed_length_attrs:
            if not isinstance(size, tuple):
                size, dtype = size, np.float64
            else:
                size, dtype = size
            if getattr(self, attr) is None:
                setattr(self, attr, np.full(size, -np.inf, dtype=dtype))
            else:
                setattr(self, attr, np.asarray(getattr(self, attr), dtype=dtype))

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        This overloads the default dataclass `__eq__` method to include an
        appopriate check for vector (numpy) attributes.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        if self.__class__ != other.__class__:
            return False

        for k, v in self.__dict__.items():
            v_other = getattr(other, k)
            if isinstance(v, np.ndarray):
                if v.shape != v_other.shape or (v_other != v).any():
                    return False
            elif v != v_other:
                return False

        return True

    def scalar_dict(self, prefix=None):
        """Returns the data class attributes as a dictionary of scalars.

        This is useful when storing data classes in CSV files, which expect
        a single scalar per column in the table. Four-momentum attributes are
        expanded with their component labels, other fixed-length arrays with
        their index and nested data classes with their attribute name.

        Parameters
        ----------
        prefix : str, optional
            String to prefix all the keys with

        Returns
        -------
        dict
            Dictionary of scalar values
        """
        result = {}
        for attr in self.__dataclass_fields__:
            if attr in self._skip_attrs:
                continue

            key = attr if prefix is None else f"{prefix}_{attr}"
            value = getattr(self, attr)
            if isinstance(value, DataBase):
                result.update(value.scalar_dict(prefix=key))

            elif np.isscalar(value):
                result[key] = value

            elif attr in self._mom_attrs:
                for i, v in enumerate(value):
                    result[f"{key}_{self._mom_axes[i]}"] = v

            elif attr in self.fixed_length_attrs:
                for i, v in enumerate(value):
                    result[f"{key}_{i}"] = v

            else:
                raise ValueError(
                    f"Cannot expand the `{attr}` attribute of "
                    f"`{self.__class__.__name__}` to scalar values."
                )

        return result

    @property
    def fixed_length_attrs(self):
        """Dictionary which maps fixed-length attributes onto their length."""
        return dict(self._fixed_length_attrs)
