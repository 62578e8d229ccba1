"""I/O tools used to read event inputs and write analysis records.

- `read`: file readers (HDF5)
- `write`: record writers (CSV)
"""

from .factories import reader_factory, writer_factory
