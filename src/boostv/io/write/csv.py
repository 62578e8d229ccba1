"""Module to write analysis records to CSV files."""

import os

from boostv.data.base import DataBase

__all__ = ["CSVWriter"]


class CSVWriter:
    """Writes analysis records to a CSV file.

    Each record is flattened to scalars with :meth:`DataBase.scalar_dict`,
    one row per record. The header is built from the keys of the first record
    written to the file.

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          ...
          writer:
            name: csv
            file_name: output.csv
    """

    name = "csv"

    def __init__(
        self,
        file_name="output.csv",
        overwrite=False,
        append=False,
        accept_missing=False,
    ):
        """Initialize the basics of the output file.

        Parameters
        ----------
        file_name : str, default 'output.csv'
            Name of the output CSV file
        overwrite : bool, default False
            If True, overwrite the output file if it already exists
        append : bool, default False
            If True, add more rows to an existing CSV file
        accept_missing : bool, default False
            Tolerate records with missing keys (filled with -1)
        """
        # Check that output file does not already exist, if requested
        if not overwrite and not append and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        # Store persistent attributes
        self.file_name = file_name
        self.accept_missing = accept_missing
        self.result_keys = None
        if append:
            if not os.path.isfile(file_name):
                raise FileNotFoundError(
                    f"File not found at path: {file_name}. When using "
                    "`append=True` in CSVWriter, the file must exist at "
                    "the prescribed path before data is written to it."
                )

            with open(self.file_name, "r", encoding="utf-8") as out_file:
                self.result_keys = out_file.readline().rstrip("\n").split(",")

    def __call__(self, records):
        """Writes a list of records to file.

        Parameters
        ----------
        records : List[Union[DataBase, dict]]
            Records to store
        """
        for record in records:
            self.append(record)

    def create(self, result_blob):
        """Initialize the header of the CSV file, record the keys to be stored.

        Parameters
        ----------
        result_blob : dict
            Flattened record
        """
        # Save the list of keys to store
        self.result_keys = list(result_blob.keys())

        # Create a header and write it to file
        with open(self.file_name, "w", encoding="utf-8") as out_file:
            header_str = ",".join(self.result_keys)
            out_file.write(header_str + "\n")

    def append(self, record):
        """Append one record to the CSV file.

        Parameters
        ----------
        record : Union[DataBase, dict]
            Record or dictionary of scalars to store
        """
        result_blob = record
        if isinstance(record, DataBase):
            result_blob = record.scalar_dict()

        if self.result_keys is None:
            # If this function has never been called, initialize the CSV file
            self.create(result_blob)

        elif list(result_blob.keys()) != self.result_keys:
            # If the keys differ, check the discrepancies
            missing = self.array_diff(self.result_keys, result_blob.keys())
            excess = self.array_diff(result_blob.keys(), self.result_keys)
            if len(excess):
                raise KeyError(
                    "There are keys in this entry which were not "
                    "present when the CSV file was initialized. "
                    f"New keys: {sorted(excess)}"
                )

            if len(missing) and not self.accept_missing:
                raise KeyError(
                    "There are keys missing in this entry which were "
                    "present when the CSV file was initialized. "
                    f"Missing keys: {sorted(missing)}"
                )

            new_result_blob = {k: -1 for k in self.result_keys}
            new_result_blob.update(result_blob)
            result_blob = new_result_blob

        # Append file
        with open(self.file_name, "a", encoding="utf-8") as out_file:
            result_str = ",".join([str(result_blob[k]) for k in self.result_keys])
            out_file.write(result_str + "\n")

    @staticmethod
    def array_diff(array_x, array_y):
        """Returns the elements of the first array absent from the second.

        Parameters
        ----------
        array_x : List[str]
            First array of strings
        array_y : List[str]
            Second array of strings

        Returns
        -------
        Set[str]
            Set of keys that appear in `array_x` but not in `array_y`
        """
        return set(array_x).difference(set(array_y))
