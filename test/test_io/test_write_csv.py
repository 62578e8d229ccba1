"""Test that the CSV writer works as intended."""

import os

import pytest

from boostv.data import AnalysisRecord, Jet, JetRecord
from boostv.io import writer_factory
from boostv.io.write import CSVWriter


@pytest.fixture(name="csv_output")
def fixture_csv_output(tmp_path):
    """Create a dummy output path for a CSV file.

    Parameters
    ----------
    tmp_path : str
       Generic pytest fixture used to handle temporary test files
    """
    return os.path.join(tmp_path, "dummy.csv")


def read_rows(path):
    """Reads a CSV file back as a header and a list of rows."""
    with open(path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    return lines[0].split(","), [line.split(",") for line in lines[1:]]


class TestCSVWriter:
    """Test the CSV record writer."""

    def test_records(self, csv_output):
        """Test writing analysis records, one row per record."""
        records = [AnalysisRecord(run=1, event=i) for i in range(3)]
        records[0].jet1 = JetRecord.from_jet(Jet(momentum=[1.0, 0.0, 0.0, 2.0]))

        writer = CSVWriter(csv_output)
        writer(records)

        header, rows = read_rows(csv_output)
        assert header == list(AnalysisRecord().scalar_dict().keys())
        assert len(rows) == 3
        assert rows[2][header.index("event")] == "2"
        assert float(rows[0][header.index("jet1_pt")]) == pytest.approx(1.0)
        assert float(rows[1][header.index("jet1_pt")]) == -1.0

    def test_dicts(self, csv_output):
        """Test writing plain dictionaries of scalars."""
        writer = CSVWriter(csv_output)
        writer([{"a": 1, "b": 2.5}, {"a": 3, "b": 4.0}])

        header, rows = read_rows(csv_output)
        assert header == ["a", "b"]
        assert rows == [["1", "2.5"], ["3", "4.0"]]

    def test_exists(self, csv_output):
        """Test the behavior when the output file already exists."""
        CSVWriter(csv_output)([{"a": 1}])
        with pytest.raises(FileExistsError):
            CSVWriter(csv_output)

        CSVWriter(csv_output, overwrite=True)([{"a": 2}])
        _, rows = read_rows(csv_output)
        assert rows == [["2"]]

    def test_append(self, csv_output):
        """Test appending rows to an existing file."""
        with pytest.raises(FileNotFoundError):
            CSVWriter(csv_output, append=True)

        CSVWriter(csv_output)([{"a": 1, "b": 2}])
        writer = CSVWriter(csv_output, append=True)
        assert writer.result_keys == ["a", "b"]
        writer([{"a": 3, "b": 4}])

        _, rows = read_rows(csv_output)
        assert rows == [["1", "2"], ["3", "4"]]

    def test_key_mismatch(self, csv_output):
        """Test that rows must match the header of the file."""
        writer = CSVWriter(csv_output)
        writer.append({"a": 1, "b": 2})

        with pytest.raises(KeyError):
            writer.append({"a": 1, "b": 2, "c": 3})
        with pytest.raises(KeyError):
            writer.append({"a": 1})

        writer = CSVWriter(csv_output, append=True, accept_missing=True)
        writer.append({"b": 5})
        _, rows = read_rows(csv_output)
        assert rows[-1] == ["-1", "5"]

    def test_factory(self, csv_output):
        """Test instantiating the writer from a configuration block."""
        writer = writer_factory({"name": "csv", "file_name": csv_output})
        assert isinstance(writer, CSVWriter)
        assert writer.file_name == csv_output
