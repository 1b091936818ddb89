# tests/ingestors/test_sources.py
import pytest

from catalog.ingestors.base import SourceError, ValidationError, chunked, validate_json
from catalog.ingestors.sources.factory import SourceFactory
from catalog.ingestors.sources.local import LocalCsvSource
from conftest import FIXTURES_DIR


@pytest.fixture
def source():
    return SourceFactory.create("local", {"data_dir": str(FIXTURES_DIR / "data")})


def test_factory_creates_local_source(source):
    assert isinstance(source, LocalCsvSource)
    assert source.validate_connection() is True


def test_factory_rejects_unknown_type():
    with pytest.raises(SourceError):
        SourceFactory.create("s3", {})


def test_reads_rows_keyed_by_header(source):
    rows = list(source.read_rows("mobiles.csv"))

    assert len(rows) == 4
    assert rows[0]["Brand"] == "Samsung"
    assert rows[0]["Price in India"] == "₹1,000"


def test_missing_file(source):
    assert source.exists("mobiles.csv")
    assert not source.exists("laptops.csv")
    with pytest.raises(SourceError):
        list(source.read_rows("laptops.csv"))


def test_undecodable_file(tmp_path):
    (tmp_path / "bad.csv").write_bytes(b"Brand,Model\n\xff\xfe\xfa,\x81\n")
    source = LocalCsvSource({"data_dir": str(tmp_path)})

    with pytest.raises(SourceError):
        list(source.read_rows("bad.csv"))


def test_validate_json():
    assert validate_json('{"RAM": "8 GB"}') == {"RAM": "8 GB"}
    with pytest.raises(ValidationError):
        validate_json("{oops")
    with pytest.raises(ValidationError):
        validate_json("[1, 2]")


def test_chunked():
    assert list(chunked(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]
