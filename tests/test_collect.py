import pytest

from csv_encoder.collect import collect_records, records_from_csv_bytes, sniff_delimiter


def test_collect_records_materializes_iterables():
    source = ({"n": i} for i in range(3))
    assert collect_records(source) == [{"n": 0}, {"n": 1}, {"n": 2}]


def test_collect_records_rejects_non_mappings():
    with pytest.raises(TypeError, match="record 1"):
        collect_records([{"a": 1}, ["a", 1]])


def test_sniff_falls_back_to_comma():
    assert sniff_delimiter("") == (",", False)


def test_semicolon_source():
    records, report = records_from_csv_bytes(b"a;b\n1;2\n3;4\n")
    assert report["detected_delimiter"] == ";"
    assert report["rows"] == 2
    assert records == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]


def test_latin1_source():
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")
    records, report = records_from_csv_bytes(raw)
    assert records[0]["city"] == "Montréal"
    assert report["decode_used"]


def test_utf8_bom_is_stripped():
    records, report = records_from_csv_bytes(b"\xef\xbb\xbfid,name\n1,Zo\xc3\xab\n")
    assert list(records[0].keys()) == ["id", "name"]
    assert records[0]["name"] == "Zoë"


def test_short_and_long_rows():
    records, _ = records_from_csv_bytes(b"a,b,c\n1,2\n4,5,6,7\n")
    assert records == [{"a": "1", "b": "2", "c": None}, {"a": "4", "b": "5", "c": "6"}]


def test_quoted_newlines_survive():
    records, _ = records_from_csv_bytes(b'id,note\r\n1,"two\r\nlines"\r\n')
    assert records == [{"id": "1", "note": "two\r\nlines"}]
