import os

import pandas as pd
import pydantic
import pytest

from nanofai.api.errors import NotFoundError, ParseError
from nanofai.api.io import (
    INDEX_RECORD_COLUMNS,
    IndexRecord,
    NamingConvention,
    discover_index_files,
    read_index,
    records_from_dataframe,
)


@pytest.fixture
def known_rows():
    return [
        ("read_1", "2021-03-01T10:00:00Z", 1200, 9, 60, 61),
        ("read_2", "2021-03-01T10:00:30Z", 850, 1240, 60, 61),
        ("read_3", "2021-03-01T10:05:00.500Z", 4000, 2115, 80, 81),
    ]


def test_read_index_values(tmp_path, fai_writer, known_rows):

    path = fai_writer(tmp_path / "sampleA_filt.sample.datetime.fai", known_rows)
    df = read_index(path, filtered=True)

    assert list(df.columns) == INDEX_RECORD_COLUMNS
    assert df["name"].tolist() == ["read_1", "read_2", "read_3"]
    assert df["length"].tolist() == [1200, 850, 4000]
    assert df["offset"].tolist() == [9, 1240, 2115]
    assert df["line_bases"].tolist() == [60, 60, 80]
    assert df["line_width"].tolist() == [61, 61, 81]

    expected = pd.Timestamp("2021-03-01T10:00:00Z").timestamp()
    assert df["time"].iloc[0] == pytest.approx(expected)
    assert df["time"].iloc[1] - df["time"].iloc[0] == pytest.approx(30)
    assert df["time"].iloc[2] - df["time"].iloc[0] == pytest.approx(300.5)


def test_records_from_dataframe(tmp_path, fai_writer, known_rows):

    path = fai_writer(tmp_path / "sampleA_filt.sample.datetime.fai", known_rows)
    records = list(records_from_dataframe(read_index(path, filtered=True)))

    assert len(records) == 3
    assert all(isinstance(r, IndexRecord) for r in records)
    assert records[1].name == "read_2"
    assert records[1].length == 850
    assert records[1].offset == 1240

    with pytest.raises(Exception):
        records[0].length = 1


@pytest.mark.parametrize(
    "fn,filtered,sample",
    [
        ("sampleA_filt.sample.datetime.fai", True, "sampleA"),
        ("sampleB.sample.datetime.fai", False, "sampleB"),
        ("sampleC_filt.sample.datetime.fai.gz", True, "sampleC"),
        ("run_2.1_filt.sample.datetime.fai", True, "run_2.1"),
    ],
)
def test_sample_and_filter_tagging(tmp_path, fai_writer, fai_rows, fn, filtered, sample):

    path = fai_writer(tmp_path / fn, fai_rows([10, 20, 30]), compress=fn.endswith(".gz"))
    df = read_index(path, filtered=filtered)

    assert (df["sample"] == sample).all()
    assert (df["filtered"] == filtered).all()
    assert df.shape[0] == 3


def test_custom_naming_convention(tmp_path, fai_writer, fai_rows):

    naming = NamingConvention(filtered_suffix=".pass.fai", unfiltered_suffix=".all.fai")
    path = fai_writer(tmp_path / "flowcell1.pass.fai", fai_rows([10, 20]))

    df = read_index(path, filtered=True, naming=naming)
    assert (df["sample"] == "flowcell1").all()


def test_unexpected_file_name_keeps_basename(tmp_path, fai_writer, fai_rows):

    path = fai_writer(tmp_path / "odd_name.fai", fai_rows([10, 20]))
    df = read_index(path, filtered=False)
    assert (df["sample"] == "odd_name.fai").all()


def test_missing_file(tmp_path):

    with pytest.raises(NotFoundError) as e:
        read_index(tmp_path / "missing.sample.datetime.fai", filtered=False)

    assert isinstance(e.value, FileNotFoundError)
    assert "missing.sample.datetime.fai" in str(e.value)


def test_empty_file(tmp_path):

    path = tmp_path / "empty.sample.datetime.fai"
    path.write_text("")

    df = read_index(path, filtered=False)
    assert df.empty
    assert list(df.columns) == INDEX_RECORD_COLUMNS


@pytest.mark.parametrize(
    "bad_row,line_number",
    [
        (("read_x", "not-a-time", 100, 0, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", "abc", 0, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", 0, 0, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", 100, -5, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", 100.5, 0, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", 100, 0, 60), 2),
        (("read_x", "2021-03-01T10:00:00Z", 99999999999999999999, 0, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", 100, 9223372036854775808, 60, 61), 2),
        (("read_x", "2021-03-01T10:00:00Z", 100, 0, "", 61), 2),
        ((), 2),
    ],
)
def test_malformed_rows(tmp_path, fai_writer, bad_row, line_number):

    rows = [
        ("read_1", "2021-03-01T09:00:00Z", 100, 0, 60, 61),
        bad_row,
        ("read_3", "2021-03-01T11:00:00Z", 300, 0, 60, 61),
    ]
    path = fai_writer(tmp_path / "bad.sample.datetime.fai", rows)

    with pytest.raises(ParseError) as e:
        read_index(path, filtered=False)

    assert e.value.line_number == line_number
    assert e.value.path == path
    assert f"{path}:{line_number}" in str(e.value)


def test_extra_column(tmp_path, fai_writer):

    rows = [
        ("read_1", "2021-03-01T09:00:00Z", 100, 0, 60, 61),
        ("read_2", "2021-03-01T09:00:00Z", 100, 0, 60, 61, "extra"),
    ]
    path = fai_writer(tmp_path / "bad.sample.datetime.fai", rows)

    with pytest.raises(ParseError) as e:
        read_index(path, filtered=False)

    assert e.value.line_number == 2


@pytest.mark.parametrize(
    "text,line_number",
    [
        ("\nread_1\t2021-03-01T09:00:00Z\t100\t0\t60\t61\n", 1),
        ("\n\n", 1),
        ("\n", 1),
        (
            "read_1\t2021-03-01T09:00:00Z\t100\t0\t60\n"
            "read_2\t2021-03-01T09:01:00Z\t200\t0\t60\t61\n"
            "read_3\t2021-03-01T09:02:00Z\t300\t0\t60\t61\n",
            1,
        ),
        (
            "read_1\t2021-03-01T09:00:00Z\t100\t0\t60\t61\n"
            "read_2\t2021-03-01T09:01:00Z\t200\t0\t60\t61\n"
            "\n",
            3,
        ),
    ],
)
def test_blank_and_short_lines(tmp_path, text, line_number):

    path = tmp_path / "blank.sample.datetime.fai"
    path.write_text(text)

    with pytest.raises(ParseError) as e:
        read_index(path, filtered=False)

    assert e.value.line_number == line_number


def test_largest_int64_accepted(tmp_path, fai_writer):

    rows = [("read_1", "2021-03-01T09:00:00Z", 100, 9223372036854775807, 60, 61)]
    path = fai_writer(tmp_path / "big.sample.datetime.fai", rows)

    df = read_index(path, filtered=False)
    assert df["offset"].iloc[0] == 9223372036854775807


@pytest.mark.parametrize(
    "field,value",
    [("length", 0), ("length", -1), ("offset", -1), ("line_bases", -1), ("line_width", -1)],
)
def test_index_record_rejects_out_of_range(field, value):

    fields = dict(
        name="read_1",
        time=0.0,
        length=100,
        offset=0,
        line_bases=60,
        line_width=61,
        sample="s",
        filtered=True,
    )
    fields[field] = value

    with pytest.raises(pydantic.ValidationError):
        IndexRecord(**fields)


def test_discover_index_files(index_dirs):

    filtered_dir, unfiltered_dir = index_dirs

    paths = discover_index_files(unfiltered_dir)
    assert [os.path.basename(p) for p in paths] == [
        "sampleA.sample.datetime.fai",
        "sampleB.sample.datetime.fai",
    ]

    with pytest.raises(NotFoundError):
        discover_index_files(os.path.join(filtered_dir, "nope"))
