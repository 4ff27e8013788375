import gzip
import os

import pytest


def write_fai(path, rows, compress=False):
    """Writes rows of (name, time, length, offset, line_bases, line_width) as a tsv"""

    text = "".join("\t".join(str(v) for v in row) + "\n" for row in rows)
    if compress:
        with gzip.open(path, "wt") as w:
            w.write(text)
    else:
        with open(path, "w") as w:
            w.write(text)
    return str(path)


def make_rows(lengths, start=0, step=60, prefix="read"):
    """Index rows with one read per minute starting from the epoch + start seconds"""

    import pandas as pd

    t0 = pd.Timestamp("2021-03-01T10:00:00Z")
    rows = []
    offset = 0
    for ii, length in enumerate(lengths):
        time = (t0 + pd.Timedelta(seconds=start + ii * step)).strftime("%Y-%m-%dT%H:%M:%SZ")
        rows.append((f"{prefix}_{ii}", time, length, offset, 60, 61))
        offset += length + length // 60 + 1
    return rows


@pytest.fixture
def fai_writer():
    return write_fai


@pytest.fixture
def fai_rows():
    return make_rows


@pytest.fixture
def index_dirs(tmp_path):
    """Filtered and unfiltered directories holding two samples each"""

    filtered = tmp_path / "filtered"
    unfiltered = tmp_path / "non-filtered"
    filtered.mkdir()
    unfiltered.mkdir()

    write_fai(
        filtered / "sampleA_filt.sample.datetime.fai",
        make_rows([1000, 2000, 3000, 4000, 5000], prefix="a"),
    )
    write_fai(
        filtered / "sampleB_filt.sample.datetime.fai",
        make_rows([1500, 2500, 3500], prefix="b"),
    )
    write_fai(
        unfiltered / "sampleA.sample.datetime.fai",
        make_rows([100, 1000, 2000, 3000, 4000, 5000], prefix="a"),
    )
    write_fai(
        unfiltered / "sampleB.sample.datetime.fai",
        make_rows([200, 1500, 2500, 3500], prefix="b"),
    )
    # Not matching the discovery pattern
    write_fai(unfiltered / "notes.txt", [("x", "2021", 1, 0, 1, 1)])

    return str(filtered), str(unfiltered)
