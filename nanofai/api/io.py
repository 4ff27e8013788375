import glob
import os
from typing import Iterator, List, Union

import pandas as pd
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from xopen import xopen

from nanofai.api.errors import NotFoundError, ParseError

FAI_COLUMNS = ["name", "time", "length", "offset", "line_bases", "line_width"]
INTEGER_COLUMNS = ["length", "offset", "line_bases", "line_width"]
INDEX_RECORD_COLUMNS = FAI_COLUMNS + ["sample", "filtered"]

EPOCH = pd.Timestamp("1970-01-01", tz="UTC")
INT64_MAX = 2**63 - 1


class IndexRecord(BaseModel):
    """Metadata for a single sequenced read taken from a time-augmented faidx file"""

    model_config = ConfigDict(frozen=True)

    name: str
    time: float
    length: int = Field(gt=0)
    offset: int = Field(ge=0)
    line_bases: int = Field(ge=0)
    line_width: int = Field(ge=0)
    sample: str
    filtered: bool


class NamingConvention(BaseModel):
    """Maps index file names to sample names.

    Upstream tooling names its output ``<sample>_filt.sample.datetime.fai`` for
    filtered reads and ``<sample>.sample.datetime.fai`` for unfiltered reads.
    Nothing enforces this; it is an assumption about the files we are given.
    """

    model_config = ConfigDict(frozen=True)

    filtered_suffix: str = "_filt.sample.datetime.fai"
    unfiltered_suffix: str = ".sample.datetime.fai"

    def suffix(self, filtered: bool) -> str:
        return self.filtered_suffix if filtered else self.unfiltered_suffix

    def sample_name(self, path: Union[str, os.PathLike], filtered: bool) -> str:
        """Strips the expected suffix (and any .gz extension) from the file's base name"""

        basename = os.path.basename(str(path))
        if basename.endswith(".gz"):
            basename = basename[: -len(".gz")]

        suffix = self.suffix(filtered)
        if basename.endswith(suffix) and len(basename) > len(suffix):
            return basename[: -len(suffix)]

        logger.warning(
            f"{path} does not end with {suffix}; using {basename} as the sample name"
        )
        return basename


def _empty_index() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "name": pd.Series(dtype="object"),
            "time": pd.Series(dtype="float64"),
            **{col: pd.Series(dtype="int64") for col in INTEGER_COLUMNS},
            "sample": pd.Series(dtype="object"),
            "filtered": pd.Series(dtype="bool"),
        }
    )


def _first_bad_line(mask: pd.Series) -> int:
    # Row labels are 0-based line positions in the file
    return int(mask.idxmax()) + 1


def _read_raw(path: Union[str, os.PathLike]) -> pd.DataFrame:
    """Splits each line into fields, checking every line has exactly six.

    Returns None only for a zero-length file.
    """

    try:
        with xopen(path) as handle:
            text = handle.read()
    except FileNotFoundError:
        raise NotFoundError(path)
    except (IsADirectoryError, PermissionError) as e:
        raise NotFoundError(path, reason=f"cannot be opened ({e.strerror})")

    if not text:
        return None

    lines = pd.Series(text.splitlines(), dtype="object")

    # Blank lines count as a single empty field
    n_fields = lines.str.count("\t") + 1
    bad = n_fields != len(FAI_COLUMNS)
    if bad.any():
        line_number = _first_bad_line(bad)
        raise ParseError(
            path,
            f"expected {len(FAI_COLUMNS)} tab separated columns, "
            f"found {n_fields.iloc[line_number - 1]}",
            line_number=line_number,
        )

    raw = lines.str.split("\t", expand=True)
    raw.columns = FAI_COLUMNS
    return raw


def _parse_integers(raw: pd.DataFrame, path) -> dict:
    parsed = {}
    for col in INTEGER_COLUMNS:
        digits = raw[col].str.strip()
        bad = ~digits.str.fullmatch(r"\d+")
        if col == "length":
            bad |= digits.str.fullmatch(r"0+")

        values = digits.where(~bad, "0").map(int)
        bad |= values > INT64_MAX

        if bad.any():
            line_number = _first_bad_line(bad)
            value = raw[col].iloc[line_number - 1]
            expected = "a positive integer" if col == "length" else "a non-negative integer"
            raise ParseError(
                path,
                f"column {col} must be {expected}, got {value!r}",
                line_number=line_number,
            )

        parsed[col] = values.astype("int64")

    return parsed


def _parse_times(raw: pd.Series, path, time_format: str) -> pd.Series:
    try:
        timestamps = pd.to_datetime(raw, format=time_format, errors="coerce", utc=True)
    except (ValueError, TypeError) as e:
        raise ParseError(path, f"unable to parse timestamps ({e})")

    bad = timestamps.isna()
    if bad.any():
        line_number = _first_bad_line(bad)
        raise ParseError(
            path,
            f"unparseable timestamp {raw.iloc[line_number - 1]!r}",
            line_number=line_number,
        )

    return (timestamps - EPOCH).dt.total_seconds()


def read_index(
    path: Union[str, os.PathLike],
    filtered: bool,
    naming: NamingConvention = None,
    time_format: str = "ISO8601",
) -> pd.DataFrame:
    """Parses a time-augmented FASTA index into a dataframe of read records.

    The file is tab separated with no header and six columns:
    name, time, length, offset, line_bases, line_width. Every row is
    tagged with the sample name (derived from the file name) and the
    filter status supplied.

    Args:
        path (Union[str, os.PathLike]): Index file, optionally gzip compressed.
        filtered (bool): Whether the reads passed upstream filtering.
        naming (NamingConvention, optional): File name to sample mapping.
        time_format (str, optional): Timestamp format passed to pd.to_datetime. Defaults to "ISO8601".

    Raises:
        NotFoundError: The file does not exist or cannot be opened.
        ParseError: A row is malformed. Reports the file and line number.

    Returns:
        pd.DataFrame: One row per read with columns INDEX_RECORD_COLUMNS.
    """

    raw = _read_raw(path)

    naming = naming or NamingConvention()
    sample = naming.sample_name(path, filtered)

    if raw is None:
        logger.warning(f"{path} is empty")
        return _empty_index().assign(sample=sample, filtered=filtered)

    missing = (raw.apply(lambda col: col.str.strip()) == "").any(axis=1)
    if missing.any():
        raise ParseError(
            path,
            "empty field",
            line_number=_first_bad_line(missing),
        )

    df = pd.DataFrame(
        {
            "name": raw["name"],
            "time": _parse_times(raw["time"], path, time_format),
            **_parse_integers(raw, path),
        }
    ).assign(sample=sample, filtered=bool(filtered))

    logger.debug(f"Parsed {df.shape[0]} records from {path} (sample: {sample})")

    return df.reset_index(drop=True)


def records_from_dataframe(df: pd.DataFrame) -> Iterator[IndexRecord]:
    """Yields IndexRecords from a dataframe produced by read_index"""

    for row in df[INDEX_RECORD_COLUMNS].itertuples(index=False):
        yield IndexRecord(
            name=row.name,
            time=float(row.time),
            length=int(row.length),
            offset=int(row.offset),
            line_bases=int(row.line_bases),
            line_width=int(row.line_width),
            sample=row.sample,
            filtered=bool(row.filtered),
        )


def discover_index_files(
    directory: Union[str, os.PathLike], pattern: str = "*sample.datetime.fai"
) -> List[str]:
    """Returns the sorted paths in directory that match pattern"""

    if not os.path.isdir(directory):
        raise NotFoundError(directory, reason="directory not found")

    paths = sorted(glob.glob(os.path.join(str(directory), pattern)))
    logger.info(f"Found {len(paths)} index files in {directory}")
    return paths
