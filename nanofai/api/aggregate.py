import itertools
import os
from typing import Iterable, Iterator, List, Tuple, Union

import pandas as pd
from loguru import logger

from nanofai.api.io import NamingConvention, read_index

SampleKey = Tuple[str, bool]


class IndexDataset:
    """Read records pooled from many index files.

    Holds the flat, per-read view used for correlation and plotting as well
    as the (sample, filtered) grouping used for summaries. The underlying
    dataframe should be treated as read only.
    """

    def __init__(self, records: pd.DataFrame):
        self._records = records

    @property
    def records(self) -> pd.DataFrame:
        return self._records

    @property
    def samples(self) -> List[SampleKey]:
        """(sample, filtered) keys in the order the files were read"""
        keys = self._records[["sample", "filtered"]].drop_duplicates()
        return [(s, bool(f)) for s, f in keys.itertuples(index=False)]

    @property
    def n_reads(self) -> int:
        return self._records.shape[0]

    def groups(self) -> Iterator[Tuple[SampleKey, pd.DataFrame]]:
        grouped = self._records.groupby(["sample", "filtered"], sort=False)
        for (sample, filtered), df in grouped:
            yield (sample, bool(filtered)), df

    def __len__(self) -> int:
        return self.n_reads

    def __repr__(self) -> str:
        return f"IndexDataset(n_samples={len(self.samples)}, n_reads={self.n_reads})"


def _read_indices(
    paths: Iterable[Union[str, os.PathLike]],
    filtered: bool,
    naming: NamingConvention,
    time_format: str,
) -> Iterator[pd.DataFrame]:
    for path in paths:
        logger.info(f"Reading {'filtered' if filtered else 'unfiltered'} index {path}")
        yield read_index(path, filtered=filtered, naming=naming, time_format=time_format)


def aggregate_indices(
    filtered_paths: Iterable[Union[str, os.PathLike]] = (),
    unfiltered_paths: Iterable[Union[str, os.PathLike]] = (),
    naming: NamingConvention = None,
    time_format: str = "ISO8601",
) -> IndexDataset:
    """Parses filtered and unfiltered index files into a single dataset.

    Files are read in the order given, filtered first. Samples are not
    de-duplicated: supplying the same file twice counts its reads twice.

    Args:
        filtered_paths (Iterable): Index files containing filtered reads.
        unfiltered_paths (Iterable): Index files containing unfiltered reads.
        naming (NamingConvention, optional): File name to sample mapping.
        time_format (str, optional): Timestamp format. Defaults to "ISO8601".

    Raises:
        ValueError: No files were supplied.

    Returns:
        IndexDataset: Pooled records.
    """

    naming = naming or NamingConvention()

    frames = list(
        itertools.chain(
            _read_indices(filtered_paths, True, naming, time_format),
            _read_indices(unfiltered_paths, False, naming, time_format),
        )
    )

    if not frames:
        raise ValueError("No index files supplied")

    records = pd.concat(frames, ignore_index=True)
    logger.info(f"Aggregated {records.shape[0]} reads from {len(frames)} index files")

    return IndexDataset(records)
