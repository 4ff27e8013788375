import math
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd
import scipy.stats
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, computed_field

from nanofai.api.aggregate import IndexDataset
from nanofai.api.errors import DegenerateSampleError


class SampleSummary(BaseModel):
    """Read length statistics for all reads sharing a sample and filter status.

    Values are stored at full precision. When a sample has a single read the
    standard deviation, standard error and confidence interval are undefined
    and are set to None.
    """

    model_config = ConfigDict(frozen=True)

    sample: str
    filtered: bool
    n_reads: int = Field(ge=1)
    total_bases: int
    mean_length: float
    sd_length: Optional[float] = None
    median_length: float
    max_length: int
    q1: float
    q3: float
    confidence_level: float = 0.95

    @computed_field
    @property
    def se_length(self) -> Optional[float]:
        if self.sd_length is None:
            return None
        return self.sd_length / math.sqrt(self.n_reads)

    @computed_field
    @property
    def t_critical(self) -> Optional[float]:
        if self.n_reads < 2:
            return None
        return float(scipy.stats.t.ppf((1 + self.confidence_level) / 2, self.n_reads - 1))

    @computed_field
    @property
    def lower_ci(self) -> Optional[float]:
        if self.se_length is None:
            return None
        return self.mean_length - self.t_critical * self.se_length

    @computed_field
    @property
    def upper_ci(self) -> Optional[float]:
        if self.se_length is None:
            return None
        return self.mean_length + self.t_critical * self.se_length

    @property
    def is_degenerate(self) -> bool:
        return self.n_reads < 2

    @classmethod
    def from_lengths(
        cls,
        sample: str,
        filtered: bool,
        lengths: Iterable[int],
        confidence_level: float = 0.95,
        strict: bool = False,
    ) -> "SampleSummary":
        """Summarises the read lengths of one sample.

        Raises:
            ValueError: No lengths supplied.
            DegenerateSampleError: Only one length supplied and strict is set.
        """

        lengths = np.asarray(list(lengths), dtype="int64")
        n_reads = lengths.shape[0]

        if n_reads == 0:
            raise ValueError(f"No reads supplied for sample {sample}")

        if n_reads == 1:
            if strict:
                raise DegenerateSampleError(sample, filtered)
            logger.warning(
                f"Sample {sample} (filtered={filtered}) has a single read; "
                "standard error and confidence interval are undefined"
            )
            sd_length = None
        else:
            sd_length = float(np.std(lengths, ddof=1))

        q1, median, q3 = np.quantile(lengths, [0.25, 0.5, 0.75], method="linear")

        return cls(
            sample=sample,
            filtered=filtered,
            n_reads=n_reads,
            total_bases=int(lengths.sum()),
            mean_length=float(lengths.mean()),
            sd_length=sd_length,
            median_length=float(median),
            max_length=int(lengths.max()),
            q1=float(q1),
            q3=float(q3),
            confidence_level=confidence_level,
        )


class SampleSummaryList(BaseModel):
    summaries: List[SampleSummary]

    def to_dataframe(self, decimals: Optional[int] = None) -> pd.DataFrame:
        """Tabulates the summaries, one row per sample.

        Rounding is applied to the returned table only. Undefined values
        are NaN.
        """

        columns = [
            "sample",
            "filtered",
            "n_reads",
            "total_bases",
            "mean_length",
            "sd_length",
            "se_length",
            "lower_ci",
            "upper_ci",
            "median_length",
            "q1",
            "q3",
            "max_length",
        ]

        df = pd.DataFrame(
            [s.model_dump(include=set(columns)) for s in self.summaries],
            columns=columns,
        )

        float_columns = [
            "mean_length",
            "sd_length",
            "se_length",
            "lower_ci",
            "upper_ci",
            "median_length",
            "q1",
            "q3",
        ]
        df[float_columns] = df[float_columns].astype("float64")

        if decimals is not None:
            df[float_columns] = df[float_columns].round(decimals)

        return df

    def get(self, sample: str, filtered: bool) -> SampleSummary:
        for summary in self.summaries:
            if summary.sample == sample and summary.filtered == filtered:
                return summary
        raise KeyError((sample, filtered))

    def __len__(self) -> int:
        return len(self.summaries)

    def __iter__(self):
        return iter(self.summaries)


def summarise_samples(
    dataset: IndexDataset,
    confidence_level: float = 0.95,
    strict: bool = False,
) -> SampleSummaryList:
    """Computes a SampleSummary for every (sample, filtered) group in dataset"""

    summaries = [
        SampleSummary.from_lengths(
            sample,
            filtered,
            df["length"],
            confidence_level=confidence_level,
            strict=strict,
        )
        for (sample, filtered), df in dataset.groups()
    ]

    logger.info(f"Summarised {len(summaries)} samples")
    return SampleSummaryList(summaries=summaries)
