from typing import Literal, Union

import numpy as np
import pandas as pd
import scipy.stats
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, computed_field

from nanofai.api.aggregate import IndexDataset


class CorrelationReport(BaseModel):
    """Ordinary least squares fit between sequencing time and read length.

    ``illustrative_loss_per_read`` is |slope| * time span / n_reads. It is a
    rough illustration only, not a statistical estimate, and is reported
    whether or not the slope is significant. Its units follow the model
    direction: for ``length ~ time`` the slope is bases per second and the
    value is bases per read; for the default ``time ~ length`` the slope is
    seconds per base and the value is seconds squared per base per read, so
    it must not be read as bases lost.
    """

    model_config = ConfigDict(frozen=True)

    response: Literal["time", "length"]
    predictor: Literal["time", "length"]
    slope: float
    intercept: float
    std_err: float
    p_value: float
    r_value: float
    n_reads: int
    time_span: float
    alpha: float = Field(default=0.05, gt=0, lt=1)

    @computed_field
    @property
    def t_statistic(self) -> float:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.divide(self.slope, self.std_err))

    @computed_field
    @property
    def significant(self) -> bool:
        return self.p_value < self.alpha

    @computed_field
    @property
    def illustrative_loss_per_read(self) -> float:
        return abs(self.slope) * self.time_span / self.n_reads

    @computed_field
    @property
    def illustrative_loss_units(self) -> str:
        if self.response == "length":
            return "bases per read"
        return "seconds^2 per base per read"

    def to_dataframe(self, decimals: int = None) -> pd.DataFrame:
        df = pd.DataFrame(
            [
                ("model", f"{self.response} ~ {self.predictor}"),
                ("slope", self.slope),
                ("intercept", self.intercept),
                ("std_err", self.std_err),
                ("t_statistic", self.t_statistic),
                ("p_value", self.p_value),
                ("r_value", self.r_value),
                ("n_reads", self.n_reads),
                ("time_span_seconds", self.time_span),
                ("significant", self.significant),
                ("illustrative_loss_per_read (informal)", self.illustrative_loss_per_read),
                ("illustrative_loss_units", self.illustrative_loss_units),
            ],
            columns=["statistic", "value"],
        )

        if decimals is not None:
            df["value"] = [
                round(v, decimals) if isinstance(v, float) else v for v in df["value"]
            ]

        return df


def fit_time_length(
    records: Union[IndexDataset, pd.DataFrame],
    response: Literal["time", "length"] = "time",
    alpha: float = 0.05,
) -> CorrelationReport:
    """Fits a linear model between sequencing time and read length.

    By default time is the response and length the predictor
    (``time ~ length``), so the slope is in seconds per base. Set
    response="length" to fit ``length ~ time`` (bases per second).
    All samples and filter states are pooled.

    Args:
        records (Union[IndexDataset, pd.DataFrame]): Pooled read records.
        response (Literal["time", "length"], optional): Dependent variable. Defaults to "time".
        alpha (float, optional): Significance threshold for the slope. Defaults to 0.05.

    Raises:
        ValueError: Fewer than three reads or no variation in the predictor.

    Returns:
        CorrelationReport: Slope, standard error, t statistic and two-sided p-value.
    """

    if response not in ("time", "length"):
        raise ValueError(f"response must be 'time' or 'length' not {response}")

    df = records.records if isinstance(records, IndexDataset) else records
    predictor = "length" if response == "time" else "time"

    n_reads = df.shape[0]
    if n_reads < 3:
        raise ValueError(f"At least 3 reads are required to test the slope, got {n_reads}")

    x = df[predictor].to_numpy(dtype="float64")
    y = df[response].to_numpy(dtype="float64")

    if np.ptp(x) == 0:
        raise ValueError(f"All reads have the same {predictor}; the slope is undefined")

    fit = scipy.stats.linregress(x, y)
    time = df["time"].to_numpy(dtype="float64")

    report = CorrelationReport(
        response=response,
        predictor=predictor,
        slope=float(fit.slope),
        intercept=float(fit.intercept),
        std_err=float(fit.stderr),
        p_value=float(fit.pvalue),
        r_value=float(fit.rvalue),
        n_reads=n_reads,
        time_span=float(time.max() - time.min()),
        alpha=alpha,
    )

    logger.info(
        f"Fitted {response} ~ {predictor} over {n_reads} reads: "
        f"slope={report.slope:.4g} p={report.p_value:.3g}"
    )

    return report
