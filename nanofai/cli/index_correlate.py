import os
from typing import Literal, Union

import tabulate
from loguru import logger

from nanofai.api.correlation import fit_time_length
from nanofai.cli.index_common import load_config, load_dataset


def correlate(
    filtered_dir: Union[str, os.PathLike] = None,
    unfiltered_dir: Union[str, os.PathLike] = None,
    config: Union[str, os.PathLike] = None,
    pattern: str = None,
    time_format: str = None,
    output: Union[str, os.PathLike] = "time_length_correlation.json",
    response: Literal["time", "length"] = "time",
    alpha: float = None,
    decimals: int = None,
    **kwargs,
):
    """
    Tests for a linear relationship between sequencing time and read length.

    All reads from every sample and filter status are pooled. The json
    output holds full precision values; the printed table is rounded.
    """

    settings = load_config(
        config,
        file_pattern=pattern,
        time_format=time_format,
        alpha=alpha,
        decimals=decimals,
    )

    dataset = load_dataset(settings, filtered_dir, unfiltered_dir)
    report = fit_time_length(dataset, response=response, alpha=settings.alpha)

    with open(output, "w") as f:
        f.write(report.model_dump_json(indent=2))

    logger.info(f"Written correlation report to {output}")

    if not report.significant:
        logger.warning(
            f"Slope is not significant (p={report.p_value:.3g}); "
            "the loss per read below is illustrative only"
        )

    print(
        tabulate.tabulate(
            report.to_dataframe(decimals=settings.decimals),
            headers="keys",
            tablefmt="psql",
            showindex=False,
        )
    )
