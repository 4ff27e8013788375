import os
from typing import Union

import tabulate
from loguru import logger

from nanofai.api.statistics import summarise_samples
from nanofai.cli.index_common import load_config, load_dataset


def summarise(
    filtered_dir: Union[str, os.PathLike] = None,
    unfiltered_dir: Union[str, os.PathLike] = None,
    config: Union[str, os.PathLike] = None,
    pattern: str = None,
    time_format: str = None,
    output: Union[str, os.PathLike] = "read_length_summary.tsv",
    output_json: Union[str, os.PathLike] = None,
    confidence_level: float = None,
    decimals: int = None,
    strict: bool = False,
    **kwargs,
):
    """
    Summarises read lengths for each sample and filter status.

    Writes a table with the mean, standard deviation, standard error,
    confidence interval, median, quartiles, maximum, total bases and number
    of reads for every sample. Statistics are computed at full precision and
    only rounded in the written table.

    Args:
        filtered_dir (os.PathLike, optional): Directory of filtered index files.
        unfiltered_dir (os.PathLike, optional): Directory of unfiltered index files.
        config (os.PathLike, optional): Yaml settings file.
        pattern (str, optional): Glob used to find index files.
        time_format (str, optional): Timestamp format.
        output (os.PathLike, optional): Output table, comma separated if it ends with .csv.
        output_json (os.PathLike, optional): Full precision json output.
        confidence_level (float, optional): Confidence level for the mean.
        decimals (int, optional): Decimal places for the table.
        strict (bool, optional): Fail on samples with a single read.
    """

    settings = load_config(
        config,
        file_pattern=pattern,
        time_format=time_format,
        confidence_level=confidence_level,
        decimals=decimals,
    )

    dataset = load_dataset(settings, filtered_dir, unfiltered_dir)
    summaries = summarise_samples(
        dataset, confidence_level=settings.confidence_level, strict=strict
    )

    df_summary = summaries.to_dataframe(decimals=settings.decimals)
    sep = "," if str(output).endswith(".csv") else "\t"
    df_summary.to_csv(output, sep=sep, index=False)
    logger.info(f"Written summary of {len(summaries)} samples to {output}")

    if output_json:
        with open(output_json, "w") as f:
            f.write(summaries.model_dump_json(indent=2))

    logger.info("Printing read length summary to stdout")
    print(
        tabulate.tabulate(
            df_summary, headers="keys", tablefmt="psql", showindex=False
        )
    )
