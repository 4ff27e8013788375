import os
from typing import Union

from loguru import logger

from nanofai.api.aggregate import IndexDataset, aggregate_indices
from nanofai.api.config import AnalysisConfig
from nanofai.api.io import discover_index_files


def load_config(config: Union[str, os.PathLike] = None, **overrides) -> AnalysisConfig:
    settings = AnalysisConfig.from_yaml(config) if config else AnalysisConfig()
    return settings.update(**overrides)


def load_dataset(
    settings: AnalysisConfig,
    filtered_dir: Union[str, os.PathLike] = None,
    unfiltered_dir: Union[str, os.PathLike] = None,
) -> IndexDataset:
    """Finds index files in the supplied directories and pools their records"""

    if not filtered_dir and not unfiltered_dir:
        raise ValueError("Provide at least one of --filtered-dir or --unfiltered-dir")

    filtered_paths = (
        discover_index_files(filtered_dir, settings.file_pattern) if filtered_dir else []
    )
    unfiltered_paths = (
        discover_index_files(unfiltered_dir, settings.file_pattern)
        if unfiltered_dir
        else []
    )

    logger.info(
        f"Using {len(filtered_paths)} filtered and {len(unfiltered_paths)} unfiltered index files"
    )

    return aggregate_indices(
        filtered_paths,
        unfiltered_paths,
        naming=settings.naming,
        time_format=settings.time_format,
    )
