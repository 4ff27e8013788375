import os
from typing import Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from nanofai.api.io import NamingConvention


class AnalysisConfig(BaseModel):
    """Settings shared by the summary and correlation commands.

    Values can be loaded from a yaml file e.g.::

        filtered_suffix: _filt.sample.datetime.fai
        unfiltered_suffix: .sample.datetime.fai
        confidence_level: 0.95

    """

    model_config = ConfigDict(extra="forbid")

    filtered_suffix: str = "_filt.sample.datetime.fai"
    unfiltered_suffix: str = ".sample.datetime.fai"
    file_pattern: str = "*sample.datetime.fai"
    time_format: str = "ISO8601"
    confidence_level: float = Field(default=0.95, gt=0, lt=1)
    alpha: float = Field(default=0.05, gt=0, lt=1)
    decimals: int = Field(default=3, ge=0)

    @property
    def naming(self) -> NamingConvention:
        return NamingConvention(
            filtered_suffix=self.filtered_suffix,
            unfiltered_suffix=self.unfiltered_suffix,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, os.PathLike]) -> "AnalysisConfig":
        with open(path, "r") as r:
            settings = yaml.safe_load(r) or {}

        if not isinstance(settings, dict):
            raise ValueError(f"{path} does not contain a mapping of settings")

        logger.info(f"Loaded settings from {path}")
        return cls(**settings)

    def update(self, **overrides) -> "AnalysisConfig":
        """Returns a copy with any overrides that are not None applied"""
        settings = self.model_dump()
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return self.model_validate(settings)
