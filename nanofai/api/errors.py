import os
from typing import Optional, Union


class NanofaiError(Exception):
    """Base class for all errors raised by nanofai"""


class NotFoundError(NanofaiError, FileNotFoundError):
    """An index file or directory does not exist or cannot be opened"""

    def __init__(self, path: Union[str, os.PathLike], reason: str = "not found"):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class ParseError(NanofaiError, ValueError):
    """A row of an index file is malformed.

    Attributes:
     path: File containing the bad row.
     line_number: 1-based line number of the bad row (None if not known).
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        message: str,
        line_number: Optional[int] = None,
    ):
        self.path = str(path)
        self.line_number = line_number
        self.message = message

        location = self.path if line_number is None else f"{self.path}:{line_number}"
        super().__init__(f"{location}: {message}")


class DegenerateSampleError(NanofaiError, ValueError):
    """A sample has a single read so its standard error and CI are undefined"""

    def __init__(self, sample: str, filtered: bool):
        self.sample = sample
        self.filtered = filtered
        super().__init__(
            f"Sample {sample} (filtered={filtered}) has a single read; "
            "standard error and confidence interval are undefined"
        )
