"""
Critical Days Errors
--------------------

Failures that abort a pipeline run. Every stage raises one of these types and
tags it with the stage name and the identifier (path, variable, country code,
layer label) that caused it, so the runner can report where the run stopped.
There is no recovery: the pipeline is a linear batch job and any of these is
fatal to downstream stages.
"""


class CriticalDaysError(Exception):
    """Base class for all pipeline failures."""

    def __init__(self, stage: str, identifier: str, detail: str) -> None:
        self.stage = stage
        self.identifier = identifier
        self.detail = detail
        super().__init__(f"[{stage}] {identifier}: {detail}")


class DataNotFoundError(CriticalDaysError):
    """A file, variable, or boundary identifier has no matching source."""


class FormatError(CriticalDaysError):
    """A file exists but cannot be parsed as a gridded dataset."""


class ProjectionMismatchError(CriticalDaysError):
    """Coordinate reference systems disagree and cannot be reconciled."""


class DateParseError(CriticalDaysError):
    """A layer identifier does not encode a recognizable date."""
