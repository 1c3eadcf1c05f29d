"""Exceptions raised by the content pipeline."""

from __future__ import annotations


class PipelineError(RuntimeError):
    """Base class for pipeline failures; the message is user facing."""


class PreconditionError(PipelineError):
    """An operation was attempted before its inputs exist. No backend call was made."""


class PipelineBusyError(PipelineError):
    """Another backend call is still outstanding."""


class StageFailedError(PipelineError):
    """The backend call of a stage failed; pipeline state kept its last good value."""


class StaleResponseError(PipelineError):
    """A response arrived after its source, transcript or draft changed and was dropped."""


__all__ = [
    "PipelineBusyError",
    "PipelineError",
    "PreconditionError",
    "StageFailedError",
    "StaleResponseError",
]
