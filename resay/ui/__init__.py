"""User interface components for resay."""

from .console import PipelineConsoleUI

__all__ = ["PipelineConsoleUI"]
