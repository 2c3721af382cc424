"""
Exception types for the miricomp pipeline.

Every failure is fatal for the run: nothing here is retried.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations


class MiricompError(Exception):
    """Base class for pipeline errors."""


class MissingHeaderKeyError(MiricompError, KeyError):
    """A required WCS keyword is absent from an image header."""

    def __init__(self, keyword: str, source: str = ""):
        self.keyword = keyword
        self.source = source
        super().__init__(keyword)

    def __str__(self) -> str:
        where = f" in {self.source}" if self.source else ""
        return f"Missing required header keyword {self.keyword}{where}"


class FileReadError(MiricompError, OSError):
    """An image or header file is missing or cannot be parsed."""

    def __init__(self, path: str, filter_name: str = "", detail: str = ""):
        self.path = str(path)
        self.filter_name = filter_name
        self.detail = detail
        super().__init__(self.path)

    def __str__(self) -> str:
        prefix = f"[{self.filter_name}] " if self.filter_name else ""
        suffix = f": {self.detail}" if self.detail else ""
        return f"{prefix}Cannot read {self.path}{suffix}"


class ShapeMismatchError(MiricompError, ValueError):
    """Channels passed to the composite builder have different shapes."""

    def __init__(self, shapes: dict[str, tuple[int, ...]]):
        self.shapes = dict(shapes)
        detail = ", ".join(f"{name}={shape}" for name, shape in self.shapes.items())
        super().__init__(f"Channel shapes differ: {detail}")
