from __future__ import annotations


class LabelsnipError(Exception):
    """Base class for errors raised by labelsnip."""


class ConfigError(LabelsnipError):
    pass


class CompletionError(LabelsnipError, RuntimeError):
    pass


class ExtractionError(LabelsnipError, ValueError):
    pass
