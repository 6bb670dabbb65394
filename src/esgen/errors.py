"""
Exception hierarchy for esgen.

Every failure that aborts a generation run derives from EsgenError so the
CLI (and any other caller) can catch one type. Parser diagnostics are not
errors; they travel on ParseResult / GenerationResult instead.
"""


class EsgenError(Exception):
    """Base class for all esgen failures."""


class ConfigError(EsgenError):
    """A generator was configured with an out-of-range value."""


class DataReadError(EsgenError):
    """The baseline data folder could not be read or contained no data."""


class SerializationError(EsgenError):
    """A generated file could not be turned into text."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"failed to write file `{path}`"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ArchiveError(EsgenError):
    """Writing to the output archive failed."""


class LabelCollisionError(EsgenError):
    """Two branch targets in one generated conversation share a label."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"duplicate branch label `{label}`")
