"""Fatal conversion errors.

Every error here aborts the whole run. The pipeline orchestrator is the only
place that catches them, and it discards the entity graph when it does.
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for errors that abort a conversion run.

    ``file_name`` and ``line_number`` (1-based) locate the offending input when
    known, and are folded into ``str(error)``.
    """

    def __init__(
        self,
        message: str,
        *,
        file_name: str | None = None,
        line_number: int | None = None,
    ) -> None:
        self.message = message
        self.file_name = file_name
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.line_number is not None:
            text = f"{text} at line {self.line_number}"
        if self.file_name:
            text = f"{text} of {self.file_name}" if self.line_number is not None else f"{text} ({self.file_name})"
        return text


class ParseError(ConversionError):
    """A file name or line does not have the expected shape."""


class MissingMetadataError(ConversionError):
    """A README is absent, or lacks a key the format declares mandatory."""


class ValidationError(ConversionError):
    """A mandatory identifier field is empty where it is read."""


class UnsupportedRecordType(ConversionError):
    """A record denotes a kind the format does not model."""


class ReferenceResolutionError(ConversionError):
    """An entity reached finalize without a required shared reference."""


class EmptyRunError(ConversionError):
    """Finalize was reached without any data record having been parsed."""


class RunStateError(ConversionError):
    """A converter operation was called out of run-state order."""
