"""Exception hierarchy for packexport.

Resolution-time errors (ScopeNotFound, DestinationUnresolved) are raised
before any artifact is touched. Batch-time errors (AssetNotFound,
EncodingError) abort the remaining batches of a run and leave the artifact
unfinalized.
"""

from __future__ import annotations


class ExportError(Exception):
    """Base class for every error raised by the export engine."""


class ScopeNotFound(ExportError):
    """A named export references a package id that does not exist."""

    def __init__(self, package_id: str) -> None:
        super().__init__(f"Cannot find package with id: {package_id}")
        self.package_id = package_id


# Name used by callers that think in terms of packages rather than scopes
PackageNotFound = ScopeNotFound


class DestinationUnresolved(ExportError):
    """No destination was supplied and no default is configured."""


class AssetNotFound(ExportError):
    """A file entry cannot be loaded at archive time."""

    def __init__(self, identifier: str, reason: str = "no managed file with this uuid") -> None:
        super().__init__(f"File asset {identifier} not found: {reason}")
        self.identifier = identifier


class EncodingError(ExportError):
    """A configuration record cannot be serialized losslessly."""


class DeleteFailed(ExportError):
    """A stale artifact could not be removed for a reason other than absence."""


class GenerationInProgress(ExportError):
    """Another generation of the same artifact has not finished."""


class ExportAborted(ExportError):
    """The user declined to overwrite a non-empty destination."""


class InvalidStateTransition(ExportError):
    """The export run state machine was asked to make an illegal move."""
