"""Exception types raised while scanning and querying the docs index."""

from __future__ import annotations


class ArchDocsError(Exception):
    """Base class for archdocs errors."""


class DocsRootError(ArchDocsError):
    """The docs root is missing or not a directory."""


class ConfigError(ArchDocsError):
    """The configuration file could not be read or validated."""


class ScanTargetMissing(ArchDocsError):
    """A scan target does not exist under the docs root."""


class ScanTargetNotDirectory(ArchDocsError):
    """A scan target exists but is neither a regular file nor a directory."""


class AreaPathInvalid(ArchDocsError):
    """An area passed to the typed walk is missing or not a directory."""


class InvalidPathStructure(ArchDocsError):
    """No known path shape matched a file's location."""

    def __init__(self, relative_path: str) -> None:
        super().__init__(f"Invalid path structure: {relative_path}")
        self.relative_path = relative_path


class MetadataUnreadable(ArchDocsError):
    """Filesystem metadata for a file could not be read."""


class PathTraversalError(ArchDocsError):
    """A requested path resolves outside the docs root."""


class ResourceNotFound(ArchDocsError):
    """A URI or project is not present in the index."""


class InvalidQueryParameters(ArchDocsError):
    """Pagination parameters are out of range."""
