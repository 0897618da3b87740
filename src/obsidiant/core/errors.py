"""Exceptions raised while reading an EPUB package."""


class ObsidiantError(Exception):
    """Base class for obsidiant errors."""


class PackageError(ObsidiantError):
    """The package archive cannot be opened or read."""


class PackageStructureError(ObsidiantError):
    """The container pointer or package document is missing or invalid."""
