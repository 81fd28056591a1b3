"""Custom exceptions for the Readme Updater."""


class ReadmeError(Exception):
    """Base exception for Readme Updater errors."""


class ReadmeUpdateError(ReadmeError):
    """The README could not be written or did not verify after writing."""
