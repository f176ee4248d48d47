"""Exception hierarchy for fireconvert."""


class FireconvertError(Exception):
    """Base exception for all fireconvert errors."""


class ConversionError(FireconvertError):
    """Input could not be parsed into a document tree."""


class ScrapeError(FireconvertError):
    """A scrape request could not be issued (missing API key, empty URL)."""


class CredentialError(FireconvertError):
    """The stored credential file is unreadable or cannot be written."""
