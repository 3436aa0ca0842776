"""Exception hierarchy for the migration scanner."""


class ScannerError(Exception):
    """Base class for all scanner errors."""


class InvalidTargetError(ScannerError):
    """The target URL is malformed or points at a disallowed host."""


class WordPressApiError(ScannerError):
    """A foundational REST API call (types or taxonomies) failed."""


class HomepageFetchError(ScannerError):
    """The homepage could not be fetched for plugin/integration detection."""
