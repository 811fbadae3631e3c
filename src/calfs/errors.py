"""Exception hierarchy for calfs."""


class CalfsError(Exception):
    """Base class for all calfs errors."""


class NotFoundError(CalfsError):
    """A name does not resolve to any child of a namespace node."""


class NameParseError(NotFoundError):
    """A name token is not a valid year, month or day."""


class ReadOnlyError(CalfsError):
    """A write-intent operation was attempted on the read-only namespace."""


class NotDirectoryError(NotFoundError):
    """A path walks through, or lists, a day file."""
