# wishwatch/errors.py


class WishWatchError(Exception):
    """Base class for every error raised by the wishlist core."""


class InvalidUrl(WishWatchError):
    """User input rejected at add time; recoverable, nothing was changed."""

    user_message = "Please enter a valid URL"

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Not a valid absolute URL: {url!r}")


class IndexOutOfRange(WishWatchError):
    """An update/delete addressed a position the wishlist does not have."""

    def __init__(self, index, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index!r} out of range for wishlist of length {length}")


class MalformedRecord(WishWatchError):
    """A persisted record could not be decoded into an item."""

    def __init__(self, reason: str, record=None):
        self.reason = reason
        self.record = record
        super().__init__(f"Malformed record: {reason}")


class StoreUnavailable(WishWatchError):
    """The storage backend could not be read or written."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Wishlist store unavailable: {reason}")
