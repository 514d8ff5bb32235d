# errors.py


class InvalidConfiguration(ValueError):
    """Raised when a feed is constructed with unusable settings.

    Examples: a non-positive tick interval, a window capacity below one, or an
    empty seed set. Raised before any timer is started.
    """
