"""Validation errors raised while loading project data.

Both subclass ValueError so callers that only care about "bad input"
can catch a single type.
"""


class DataValidationError(ValueError):
    """Project or event data that cannot be loaded.

    Raised for unparseable timestamps, unknown categories or methodologies,
    and missing required fields. Such events never reach the playback or
    viewport layers.
    """


class CanonicalLocationError(ValueError):
    """Canonical location configuration defect.

    Raised at project load when anchors overlap, repeat a role, or do not
    cover exactly the three canonical roles.
    """
