"""Service-layer errors.

Lookup and validation failures subclass ValueError; routers map each
class to an HTTP status code.
"""


class UserNotFoundError(ValueError):
    """No user row for the given id."""


class UsernameTakenError(ValueError):
    """Username already registered."""


class TeamNotFoundError(ValueError):
    """No team for the given id."""


class TeamAccessError(ValueError):
    """User is not a member of the team."""


class InvalidInviteCodeError(ValueError):
    """No team matches the invite code."""


class TeamFullError(ValueError):
    """Team already has the maximum number of members."""


class ItemNotTrackedError(ValueError):
    """Item (or requirement row) is not part of the user's aggregation."""


class StationNotFoundError(ValueError):
    """No hideout station for the given id."""


class CompletedQuestItemError(ValueError):
    """Decrement touches rows of a completed quest; change the quest status instead."""


class CatalogUnavailableError(RuntimeError):
    """Catalog could not be fetched and no cached copy exists."""
