"""Custom exceptions shared by all layers. Catch JudgeError to handle any of them."""


class JudgeError(Exception):
    """Top-level exception for this application."""


# --- Request / input errors ---
class InvalidRequestError(JudgeError):
    """Data received at the boundary cannot be interpreted."""


class InvalidGameNameError(InvalidRequestError):
    """Game names are 1-8 alphanumeric characters."""


class MissingContextError(JudgeError):
    """Command needs a target game and password before it can be sent to the judge."""


# --- Persistence errors ---
class RepositoryError(JudgeError):
    """Something went wrong looking up or storing a record."""


class GameNotFoundError(RepositoryError):
    """No stored state for the requested game."""


class BackingStoreUnavailableError(RepositoryError):
    """The store could not be queried at all. The caller should not guess a role."""
