"""
Exceptions raised by the domain, network and persistence layers.

Everything derives from GameError, so a front-end can catch a single type and show the message to the user.
"""


class GameError(Exception):
    """Base class for all errors of this application"""


# --- RULE ENGINE ---
class GameStateError(GameError):
    """The requested operation is not allowed in the current state of the game."""


class MissingPieceError(GameStateError):
    """A move was requested from a square that holds no piece. Indicates a programming error."""


class PromotionError(GameError):
    """The promotion chooser returned a piece kind a pawn cannot promote into."""


# --- NETWORK ---
class PeerConnectionError(GameError):
    """Could not bind, accept, connect or write to the peer."""


class ConnectionLostError(PeerConnectionError):
    """The stream to the peer failed or was closed while reading."""


class ProtocolError(GameError):
    """A message from the peer could not be decoded, or does not match the local board (desync)."""


# --- PERSISTENCE ---
class SaveFileError(GameError):
    """A save file could not be read, written or decoded."""


class RepositoryError(GameError):
    """A saved game could not be found in the repository."""


# --- INPUT VALIDATION ---
class InvalidRequestError(GameError):
    """User input could not be interpreted."""
