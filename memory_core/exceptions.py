class MemoryGameError(Exception):
    """Base exception for the memory game core."""
    pass


class BoardInvariantError(MemoryGameError):
    """Raised when a freshly generated board violates id uniqueness or sizing."""
    pass


class InvalidClickError(MemoryGameError):
    """Raised when a click names a position that is not on the board."""
    pass


class CardProviderError(MemoryGameError):
    """Raised by a card provider when it cannot produce card data."""
    pass
