"""Exceptions raised while generating repository badges."""


class BadgeException(Exception):
    """Base exception for all badge generation errors."""
    pass


class RepositoryFetchError(BadgeException):
    """Raised when repository statistics cannot be fetched."""

    def __init__(self, owner: str, name: str, message: str = "Could not fetch repository."):
        self.owner = owner
        self.name = name
        super().__init__(f"{message} ({owner}/{name})")


class RepositoryNotFoundError(RepositoryFetchError):
    """Raised when the hosting API does not know the repository."""

    def __init__(self, owner: str, name: str):
        super().__init__(owner, name, "Repository not found.")


class IconError(BadgeException):
    """Base exception for icon problems. These never fail a badge."""
    pass


class IconTooLargeError(IconError):
    """Raised when an icon exceeds the size guard."""

    def __init__(self, width: int, height: int, limit: int):
        self.width = width
        self.height = height
        self.limit = limit
        super().__init__(f"Icon is {width}x{height}, larger than the {limit}px limit.")


class IconDecodeError(IconError):
    """Raised when icon bytes cannot be decoded into an image."""
    pass


class DownloadCountError(BadgeException):
    """Raised when package download counts cannot be fetched."""
    pass
