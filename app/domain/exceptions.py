"""
Custom exceptions for domain-specific errors
"""


class ChefMindError(Exception):
    """Base class for errors surfaced to API callers"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(ChefMindError):
    """Raised when a required credential or environment value is missing"""


class InvalidRequestError(ChefMindError):
    """Raised when a required request field is missing or malformed"""


class ModelInvocationError(ChefMindError):
    """
    Raised when the generative model cannot be reached.

    Covers exhausted retries on overload/transport failures and
    non-retryable API errors.
    """

    def __init__(self, message: str, attempts: int = 0):
        self.attempts = attempts
        super().__init__(message)


class ModelResponseError(ChefMindError):
    """
    Raised when the model replies without a usable candidate or text part.

    This is a protocol failure, distinct from a reply that simply
    contains no recipe.
    """


class ImageEncodingError(Exception):
    """Raised when an image cannot be embedded inline as a data URI"""
