"""
Errors raised while fetching data from Etherscan.
"""

from typing import Optional


class EtherscanError(Exception):
    """Base class for failures of an Etherscan account query."""

    def __init__(self, message: str, action: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.action = action


class TransportError(EtherscanError):
    """The API could not be reached after all retry attempts."""


class ProviderError(EtherscanError):
    """Etherscan answered with a business error (status "0")."""

    def __str__(self) -> str:
        return f"etherscan API error: {self.message}"


class RateLimitedError(ProviderError):
    """Etherscan rejected the call because the API key quota is exhausted."""

    def __init__(self, action: Optional[str] = None):
        super().__init__("Max rate limit reached", action=action)

    def __str__(self) -> str:
        return "etherscan API rate limit exceeded, please try again later"


class FetchCancelledError(EtherscanError):
    """A fetch was abandoned because a sibling fetch already failed."""


class InvalidAmountError(ValueError):
    """A base-unit amount could not be parsed as a decimal integer."""
