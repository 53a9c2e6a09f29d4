"""
Utility functions for unit conversion, timestamps and addresses.
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional, Union
from decimal import Decimal
from zoneinfo import ZoneInfo
import re
import logging

from web3 import Web3

from .errors import InvalidAmountError

# Set up logging
logger = logging.getLogger(__name__)

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH_SECONDS_PATTERN = re.compile(r"[+-]?[0-9]+")
MAX_UINT256 = 2 ** 256 - 1
WEI_PER_ETHER = Decimal(10) ** 18


def is_valid_ethereum_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address."""
    if not address:
        return False

    # Remove 0x prefix if present
    if address.startswith('0x'):
        address = address[2:]

    # Check if it's 40 hex characters
    return bool(re.match(r'^[0-9a-fA-F]{40}$', address))


def addresses_match(left: str, right: str) -> bool:
    """Compare two addresses ignoring case; Etherscan mixes checksummed and lowercase forms."""
    return left.casefold() == right.casefold()


def to_display_amount(value: str) -> float:
    """
    Convert a base-unit integer string (Wei) to Ether.

    Values may exceed 64 bits for high-decimal tokens, so parsing goes through
    Python ints. Raises InvalidAmountError for anything that is not a
    non-negative decimal integer.
    """
    if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
        raise InvalidAmountError(f"invalid base-unit amount: {value!r}")

    wei = int(value)
    if wei <= MAX_UINT256:
        return float(Web3.from_wei(wei, "ether"))
    # from_wei only accepts the uint256 range
    return float(Decimal(wei) / WEI_PER_ETHER)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Return the tzinfo for an IANA zone name, defaulting to UTC."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def format_timestamp(timestamp: str, tz: Optional[Union[tzinfo, str]] = None) -> str:
    """
    Format a Unix epoch seconds string as YYYY-MM-DD HH:MM:SS.

    Returns the raw input unchanged when it cannot be parsed, so callers always
    get a non-empty display string.
    """
    if tz is None or isinstance(tz, str):
        tz = resolve_timezone(tz)

    if not isinstance(timestamp, str) or not EPOCH_SECONDS_PATTERN.fullmatch(timestamp):
        logger.debug(f"Failed to format timestamp {timestamp!r}: not an integer")
        return timestamp

    try:
        seconds = int(timestamp)
        return datetime.fromtimestamp(seconds, tz=tz).strftime(DISPLAY_TIME_FORMAT)
    except (ValueError, OverflowError, OSError) as e:
        logger.debug(f"Failed to format timestamp {timestamp!r}: {e}")
        return timestamp


def format_number(number: Union[float, Decimal], decimals: int = 4) -> str:
    """Format a number with thousands suffixes."""
    try:
        if number == 0:
            return "0"

        num = float(number)

        if num >= 1_000_000_000:
            return f"{num / 1_000_000_000:.{decimals}f}B"
        elif num >= 1_000_000:
            return f"{num / 1_000_000:.{decimals}f}M"
        elif num >= 1_000:
            return f"{num / 1_000:.{decimals}f}K"
        else:
            return f"{num:.{decimals}f}"
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Error formatting number {number}: {e}")
        return str(number)
