import os
import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfoNotFoundError
from dotenv import load_dotenv

from .utils import resolve_timezone

# Load environment variables from .env file
load_dotenv()

WETH_CONTRACT_ADDRESS = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
ANALYSIS_MODES = ("beneficiary", "payer", "both")


@dataclass
class Config:
    """Application configuration."""

    # API Keys
    etherscan_api_key: str

    # API URLs
    etherscan_base_url: str = "https://api.etherscan.io/api"

    # Request settings
    request_timeout: float = 60.0
    max_retries: int = 3
    retry_backoff: float = 1.0  # seconds, multiplied by attempt**2
    page_size: int = 100

    # Server settings
    port: int = 8080
    default_address: str = WETH_CONTRACT_ADDRESS
    analysis_mode: str = "both"

    # Output settings
    display_timezone: str = "UTC"
    log_level: str = "INFO"
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        etherscan_key = os.getenv("ETHERSCAN_API_KEY")
        if not etherscan_key:
            raise ValueError(
                "ETHERSCAN_API_KEY environment variable is required")

        display_timezone = os.getenv("DISPLAY_TIMEZONE", "UTC")
        try:
            resolve_timezone(display_timezone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(
                f"DISPLAY_TIMEZONE is not a known time zone: {display_timezone!r}") from e

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"LOG_LEVEL is not a logging level: {log_level!r}")

        return cls(
            etherscan_api_key=etherscan_key,
            etherscan_base_url=os.getenv(
                "ETHERSCAN_BASE_URL", "https://api.etherscan.io/api"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            retry_backoff=float(os.getenv("RETRY_BACKOFF", "1.0")),
            page_size=int(os.getenv("PAGE_SIZE", "100")),
            port=int(os.getenv("PORT") or "8080"),
            display_timezone=display_timezone,
            log_level=log_level,
            verbose=os.getenv("VERBOSE", "false").lower() == "true",
        )
