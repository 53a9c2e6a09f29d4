import re
import logging
import threading
from typing import Optional, List, Dict, Any, Callable, TypeVar
import requests

from .config import Config
from .errors import (
    FetchCancelledError,
    ProviderError,
    RateLimitedError,
    TransportError,
)
from .models import InternalTransaction, NormalTransaction, TokenTransfer

# Set up logging
logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

RATE_LIMIT_RESULT = "Max rate limit reached"
_NO_RECORDS_RE = re.compile(r"^no .*found", re.IGNORECASE)
_RESPONSE_PREVIEW_CHARS = 1000


class EtherscanClient:
    """Client for the Etherscan account API."""

    def __init__(self, config: Config, session: Optional[requests.Session] = None,
                 verbose: bool = False):
        self.config = config
        self.base_url = config.etherscan_base_url
        self.api_key = config.etherscan_api_key
        self.session = session or requests.Session()
        self.verbose = verbose

    def _get(self, params: Dict[str, Any], cancel_event: threading.Event) -> requests.Response:
        """Issue the GET, retrying transport failures with quadratic backoff."""
        action = params.get("action")
        last_error: Optional[requests.RequestException] = None

        for attempt in range(self.config.max_retries):
            if attempt > 0:
                delay = self.config.retry_backoff * attempt * attempt
                logger.warning(
                    f"Retrying {action} in {delay:.1f}s (attempt {attempt + 1}/{self.config.max_retries}): {last_error}")
                if cancel_event.wait(delay):
                    raise FetchCancelledError(f"{action} fetch cancelled", action=action)
            if cancel_event.is_set():
                raise FetchCancelledError(f"{action} fetch cancelled", action=action)

            try:
                return self.session.get(self.base_url, params=params,
                                        timeout=self.config.request_timeout)
            except requests.RequestException as e:
                last_error = e

        raise TransportError(
            f"error fetching transactions after {self.config.max_retries} retries: {last_error}",
            action=action) from last_error

    def _make_request(self, params: Dict[str, Any],
                      cancel_event: Optional[threading.Event] = None) -> List[Dict[str, Any]]:
        """Make a request to Etherscan API and return the raw result list."""
        action = params.get("action")
        params["apikey"] = self.api_key
        if cancel_event is None:
            cancel_event = threading.Event()

        if self.verbose:
            redacted = {k: v for k, v in params.items() if k != "apikey"}
            logger.debug(f"Fetching {action} from {self.base_url} with {redacted}")

        response = self._get(params, cancel_event)

        if self.verbose:
            preview = response.text
            if len(preview) > _RESPONSE_PREVIEW_CHARS:
                preview = preview[:_RESPONSE_PREVIEW_CHARS] + "... (truncated)"
            logger.debug(f"{action} response: {preview}")

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ProviderError(f"HTTP {response.status_code}", action=action) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"error unmarshaling response: {e}", action=action) from e

        if not isinstance(data, dict):
            raise ProviderError("unexpected response envelope", action=action)

        status = str(data.get("status", ""))
        message = str(data.get("message") or "")
        result = data.get("result")

        if status != "1":
            if _NO_RECORDS_RE.match(message):
                if self.verbose:
                    logger.debug(f"No records found for {action}")
                return []
            if _is_rate_limited(message, result):
                raise RateLimitedError(action=action)
            if isinstance(result, str) and result:
                raise ProviderError(result, action=action)
            raise ProviderError(message or "Unknown error", action=action)

        if not isinstance(result, list):
            raise ProviderError(f"unexpected result payload: {result!r}", action=action)

        return result

    def _fetch(self, action: str, address: str, decode: Callable[[Dict[str, Any]], RecordT],
               cancel_event: Optional[threading.Event]) -> List[RecordT]:
        params = {
            "module": "account",
            "action": action,
            "address": address,
            "startblock": 0,
            "endblock": 99999999,
            "page": 1,
            "offset": self.config.page_size,
            "sort": "desc"
        }

        records = [decode(item) for item in self._make_request(params, cancel_event)]

        if self.verbose and records:
            logger.debug(f"Received {len(records)} records for {action}; first: {records[0]}")

        return records

    def get_normal_transactions(self, address: str,
                                cancel_event: Optional[threading.Event] = None) -> List[NormalTransaction]:
        """Get the most recent normal transactions for an address."""
        return self._fetch("txlist", address, NormalTransaction.from_api, cancel_event)

    def get_internal_transactions(self, address: str,
                                  cancel_event: Optional[threading.Event] = None) -> List[InternalTransaction]:
        """Get the most recent internal transactions for an address."""
        return self._fetch("txlistinternal", address, InternalTransaction.from_api, cancel_event)

    def get_token_transfers(self, address: str,
                            cancel_event: Optional[threading.Event] = None) -> List[TokenTransfer]:
        """Get the most recent ERC-20/721/1155 transfers for an address."""
        return self._fetch("tokentx", address, TokenTransfer.from_api, cancel_event)


def _is_rate_limited(message: str, result: Any) -> bool:
    if isinstance(result, str):
        if result == RATE_LIMIT_RESULT or "rate limit" in result.lower():
            return True
    return "rate limit" in message.lower()
