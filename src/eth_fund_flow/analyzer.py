"""
Beneficiary and payer analysis over an address's recent transaction history.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import tzinfo
from itertools import chain
from typing import Dict, Iterable, List, Optional, Union

from .api_clients import EtherscanClient
from .errors import InvalidAmountError
from .models import (
    CounterpartyAggregate,
    Direction,
    RawRecord,
    Role,
    TransactionDetail,
)
from .utils import addresses_match, format_timestamp, resolve_timezone, to_display_amount

logger = logging.getLogger(__name__)

_PREVIEW_COUNT = 5


def aggregate_counterparties(queried_address: str, records: Iterable[RawRecord],
                             direction: Direction,
                             tz: Optional[Union[tzinfo, str]] = None) -> List[CounterpartyAggregate]:
    """
    Group records by counterparty for one direction of flow.

    Records are scanned in the order given. OUTGOING keeps records sent by the
    queried address and keys them by recipient; INCOMING keeps records received
    by it and keys them by sender. Failed transactions never contribute. The
    result is ordered by first appearance of each counterparty.
    """
    if tz is None or isinstance(tz, str):
        tz = resolve_timezone(tz)
    role = Role.BENEFICIARY if direction is Direction.OUTGOING else Role.PAYER

    aggregates: Dict[str, CounterpartyAggregate] = {}
    skipped = 0

    for record in records:
        if not record.succeeded:
            continue

        if direction is Direction.OUTGOING:
            matched, counterparty = addresses_match(record.from_address, queried_address), record.to_address
        else:
            matched, counterparty = addresses_match(record.to_address, queried_address), record.from_address
        if not matched:
            continue

        try:
            amount = to_display_amount(record.value)
        except InvalidAmountError as e:
            logger.debug(f"Skipping record {record.hash}: {e}")
            skipped += 1
            continue

        detail = TransactionDetail(
            amount=amount,
            display_time=format_timestamp(record.timestamp, tz),
            transaction_id=record.hash,
        )

        aggregate = aggregates.get(counterparty)
        if aggregate is None:
            aggregate = aggregates[counterparty] = CounterpartyAggregate(address=counterparty, role=role)
        aggregate.add(detail)

    if skipped:
        logger.warning(
            f"Skipped {skipped} {direction.value} record(s) for {queried_address} with unparsable values")

    return list(aggregates.values())


class FundFlowAnalyzer:
    """Fetches an address's history concurrently and aggregates it by counterparty."""

    def __init__(self, client: EtherscanClient, display_timezone: Optional[str] = None,
                 verbose: bool = False):
        self.client = client
        self.tz = resolve_timezone(display_timezone)
        self.verbose = verbose

    def analyze_beneficiaries(self, address: str) -> List[CounterpartyAggregate]:
        """Addresses that received value from `address`."""
        return self.analyze(address, Role.BENEFICIARY)

    def analyze_payers(self, address: str) -> List[CounterpartyAggregate]:
        """Addresses that sent value to `address`."""
        return self.analyze(address, Role.PAYER)

    def analyze(self, address: str, role: Role) -> List[CounterpartyAggregate]:
        logger.debug(f"Starting {role.value} analysis for address: {address}")

        normal_txs, internal_txs, token_transfers = self._fetch_all(address)

        if self.verbose:
            self._log_preview("Normal tx", normal_txs, self.tz)
            self._log_preview("Internal tx", internal_txs, self.tz)
            self._log_preview("Token transfer", token_transfers, self.tz)

        records = chain(normal_txs, internal_txs, token_transfers)
        results = aggregate_counterparties(address, records, role.direction, self.tz)

        if self.verbose:
            logger.debug(f"Found {len(results)} {role.value} addresses")
            for i, agg in enumerate(results[:_PREVIEW_COUNT]):
                logger.debug(
                    f"{role.value.capitalize()} {i} - Address: {agg.address}, "
                    f"Total: {agg.total_amount:f} ETH, Transactions: {len(agg.transactions)}")

        return results

    def _fetch_all(self, address: str):
        """
        Run the three fetches in parallel and return their results in source order.

        The first failure is re-raised as soon as it is seen; the remaining
        fetches are told to stop through a shared cancel event and their
        results are discarded.
        """
        cancel_event = threading.Event()
        executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="etherscan")
        try:
            futures: Dict[Future, str] = {
                executor.submit(self.client.get_normal_transactions, address, cancel_event): "normal",
                executor.submit(self.client.get_internal_transactions, address, cancel_event): "internal",
                executor.submit(self.client.get_token_transfers, address, cancel_event): "token",
            }
            results = {}
            for future in as_completed(futures):
                name = futures[future]
                error = future.exception()
                if error is not None:
                    cancel_event.set()
                    logger.error(f"Error fetching {name} transactions for {address}: {error}")
                    raise error
                results[name] = future.result()
                if self.verbose:
                    logger.debug(f"Fetched {len(results[name])} {name} records")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return results["normal"], results["internal"], results["token"]

    @staticmethod
    def _log_preview(label: str, records: List[RawRecord], tz: tzinfo) -> None:
        for i, record in enumerate(records[:_PREVIEW_COUNT]):
            logger.debug(
                f"{label} {i} - From: {record.from_address}, To: {record.to_address}, "
                f"Value: {record.value}, Hash: {record.hash}, "
                f"Time: {format_timestamp(record.timestamp, tz)}")
