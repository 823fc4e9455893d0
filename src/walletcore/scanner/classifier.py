"""Classify a chain transaction as sent/received from one wallet's point of view."""

import logging
from typing import Iterable, Optional

from walletcore.domain.addresses import normalize_address, vout_address
from walletcore.domain.amounts import coin_to_sat
from walletcore.domain.enums import LedgerStatus, PeerSentinel, TxDirection
from walletcore.domain.models.ledger import LedgerEntryDraft
from walletcore.exceptions import ResolutionError
from walletcore.scanner.prev_tx_cache import PrevTxCache

logger = logging.getLogger(__name__)


def is_coinbase(tx: dict) -> bool:
    return any(vin.get("coinbase") for vin in tx.get("vin") or [])


class TransactionClassifier:
    """Turns a decoded transaction into at most one ledger entry for a wallet.

    Direction is decided by input ownership: if any resolved previous output
    belongs to the wallet, the transaction was sent by it. Outputs are bucketed
    into the wallet's own change, known platform-fee collectors, and everyone else.
    """

    def __init__(
        self,
        prev_tx_cache: PrevTxCache,
        platform_fee_addresses: Iterable[str] = (),
        split_platform_fee: bool = True,
    ) -> None:
        self._cache = prev_tx_cache
        self._platform_fee_addresses = {normalize_address(a) for a in platform_fee_addresses if a}
        self._split_platform_fee = split_platform_fee

    async def classify(
        self,
        tx: dict,
        wallet_address: str,
        *,
        block_height: int,
        confirmations: int,
        timestamp_ms: int,
        strict: bool = True,
    ) -> Optional[LedgerEntryDraft]:
        """Return the ledger entry for ``wallet_address``, or None if the tx is irrelevant.

        With ``strict`` an unresolvable input raises ResolutionError so the caller
        can skip the transaction and retry it on a later scan. Otherwise the
        input is left out of the totals.
        """
        if is_coinbase(tx):
            return None

        wallet = normalize_address(wallet_address)
        txid = tx.get("txid", "")

        is_sent = False
        input_total_sat = 0

        for vin in tx.get("vin") or []:
            prev_txid = vin.get("txid")
            if not prev_txid:
                continue

            try:
                prev_tx = await self._cache.get_prev_tx(prev_txid)
            except ResolutionError:
                if strict:
                    raise
                logger.debug("Input %s of %s unresolved, classifying without it", prev_txid, txid)
                continue

            prev_vout = _output_at(prev_tx, vin.get("vout"))
            if prev_vout is None:
                if strict:
                    raise ResolutionError(prev_txid, vin.get("vout"))
                continue

            input_total_sat += coin_to_sat(prev_vout.get("value"))
            if normalize_address(vout_address(prev_vout)) == wallet:
                is_sent = True

        my_output_sat = 0
        output_total_sat = 0
        platform_candidate_sat = 0
        first_platform_address: Optional[str] = None
        recipient_output_sat = 0
        first_recipient_address: Optional[str] = None

        for vout in tx.get("vout") or []:
            raw_address = vout_address(vout)
            address = normalize_address(raw_address)
            value_sat = coin_to_sat(vout.get("value"))
            output_total_sat += value_sat

            if address == wallet:
                my_output_sat += value_sat
            elif address in self._platform_fee_addresses:
                platform_candidate_sat += value_sat
                if first_platform_address is None and raw_address:
                    first_platform_address = raw_address
            else:
                recipient_output_sat += value_sat
                if first_recipient_address is None and raw_address:
                    first_recipient_address = raw_address

        common = {
            "tx_hash": txid,
            "wallet_address": wallet,
            "status": LedgerStatus.CONFIRMED,
            "block_height": block_height,
            "confirmations": confirmations,
            "timestamp": timestamp_ms,
        }

        if not is_sent:
            if my_output_sat <= 0:
                return None
            return LedgerEntryDraft(
                **common,
                from_addr=PeerSentinel.OTHER.value,
                to_addr=wallet,
                direction=TxDirection.RECEIVED,
                amount_sat=my_output_sat,
            )

        fee_sat = max(0, input_total_sat - output_total_sat)

        if self._split_platform_fee and recipient_output_sat > 0 and platform_candidate_sat > 0:
            return LedgerEntryDraft(
                **common,
                from_addr=wallet,
                to_addr=first_recipient_address or PeerSentinel.UNKNOWN.value,
                direction=TxDirection.SENT,
                amount_sat=recipient_output_sat,
                fee_sat=fee_sat,
                platform_fee_sat=platform_candidate_sat,
                platform_fee_address=first_platform_address,
            )

        return LedgerEntryDraft(
            **common,
            from_addr=wallet,
            to_addr=first_recipient_address or first_platform_address or PeerSentinel.UNKNOWN.value,
            direction=TxDirection.SENT,
            amount_sat=recipient_output_sat + platform_candidate_sat,
            fee_sat=fee_sat,
        )


def _output_at(tx: Optional[dict], index: object) -> Optional[dict]:
    outputs = (tx or {}).get("vout") or []
    if not isinstance(index, int) or index < 0 or index >= len(outputs):
        return None
    return outputs[index]
