"""Run one confirmed-transaction scan for a wallet and print its ledger.

Usage:
    PYTHONPATH=src python scripts/scan_wallet.py <address> [--history]
"""

import asyncio
import logging
import sys

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def main(address: str, show_history: bool) -> None:
    from walletcore.container import Container
    from walletcore.db.repos.transaction_repo import TransactionRepo
    from walletcore.domain.amounts import sat_to_coin_string

    container = Container()
    try:
        result = await container.scan_service().scan_confirmed_transactions(address)
        print(f"Scan {result.wallet_address}: {result.status.value}")
        print(f"  heights:  {result.start_height} -> {result.end_height}")
        print(f"  checkpoint: {result.last_committed_height}")
        print(f"  entries:  {result.entries_saved}")

        if show_history:
            async with container.session_factory()() as session:
                rows = await TransactionRepo(session).get_transactions(address)
            print(f"\n--- {len(rows)} ledger entries ---")
            for r in rows:
                fee = sat_to_coin_string(r.fee_sat) if r.fee_sat is not None else "-"
                print(
                    f"  {r.block_height:>8}  {r.direction:<8}  {sat_to_coin_string(r.amount_sat):>16}"
                    f"  fee {fee:<12}  {r.tx_hash}"
                )
    finally:
        await container.rpc_client().close()
        await container.engine().dispose()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1], "--history" in sys.argv[2:]))
