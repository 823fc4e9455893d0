from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from celery.app.task import Task
from celery.exceptions import Retry

from walletcore.domain.enums import ScanStatus
from walletcore.domain.models.ledger import ScanResult
from walletcore.workers.tasks import _scan_wallet_async, scan_wallet_task


class TestScanWalletTask:
    async def test_returns_result_dict_and_cleans_up(self):
        container = MagicMock()
        container.scan_service.return_value.scan_confirmed_transactions = AsyncMock(
            return_value=ScanResult(wallet_address="scash1qw", status=ScanStatus.COMPLETED, entries_saved=3),
        )
        rpc = container.rpc_client.return_value
        rpc.close = AsyncMock()
        engine = container.engine.return_value
        engine.dispose = AsyncMock()

        with patch("walletcore.container.Container", return_value=container):
            result = await _scan_wallet_async("scash1qw")

        assert result["status"] == "completed"
        assert result["entries_saved"] == 3
        rpc.close.assert_awaited_once()
        engine.dispose.assert_awaited_once()


class TestScanWalletRetry:
    def test_error_status_is_retried(self):
        failed = {"wallet_address": "scash1qw", "status": "error"}
        with patch("walletcore.workers.tasks._scan_wallet_async", new=AsyncMock(return_value=failed)), \
                patch.object(Task, "retry", autospec=True, side_effect=Retry()) as retry:
            with pytest.raises(Retry):
                scan_wallet_task.run("scash1qw")

        retry.assert_called_once()

    def test_completed_scan_is_not_retried(self):
        done = {"wallet_address": "scash1qw", "status": "completed"}
        with patch("walletcore.workers.tasks._scan_wallet_async", new=AsyncMock(return_value=done)), \
                patch.object(Task, "retry", autospec=True) as retry:
            assert scan_wallet_task.run("scash1qw") == done

        retry.assert_not_called()
