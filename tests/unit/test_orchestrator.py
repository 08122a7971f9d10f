"""
Unit tests for the end-to-end comparison flow.
"""

import io
from unittest.mock import patch

import pytest

from rpc_compare.models.core import Protocol
from rpc_compare.models.errors import GenerationError, SetupError, TestRunFailure
from rpc_compare.runner.filter_list import FilterList
from rpc_compare.runner.orchestrator import apply_filter, build_catalogue, compare_apis, plan_comparison
from rpc_compare.utils.config import CompareConfig, ReportFormat


class TestCatalogue:
    """Test catalogue construction."""

    def test_sorted_by_method_name(self):
        names = [test.method_name for test in build_catalogue(Protocol.HTTP)]

        assert names == sorted(names)

    def test_websocket_tests_only_over_ws(self):
        http_names = {test.method_name for test in build_catalogue(Protocol.HTTP)}
        ws_names = {test.method_name for test in build_catalogue(Protocol.WS)}

        assert "Filecoin.ChainNotify" not in http_names
        assert "Filecoin.ChainNotify" in ws_names

    def test_apply_filter(self):
        tests = build_catalogue(Protocol.HTTP)

        selected = apply_filter(tests, FilterList(allow=["Filecoin.Eth"], reject=["Gas"]))

        assert selected
        assert all(test.method_name.startswith("Filecoin.Eth") for test in selected)
        assert all("Gas" not in test.method_name for test in selected)

    def test_no_filter(self):
        tests = build_catalogue(Protocol.HTTP)

        assert apply_filter(tests, None) is tests


class TestPlan:
    """Test everything resolved before the first call."""

    def test_plan(self):
        plan = plan_comparison(CompareConfig(), filter_list=FilterList.from_substring("Wallet"))

        assert plan.protocol is Protocol.HTTP
        assert plan.sut.port == 2345
        assert plan.reference.port == 1234
        assert {test.method_name for test in plan.tests} == {
            "Filecoin.WalletBalance",
            "Filecoin.WalletValidateAddress",
            "Filecoin.WalletVerify",
        }

    def test_transport_mismatch(self):
        config = CompareConfig(reference_address="/ip4/127.0.0.1/tcp/1234/ws")

        with pytest.raises(SetupError):
            plan_comparison(config)

    def test_unreadable_archive(self, tmp_path):
        with pytest.raises(GenerationError):
            plan_comparison(CompareConfig(), snapshot_paths=[tmp_path / "missing.yaml"])


class TestCompareApis:
    """Test a full run against in-memory clients."""

    @pytest.mark.asyncio
    async def test_passing_run(self, fake_client_factory):
        """The report is printed and the aggregator returned."""
        clients = [fake_client_factory({"Filecoin.NetListening": True}) for _ in range(2)]
        output = io.StringIO()

        with patch("rpc_compare.runner.orchestrator.create_client", side_effect=clients):
            aggregator = await compare_apis(
                CompareConfig(),
                filter_list=FilterList.from_substring("Filecoin.NetListening"),
                output=output,
            )

        assert aggregator.passed == 1
        assert "Filecoin.NetListening" in output.getvalue()
        assert all(client.closed for client in clients)

    @pytest.mark.asyncio
    async def test_failing_run_still_reports(self, fake_client_factory):
        """Failures raise after the full report has been written."""
        clients = [
            fake_client_factory({"Filecoin.NetListening": False}),
            fake_client_factory({"Filecoin.NetListening": True}),
        ]
        output = io.StringIO()

        with patch("rpc_compare.runner.orchestrator.create_client", side_effect=clients):
            with pytest.raises(TestRunFailure) as exc_info:
                await compare_apis(
                    CompareConfig(report_format=ReportFormat.JSON),
                    filter_list=FilterList.from_substring("Filecoin.NetListening"),
                    output=output,
                )

        assert exc_info.value.failed == 1
        assert '"sut": "InvalidResponse"' in output.getvalue()

    @pytest.mark.asyncio
    async def test_setup_error_before_any_call(self, fake_client_factory):
        config = CompareConfig(sut_address="/ip4/127.0.0.1/tcp/2345/ws")

        with patch("rpc_compare.runner.orchestrator.create_client") as create:
            with pytest.raises(SetupError):
                await compare_apis(config)

        create.assert_not_called()
