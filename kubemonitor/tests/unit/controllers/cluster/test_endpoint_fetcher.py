"""Tests for endpoint fetcher."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from kubemonitor.controllers.cluster.fetchers.endpoint_fetcher import (
    EndpointFetcher,
    count_ready_addresses,
)
from kubemonitor.controllers.cluster.kubectl_runner import KubectlError


class TestCountReadyAddresses:
    """Tests for ready address counting."""

    def test_sums_subsets_and_ignores_not_ready(self) -> None:
        endpoints = {
            "subsets": [
                {"addresses": [{"ip": "10.0.0.1"}], "notReadyAddresses": [{"ip": "10.0.0.9"}]},
                {"addresses": [{"ip": "10.0.0.2"}, {"ip": "10.0.0.3"}]},
                {"notReadyAddresses": [{"ip": "10.0.0.8"}]},
            ]
        }
        assert count_ready_addresses(endpoints) == 3

    def test_no_subsets(self) -> None:
        assert count_ready_addresses({}) == 0
        assert count_ready_addresses({"subsets": None}) == 0


class TestEndpointFetcher:
    """Tests for EndpointFetcher class."""

    @pytest.mark.asyncio
    async def test_counts_keyed_by_namespace_and_name(self) -> None:
        run_kubectl = AsyncMock(
            return_value=json.dumps(
                {
                    "items": [
                        {
                            "metadata": {"name": "api", "namespace": "shop"},
                            "subsets": [{"addresses": [{"ip": "10.0.0.1"}]}],
                        },
                        {"metadata": {"name": "db", "namespace": "shop"}},
                    ]
                }
            )
        )
        fetcher = EndpointFetcher(run_kubectl)

        counts = await fetcher.fetch_ready_counts("shop")

        assert counts == {"shop/api": 1, "shop/db": 0}
        called_args = run_kubectl.await_args.args[0]
        assert called_args[:4] == ("get", "endpoints", "-n", "shop")

    @pytest.mark.asyncio
    async def test_all_namespaces(self) -> None:
        run_kubectl = AsyncMock(return_value="")
        fetcher = EndpointFetcher(run_kubectl)

        assert await fetcher.fetch_ready_counts() == {}
        assert "--all-namespaces" in run_kubectl.await_args.args[0]

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        fetcher = EndpointFetcher(AsyncMock(return_value="{"))

        with pytest.raises(KubectlError, match="endpoints"):
            await fetcher.fetch_ready_counts()
