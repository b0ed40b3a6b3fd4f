import asyncio
from unittest.mock import AsyncMock

import pytest

from currencies.binding import AsyncOnce, resolve_token_binding
from errors import ContractUnavailable
from execution.evm import ERC20_MIN_ABI


def test_async_once_runs_factory_once_under_concurrency():
    calls = []

    async def factory():
        calls.append(1)
        await asyncio.sleep(0)
        return object()

    cell = AsyncOnce(factory)

    async def run():
        return await asyncio.gather(*(cell.get() for _ in range(10)))

    results = asyncio.run(run())
    assert len(calls) == 1
    assert all(r is results[0] for r in results)
    assert cell.resolved


def test_async_once_does_not_cache_failures():
    attempts = []

    async def factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("rpc down")
        return 42

    cell = AsyncOnce(factory)

    with pytest.raises(RuntimeError):
        asyncio.run(cell.get())
    assert not cell.resolved
    assert asyncio.run(cell.get()) == 42


def test_resolve_binding_reads_decimals(make_provider):
    provider = make_provider(decimals=6)
    binding = asyncio.run(resolve_token_binding(provider, "0x" + "11" * 20))
    assert binding.decimals == 6
    assert binding.base.scale == 10**6


def test_resolve_binding_wraps_rpc_errors(make_provider):
    provider = make_provider()
    provider.contract.return_value.functions.decimals.return_value.call = AsyncMock(
        side_effect=ConnectionError("boom")
    )
    with pytest.raises(ContractUnavailable) as e:
        asyncio.run(resolve_token_binding(provider, "0x" + "11" * 20))
    assert e.value.retryable


def test_resolve_binding_rejects_out_of_range_decimals(make_provider):
    provider = make_provider(decimals=300)
    with pytest.raises(ContractUnavailable):
        asyncio.run(resolve_token_binding(provider, "0x" + "11" * 20))


def test_get_binding_queries_decimals_once(make_provider, make_token):
    provider = make_provider(decimals=8)
    token = make_token(provider)
    assert token.base.scale == 10**18  # configured default until resolved

    async def run():
        return [await token.get_binding() for _ in range(5)]

    bindings = asyncio.run(run())
    decimals_call = provider.contract.return_value.functions.decimals.return_value.call
    assert decimals_call.await_count == 1
    assert all(b is bindings[0] for b in bindings)
    assert token.base.scale == 10**8


def test_get_binding_failure_leaves_nothing_cached(make_provider, make_token):
    provider = make_provider(decimals=18)
    decimals_call = provider.contract.return_value.functions.decimals.return_value.call
    decimals_call.side_effect = [TimeoutError("slow"), 18]
    token = make_token(provider)

    with pytest.raises(ContractUnavailable):
        asyncio.run(token.get_binding())
    binding = asyncio.run(token.get_binding())
    assert binding.decimals == 18
    assert decimals_call.await_count == 2


def test_binding_abi_covers_only_called_methods(make_provider):
    assert sorted(entry["name"] for entry in ERC20_MIN_ABI) == ["decimals", "transfer"]
    provider = make_provider()
    asyncio.run(resolve_token_binding(provider, "0x" + "11" * 20))
    assert provider.contract.call_args[0][1] is ERC20_MIN_ABI
