# tests/test_reconciliation.py
"""OrderStatusReconciler against the in-memory settlement contract."""

import pytest
from web3 import Web3

from limit_orders.chains import chain_id_to_verifying_contract
from limit_orders.errors import (
    ContractCallError,
    ContractNotAvailableError,
    ReconciliationInvariantError,
)
from limit_orders.methods.get_orders import (
    ORDER_CANCELLED_TOPIC,
    ORDER_FILLED_TOPIC,
    OrderStatusReconciler,
)

from conftest import (
    CHAIN_ID,
    MAKER_A,
    MAKER_B,
    MAKER_C,
    FakeContractCaller,
    cancelled_log,
    filled_log,
    make_order,
    order_hash,
    tx_hash,
)

H1, H2, H3, H4, H5 = (order_hash(n) for n in range(1, 6))


def _reconciler(caller, clock, **kwargs):
    return OrderStatusReconciler(caller, CHAIN_ID, clock=clock, **kwargs)


@pytest.mark.asyncio
async def test_remaining_balances_align_with_input_across_makers(clock):
    orders = [
        make_order(H1, maker=MAKER_A),
        make_order(H2, maker=MAKER_B),
        make_order(H3, maker=MAKER_A),
        make_order(H4, maker=MAKER_C),
        make_order(H5, maker=MAKER_B),
    ]
    caller = FakeContractCaller(balances={H1: 11, H2: 22, H3: 33, H4: 44, H5: 55})

    balances = await _reconciler(caller, clock).fetch_remaining_balances(orders)

    assert balances == [11, 22, 33, 44, 55]
    # one call per maker, hashes in input order within each maker
    calls = {call["args"][0]: call["args"][1] for call in caller.static_calls}
    assert calls == {
        Web3.to_checksum_address(MAKER_A): [H1, H3],
        Web3.to_checksum_address(MAKER_B): [H2, H5],
        Web3.to_checksum_address(MAKER_C): [H4],
    }
    assert all(call["method"] == "getRemainingOrderBalance" for call in caller.static_calls)
    assert all(
        call["address"] == chain_id_to_verifying_contract[CHAIN_ID] for call in caller.static_calls
    )


@pytest.mark.asyncio
async def test_maker_grouping_ignores_address_case(clock):
    orders = [make_order(H1, maker="0x" + "AB" * 20), make_order(H2, maker="0x" + "ab" * 20)]
    caller = FakeContractCaller(balances={H1: 0, H2: 7})

    balances = await _reconciler(caller, clock).fetch_remaining_balances(orders)

    assert balances == [0, 7]
    assert len(caller.static_calls) == 1


@pytest.mark.asyncio
async def test_overrides_are_passed_to_every_balance_call(clock):
    orders = [make_order(H1, maker=MAKER_A), make_order(H2, maker=MAKER_B)]
    caller = FakeContractCaller()
    overrides = {"block": 123}

    await _reconciler(caller, clock).fetch_remaining_balances(orders, overrides)

    assert [call["overrides"] for call in caller.static_calls] == [overrides, overrides]


@pytest.mark.asyncio
async def test_balance_failure_fails_the_whole_fetch(clock):
    orders = [make_order(H1, maker=MAKER_A), make_order(H2, maker=MAKER_B)]
    caller = FakeContractCaller(static_error=ContractCallError("execution reverted"))

    with pytest.raises(ContractCallError):
        await _reconciler(caller, clock).fetch_remaining_balances(orders)


@pytest.mark.asyncio
async def test_balance_count_mismatch_is_an_invariant_violation(clock):
    class ShortCaller(FakeContractCaller):
        async def static_call(self, address, abi, method, args, overrides=None):
            balances = await super().static_call(address, abi, method, args, overrides)
            return balances[:-1]

    orders = [make_order(H1), make_order(H2)]

    with pytest.raises(ReconciliationInvariantError):
        await _reconciler(ShortCaller(), clock).fetch_remaining_balances(orders)


@pytest.mark.asyncio
async def test_unknown_chain_fails_before_any_call(clock):
    caller = FakeContractCaller()
    reconciler = OrderStatusReconciler(caller, 999_999, clock=clock)

    with pytest.raises(ContractNotAvailableError) as exc_info:
        await reconciler.get_orders_status_and_amount_filled([make_order(H1)])

    assert exc_info.value.chain_id == 999_999
    assert "999999" in str(exc_info.value)
    assert caller.static_calls == []
    assert caller.log_calls == []


@pytest.mark.asyncio
async def test_registry_overrides_add_chains(clock):
    contract = "0x5555555555555555555555555555555555555555"
    caller = FakeContractCaller()
    reconciler = OrderStatusReconciler(
        caller, 999_999, verifying_contracts={999_999: contract}, deployed_blocks={999_999: 42}, clock=clock
    )

    await reconciler.get_orders_status_and_amount_filled([make_order(H1)])

    assert caller.static_calls[0]["address"] == contract
    assert caller.log_calls[0]["filter"]["fromBlock"] == 42


@pytest.mark.asyncio
async def test_event_query_is_one_batched_filter(clock):
    caller = FakeContractCaller()
    hashes = [H1, H2, H3]

    await _reconciler(caller, clock).fetch_order_events(hashes)

    assert len(caller.log_calls) == 1
    log_filter = caller.log_calls[0]["filter"]
    assert log_filter["address"] == chain_id_to_verifying_contract[CHAIN_ID]
    assert log_filter["topics"] == [[ORDER_FILLED_TOPIC, ORDER_CANCELLED_TOPIC], hashes]
    # no deployment block known for the chain
    assert log_filter["fromBlock"] == 0


@pytest.mark.asyncio
async def test_event_query_from_explicit_block(clock):
    caller = FakeContractCaller()

    await _reconciler(caller, clock).fetch_order_events([H1], from_block=15_000_000)

    assert caller.log_calls[0]["filter"]["fromBlock"] == 15_000_000


@pytest.mark.asyncio
async def test_mixed_batch_scenario(clock):
    orders = [
        make_order(H1, maker=MAKER_A),
        make_order(H2, maker=MAKER_B),
        make_order(H3, maker=MAKER_A, maker_amount="10"),
    ]
    caller = FakeContractCaller(
        balances={H1: 0, H2: 1, H3: 5},
        logs=[
            cancelled_log(H2, tx_hash(1), maker=MAKER_B),
            filled_log(H3, tx_hash(2), 5),
        ],
    )

    extras = await _reconciler(caller, clock).get_orders_status_and_amount_filled(orders)

    assert [extra.status for extra in extras] == ["open", "canceled", "partiallyFilled"]
    assert extras[0].amount_filled == "0"
    assert extras[0].transaction_hashes is None
    assert extras[1].transaction_hashes == (tx_hash(1),)
    assert extras[2].amount_filled == "5"
    assert extras[2].transaction_hashes == (tx_hash(2),)
    assert len(caller.static_calls) == 2
    assert len(caller.log_calls) == 1


@pytest.mark.asyncio
async def test_events_match_order_hashes_case_insensitively(clock):
    upper = "0x" + "CD" * 32
    order = make_order(upper, maker_amount="100")
    caller = FakeContractCaller(
        balances={upper: 1},
        logs=[filled_log(upper.lower(), tx_hash(1), 100)],
    )

    extra = await _reconciler(caller, clock).get_order_status_and_amount_filled(order)

    assert extra.status == "filled"
    assert extra.amount_filled == "100"
    assert extra.transaction_hashes == (tx_hash(1),)


@pytest.mark.asyncio
async def test_cancel_after_partial_fill(clock):
    order = make_order(H1, maker_amount="1000")
    caller = FakeContractCaller(
        balances={H1: 1},
        logs=[filled_log(H1, tx_hash(1), 300), cancelled_log(H1, tx_hash(2))],
    )

    extra = await _reconciler(caller, clock).get_order_status_and_amount_filled(order)

    assert extra.status == "canceled"
    assert extra.amount_filled == "300"
    assert extra.transaction_hashes == (tx_hash(1), tx_hash(2))


@pytest.mark.asyncio
async def test_touched_order_without_logs_raises(clock):
    caller = FakeContractCaller(balances={H1: 1})

    with pytest.raises(ReconciliationInvariantError):
        await _reconciler(caller, clock).get_orders_status_and_amount_filled([make_order(H1)])


@pytest.mark.asyncio
async def test_missing_remaining_balance_raises(clock, monkeypatch):
    reconciler = _reconciler(FakeContractCaller(), clock)

    async def no_balances(orders, overrides=None):
        return [None] * len(orders)

    monkeypatch.setattr(reconciler, "fetch_remaining_balances", no_balances)

    with pytest.raises(ReconciliationInvariantError, match="remainingBalance"):
        await reconciler.get_orders_status_and_amount_filled([make_order(H1)])


@pytest.mark.asyncio
async def test_empty_batch_makes_no_calls(clock):
    caller = FakeContractCaller()

    extras = await _reconciler(caller, clock).get_orders_status_and_amount_filled([])

    assert extras == []
    assert caller.static_calls == []
    assert caller.log_calls == []


@pytest.mark.asyncio
async def test_reconciliation_is_idempotent(clock):
    orders = [make_order(H1), make_order(H2, maker=MAKER_B), make_order(H3, maker_amount="10")]
    caller = FakeContractCaller(
        balances={H2: 1, H3: 4},
        logs=[filled_log(H2, tx_hash(1), 10, maker=MAKER_B), filled_log(H3, tx_hash(2), 6)],
    )
    reconciler = _reconciler(caller, clock)

    first = await reconciler.get_orders_status_and_amount_filled(orders)
    second = await reconciler.get_orders_status_and_amount_filled(orders)

    assert first == second
    assert [extra.status for extra in first] == ["open", "filled", "partiallyFilled"]
    assert first[2].amount_filled == "6"
