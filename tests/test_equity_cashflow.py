"""Tests for indexed and equity cash flows."""

import threading
from datetime import date

import pytest

from valcore.cashflows import EquityCashFlow, SimpleCashFlow, set_coupon_pricer
from valcore.errors import TypeMismatchError
from valcore.indexes import EquityIndex, ZeroInflationIndex
from valcore.observable import market_data_lock
from valcore.pricers import EquityIndexRatioPricer

BASE = date(2023, 6, 1)
FIXING = date(2024, 1, 2)
PAYMENT = date(2024, 1, 4)


class CountingPricer(EquityIndexRatioPricer):
    """Ratio pricer recording how often it is asked for a price."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def price(self) -> float:
        self.calls += 1
        return super().price()


def _index(i0: float = 100.0, i1: float = 110.0) -> EquityIndex:
    index = EquityIndex("EQIDX")
    index.add_fixings([BASE, FIXING], [i0, i1])
    return index


def test_amount_without_pricer_is_index_ratio() -> None:
    """Base 100, fixing 110, notional 1 pays 1.1."""
    flow = EquityCashFlow(1.0, _index(), BASE, FIXING, PAYMENT)
    assert flow.amount() == pytest.approx(1.1)
    assert flow.pricer is None


@pytest.mark.parametrize(
    "notional, i0, i1",
    [(1.0, 100.0, 110.0), (250_000.0, 250.5, 251.25), (10.0, 3.7, 2.9)],
)
def test_amount_matches_ratio(notional: float, i0: float, i1: float) -> None:
    """amount = notional * I1 / I0, minus notional when growth only."""
    index = _index(i0, i1)
    flow = EquityCashFlow(notional, index, BASE, FIXING, PAYMENT)
    growth = EquityCashFlow(notional, index, BASE, FIXING, PAYMENT, growth_only=True)
    assert flow.amount() == notional * (i1 / i0)
    assert growth.amount() == notional * (i1 / i0 - 1.0)


def test_accessors() -> None:
    """Constructor arguments are exposed read-only."""
    index = _index()
    flow = EquityCashFlow(5.0, index, BASE, FIXING, PAYMENT, growth_only=True)
    assert flow.notional == 5.0
    assert flow.index is index
    assert flow.base_date == BASE
    assert flow.fixing_date == FIXING
    assert flow.payment_date == PAYMENT
    assert flow.growth_only
    assert flow.base_fixing() == 100.0
    assert flow.index_fixing() == 110.0


def test_has_occurred() -> None:
    """Payments on or before the reference date have occurred."""
    flow = EquityCashFlow(1.0, _index(), BASE, FIXING, PAYMENT)
    assert flow.has_occurred()
    assert flow.has_occurred(PAYMENT)
    assert not flow.has_occurred(PAYMENT, include_ref_date=True)
    assert not flow.has_occurred(date(2024, 1, 3))


def test_amount_refreshes_after_fixing_overwrite() -> None:
    """A corrected fixing reaches the cached amount."""
    index = _index()
    flow = EquityCashFlow(1.0, index, BASE, FIXING, PAYMENT)
    assert flow.amount() == pytest.approx(1.1)
    index.add_fixing(FIXING, 120.0, force_overwrite=True)
    assert not flow.is_calculated()
    assert flow.amount() == pytest.approx(1.2)


def test_pricer_result_is_cached() -> None:
    """The pricer runs once until something notifies."""
    flow = EquityCashFlow(2.0, _index(), BASE, FIXING, PAYMENT)
    pricer = CountingPricer()
    flow.set_pricer(pricer)
    assert flow.amount() == pytest.approx(2.2)
    assert flow.amount() == pytest.approx(2.2)
    assert pricer.calls == 1
    pricer.notify_observers()
    flow.amount()
    assert pricer.calls == 2


def test_set_pricer_invalidates_amount() -> None:
    """Installing or removing a pricer marks the amount stale."""
    flow = EquityCashFlow(1.0, _index(), BASE, FIXING, PAYMENT)
    flow.amount()
    first = CountingPricer()
    flow.set_pricer(first)
    assert not flow.is_calculated()
    flow.amount()
    assert first.calls == 1

    second = CountingPricer()
    flow.set_pricer(second)
    assert first.observers() == []
    assert second.observers() == [flow]
    flow.amount()
    assert second.calls == 1

    flow.set_pricer(None)
    assert flow.pricer is None
    assert flow.amount() == pytest.approx(1.1)


def test_set_coupon_pricer_skips_other_cash_flows() -> None:
    """Only equity cash flows of a leg receive the pricer."""
    index = _index()
    flows = [
        EquityCashFlow(1.0, index, BASE, FIXING, PAYMENT),
        SimpleCashFlow(5.0, PAYMENT),
        EquityCashFlow(2.0, index, BASE, FIXING, PAYMENT, growth_only=True),
    ]
    pricer = CountingPricer()
    set_coupon_pricer(flows, pricer)
    assert flows[0].pricer is pricer
    assert flows[2].pricer is pricer
    assert flows[1].amount() == 5.0
    assert flows[0].amount() == pytest.approx(1.1)
    assert flows[2].amount() == pytest.approx(0.2)


def test_pricer_rejects_non_equity_index() -> None:
    """Binding a pricer to a non-equity index is a type mismatch."""
    index = ZeroInflationIndex("EU HICP")
    flow = EquityCashFlow(1.0, index, date(2023, 1, 1), date(2023, 6, 1), PAYMENT)
    pricer = EquityIndexRatioPricer()
    assert not pricer.can_price(flow)
    flow.set_pricer(pricer)
    with pytest.raises(TypeMismatchError, match="EquityIndex required") as excinfo:
        flow.amount()
    assert isinstance(excinfo.value, TypeError)


class PausingIndex(EquityIndex):
    """Equity index whose first fixing lookup waits until released."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.entered = threading.Event()
        self.release = threading.Event()

    def fixing(self, d: date, forecast_todays_fixing: bool = False) -> float:
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(timeout=5.0)
        return super().fixing(d, forecast_todays_fixing)


def _amount_in_thread(flow: EquityCashFlow, results: dict, key: str) -> threading.Thread:
    def run() -> None:
        try:
            results[key] = flow.amount()
        except Exception as exc:
            results[key] = exc

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


def test_shared_pricer_keeps_each_flow_binding_across_threads() -> None:
    """A flow being priced on one thread is not rebound by another flow's pricing."""
    slow_index = PausingIndex("EQA")
    slow_index.add_fixings([BASE, FIXING], [100.0, 105.0])
    other_index = EquityIndex("EQB")
    other_index.add_fixings([BASE, FIXING], [100.0, 120.0])
    pricer = EquityIndexRatioPricer()
    slow = EquityCashFlow(1.0, slow_index, BASE, FIXING, PAYMENT)
    other = EquityCashFlow(1.0, other_index, BASE, FIXING, PAYMENT, growth_only=True)
    set_coupon_pricer([slow, other], pricer)

    results: dict = {}
    first = _amount_in_thread(slow, results, "slow")
    assert slow_index.entered.wait(timeout=5.0)
    second = _amount_in_thread(other, results, "other")
    second.join(timeout=0.2)
    assert second.is_alive()

    slow_index.release.set()
    first.join(timeout=5.0)
    second.join(timeout=5.0)
    assert results["slow"] == pytest.approx(1.05)
    assert results["other"] == pytest.approx(0.2)


def test_amount_waits_for_market_data_lock() -> None:
    """amount() blocks while another thread runs a mutation cascade."""
    flow = EquityCashFlow(1.0, _index(), BASE, FIXING, PAYMENT)
    results: dict = {}
    with market_data_lock:
        worker = _amount_in_thread(flow, results, "amount")
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert not flow.is_calculated()
    worker.join(timeout=5.0)
    assert results["amount"] == pytest.approx(1.1)
