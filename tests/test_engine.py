"""Synthetic generator tests
Feature: dom-trainer engine
Property 1: fixed ladder / cluster sizes
Property 2: level intensity and wall flag
Property 3: non-crossing, monotonic ladder
Property 4: cluster delta and importance
Property 9: bounded reference price walk
"""

import numpy as np
import pytest
from hypothesis import given, strategies as st, settings

from dom_trainer.engine.clusters import ClusterGenerator
from dom_trainer.engine.orderbook import OrderBookGenerator
from dom_trainer.engine.walker import PriceWalker, advance


# ── strategies ──

seed_st = st.integers(min_value=0, max_value=2**32 - 1)
# Reference prices on the 4-decimal grid the walker produces
price_st = st.integers(min_value=1, max_value=200_000).map(lambda n: n / 10_000)
spread_st = st.integers(min_value=0, max_value=20).map(lambda n: n / 10_000)
# Arbitrary floats, including half-tick spreads that round onto the bid
offgrid_price_st = st.floats(min_value=0.01, max_value=20.0, allow_nan=False, allow_infinity=False)
offgrid_spread_st = st.one_of(
    st.sampled_from([0.0, 0.00005, 0.00015, 0.000049, 0.000051]),
    st.floats(min_value=0.0, max_value=0.002, allow_nan=False, allow_infinity=False),
)


# ── Price walker ──

class TestPriceWalker:

    @given(seed=seed_st, start=price_st, steps=st.integers(min_value=1, max_value=300))
    @settings(max_examples=100)
    def test_walk_stays_in_envelope(self, seed, start, steps):
        """After n steps the price moved at most n * (walk_step + rounding)."""
        walker = PriceWalker(rng=np.random.default_rng(seed))
        price = start
        for _ in range(steps):
            nxt = walker.advance(price)
            assert abs(nxt - price) <= walker.step + 0.00005 + 1e-12
            price = nxt
        assert abs(price - start) <= steps * (walker.step + 0.00005) + 1e-9

    @given(seed=seed_st)
    @settings(max_examples=50)
    def test_price_stays_positive(self, seed):
        walker = PriceWalker(rng=np.random.default_rng(seed))
        price = 0.0001
        for _ in range(500):
            price = walker.advance(price)
            assert price > 0

    @given(seed=seed_st, start=price_st)
    @settings(max_examples=100)
    def test_result_is_rounded(self, seed, start):
        walker = PriceWalker(rng=np.random.default_rng(seed))
        nxt = walker.advance(start)
        assert nxt == round(nxt, 4)

    def test_same_seed_same_path(self):
        a = PriceWalker(rng=np.random.default_rng(7))
        b = PriceWalker(rng=np.random.default_rng(7))
        pa = pb = 0.5818
        for _ in range(50):
            pa, pb = a.advance(pa), b.advance(pb)
        assert pa == pb

    def test_zero_step_is_constant(self):
        walker = PriceWalker(step=0.0, rng=np.random.default_rng(1))
        assert walker.advance(0.5818) == 0.5818

    def test_module_advance(self):
        nxt = advance(0.5818)
        assert abs(nxt - 0.5818) <= 0.0003 + 1e-12
        assert nxt > 0


# ── Order book generator ──

class TestOrderBookGenerator:

    def test_reference_scenario(self):
        """0.5818 / spread 0.0001 / tick 0.0001 -> best ask 0.5819, best bid 0.5818."""
        book = OrderBookGenerator(rng=np.random.default_rng(0)).generate(0.5818, 0.0001)
        assert book.asks[0].price == 0.5819
        assert book.bids[0].price == 0.5818
        assert book.asks[1].price == 0.5820
        assert book.bids[1].price == 0.5817
        assert book.best_ask == 0.5819
        assert book.best_bid == 0.5818

    @given(seed=seed_st, ref=price_st, spread=spread_st)
    @settings(max_examples=200)
    def test_ladder_shape(self, seed, ref, spread):
        gen = OrderBookGenerator(rng=np.random.default_rng(seed))
        book = gen.generate(ref, spread)

        assert len(book.asks) == 20
        assert len(book.bids) == 20

        ask_prices = [lvl.price for lvl in book.asks]
        bid_prices = [lvl.price for lvl in book.bids]
        assert all(a < b for a, b in zip(ask_prices, ask_prices[1:]))
        assert all(a > b for a, b in zip(bid_prices, bid_prices[1:]))
        assert book.asks[0].price > book.bids[0].price

    @given(seed=seed_st, ref=price_st, spread=spread_st)
    @settings(max_examples=200)
    def test_level_metrics(self, seed, ref, spread):
        gen = OrderBookGenerator(rng=np.random.default_rng(seed))
        book = gen.generate(ref, spread)

        for level in book.asks + book.bids:
            assert isinstance(level.volume, int)
            assert 1000 <= level.volume < 11000
            assert 0 <= level.intensity <= 100
            assert level.is_high_volume == (level.volume > 5000)
            assert level.intensity == min(100.0, level.volume / 10000 * 100)

    def test_zero_spread_does_not_cross(self):
        book = OrderBookGenerator(rng=np.random.default_rng(3)).generate(0.5818, 0.0)
        assert book.asks[0].price == 0.5819
        assert book.bids[0].price == 0.5818

    @given(seed=seed_st, ref=offgrid_price_st, spread=offgrid_spread_st)
    @settings(max_examples=300)
    def test_offgrid_inputs_keep_ladder_ordered(self, seed, ref, spread):
        book = OrderBookGenerator(rng=np.random.default_rng(seed)).generate(ref, spread)

        ask_prices = [lvl.price for lvl in book.asks]
        bid_prices = [lvl.price for lvl in book.bids]
        assert all(a < b for a, b in zip(ask_prices, ask_prices[1:]))
        assert all(a > b for a, b in zip(bid_prices, bid_prices[1:]))
        assert book.asks[0].price > book.bids[0].price
        assert book.bids[0].price == round(ref, 4)

    def test_half_tick_spread_widened(self):
        book = OrderBookGenerator(rng=np.random.default_rng(3)).generate(0.5818, 0.00005)
        assert book.asks[0].price == 0.5819
        assert book.bids[0].price == 0.5818

    def test_offgrid_reference_bids_distinct(self):
        book = OrderBookGenerator(rng=np.random.default_rng(3)).generate(0.58185, 0.0001)
        bid_prices = [lvl.price for lvl in book.bids]
        assert len(set(bid_prices)) == 20
        assert bid_prices[1] == round(bid_prices[0] - 0.0001, 4)
        assert book.asks[0].price == round(bid_prices[0] + 0.0001, 4)

    def test_negative_spread_rejected(self):
        with pytest.raises(ValueError):
            OrderBookGenerator().generate(0.5818, -0.0001)

    def test_custom_depth(self):
        book = OrderBookGenerator(levels=5, rng=np.random.default_rng(1)).generate(1.0, 0.0002)
        assert len(book.asks) == len(book.bids) == 5
        assert book.asks[0].price == 1.0002
        assert book.spread == pytest.approx(0.0002)

    def test_consecutive_draws_are_independent(self):
        gen = OrderBookGenerator(rng=np.random.default_rng(11))
        first = gen.generate(0.5818, 0.0001)
        second = gen.generate(0.5818, 0.0001)
        assert [l.price for l in first.asks] == [l.price for l in second.asks]
        assert [l.volume for l in first.asks] != [l.volume for l in second.asks]


# ── Cluster generator ──

class TestClusterGenerator:

    @given(seed=seed_st, ref=price_st)
    @settings(max_examples=200)
    def test_cells(self, seed, ref):
        cells = ClusterGenerator(rng=np.random.default_rng(seed)).generate(ref)

        assert len(cells) == 21
        for cell in cells:
            assert 50 <= cell.buy_volume < 550
            assert 50 <= cell.sell_volume < 550
            assert cell.delta == cell.buy_volume - cell.sell_volume
            assert cell.is_important == (abs(cell.delta) > 300)

    def test_band_is_centred_on_reference(self):
        cells = ClusterGenerator(rng=np.random.default_rng(0)).generate(0.5818)
        assert cells[0].price == 0.5808
        assert cells[10].price == 0.5818
        assert cells[-1].price == 0.5828
        prices = [c.price for c in cells]
        assert prices == sorted(prices)

    @given(seed=seed_st, ref=offgrid_price_st)
    @settings(max_examples=200)
    def test_offgrid_reference_prices_distinct(self, seed, ref):
        cells = ClusterGenerator(rng=np.random.default_rng(seed)).generate(ref)
        prices = [c.price for c in cells]
        assert all(a < b for a, b in zip(prices, prices[1:]))
        assert cells[10].price == round(ref, 4)

    def test_custom_threshold(self):
        gen = ClusterGenerator(half_width=2, important_threshold=0, rng=np.random.default_rng(5))
        cells = gen.generate(1.0)
        assert len(cells) == 5
        assert all(c.is_important == (c.delta != 0) for c in cells)
