from autotrader.config import TraderConfig
from autotrader.engine import HEDGE_SEND_ATTEMPTS, AutoTrader
from autotrader.enums import Instrument, Lifespan, Side
from autotrader.signals import FixedLot

from fakes import FlakySender


def book(trader, instrument, bid, ask, seq=None):
    if seq is None:
        seq = trader.last_seq.get(instrument, 0) + 1
    trader.on_order_book(instrument, seq,
                         [ask, 0, 0, 0, 0], [50, 0, 0, 0, 0],
                         [bid, 0, 0, 0, 0], [50, 0, 0, 0, 0])


def quote_pair(trader, etf_bid, etf_ask, fut_bid, fut_ask):
    book(trader, Instrument.FUTURE, fut_bid, fut_ask)
    book(trader, Instrument.ETF, etf_bid, etf_ask)


class TestOrderBook:
    def test_cheap_etf_triggers_buy(self, trader, sender):
        quote_pair(trader, 19800, 20000, 19900, 20100)   # mids 19900 / 20000
        assert abs(trader.last_ratio - 0.995) < 1e-12
        assert sender.inserts == [(1, Side.BUY, 20000, 10, Lifespan.GOOD_FOR_DAY)]
        assert trader.orders.bid_id == 1

    def test_rich_etf_triggers_sell_at_best_bid(self, trader, sender):
        quote_pair(trader, 20100, 20300, 20000, 20000)   # ratio 1.01
        assert sender.inserts == [(1, Side.SELL, 20100, 10, Lifespan.GOOD_FOR_DAY)]
        assert trader.orders.ask_id == 1

    def test_future_book_alone_never_trades(self, trader, sender):
        book(trader, Instrument.FUTURE, 19900, 20100)
        assert trader.midpoints.future == 20000
        assert sender.inserts == [] and trader.last_ratio is None

    def test_no_signal_without_future_midpoint(self, trader, sender):
        book(trader, Instrument.ETF, 19000, 19000)
        assert trader.last_ratio is None
        assert sender.inserts == []

    def test_second_buy_waits_for_slot(self, trader, sender):
        quote_pair(trader, 19800, 20000, 19900, 20100)
        book(trader, Instrument.ETF, 19800, 20000)
        assert len(sender.inserts) == 1

    def test_empty_ask_side_keeps_stale_mid_and_skips_buy(self, trader, sender):
        book(trader, Instrument.FUTURE, 20000, 20000)
        book(trader, Instrument.ETF, 19900, 19900)
        sender.inserts.clear()
        trader.orders.on_status(1, 0)
        book(trader, Instrument.ETF, 19800, 0)
        assert trader.midpoints.etf == 19900
        assert sender.inserts == []

    def test_position_clamps_volume(self, sender):
        trader = AutoTrader(sender, TraderConfig(strategy="fixed", lot_size=20), FixedLot())
        trader.hedger.position = 90
        quote_pair(trader, 19800, 20000, 19900, 20100)
        assert sender.inserts[0][3] == 10

    def test_stale_sequence_dropped(self, trader, sender):
        book(trader, Instrument.FUTURE, 20000, 20000, seq=5)
        book(trader, Instrument.FUTURE, 30000, 30000, seq=4)
        assert trader.midpoints.future == 20000
        assert trader.last_seq[Instrument.FUTURE] == 5

    def test_sequence_gap_tolerated(self, trader):
        book(trader, Instrument.FUTURE, 20000, 20000, seq=1)
        book(trader, Instrument.FUTURE, 21000, 21000, seq=9)
        assert trader.midpoints.future == 21000

    def test_trade_ticks_change_nothing(self, trader, sender):
        before = trader.snapshot()
        trader.on_trade_ticks(Instrument.ETF, 1, [19000] * 5, [1] * 5, [18000] * 5, [1] * 5)
        assert trader.snapshot() == before
        assert sender.inserts == []


class TestCancelFlow:
    def test_cancel_resting_ask_when_edge_closes(self, trader, sender):
        for _ in range(4):
            trader.orders.next_id()
        quote_pair(trader, 20100, 20300, 20000, 20000)
        assert trader.orders.ask_id == 5

        book(trader, Instrument.FUTURE, 100000, 100000)
        book(trader, Instrument.ETF, 99900, 99900)      # ratio 0.999
        assert sender.cancels == [5]
        assert trader.orders.ask_id == 5

        book(trader, Instrument.ETF, 99900, 99900)
        assert sender.cancels == [5]                    # not re-sent

        trader.on_order_status(5, 0, 0, 0)
        assert trader.orders.ask_id == 0

    def test_cancel_raced_by_fill(self, trader, sender):
        quote_pair(trader, 19800, 20000, 19900, 20100)
        book(trader, Instrument.ETF, 20000, 20000)       # ratio 1.0 → cancel bid
        assert sender.cancels == [1]
        trader.on_order_filled(1, 20000, 10)
        trader.on_order_status(1, 10, 0, 2)
        assert trader.position == 10
        assert trader.orders.bid_id == 0
        trader.on_order_status(1, 0, 0, 0)               # late cancel ack
        assert trader.orders.bid_id == 0


class TestFills:
    def test_ask_fill_hedged_with_buy(self, trader, sender):
        quote_pair(trader, 20100, 20300, 20000, 20000)
        trader.on_order_filled(1, 20100, 10)
        assert trader.position == -10
        assert sender.hedges == [(2, Side.BUY, 2_147_483_600, 10)]

    def test_ask_fill_of_twenty(self, sender):
        trader = AutoTrader(sender, TraderConfig(strategy="fixed", lot_size=20), FixedLot())
        quote_pair(trader, 20100, 20300, 20000, 20000)
        trader.on_order_filled(1, 20100, 20)
        assert trader.position == -20
        assert sender.hedges[0][1:] == (Side.BUY, 2_147_483_600, 20)

    def test_bid_fill_hedged_with_sell(self, trader, sender):
        quote_pair(trader, 19800, 20000, 19900, 20100)
        trader.on_order_filled(1, 20000, 4)
        trader.on_order_filled(1, 20000, 6)
        assert trader.position == 10
        assert [h[1] for h in sender.hedges] == [Side.SELL, Side.SELL]
        assert sender.hedges[0][2] == 100

    def test_fill_does_not_clear_slot(self, trader):
        quote_pair(trader, 19800, 20000, 19900, 20100)
        trader.on_order_filled(1, 20000, 10)
        assert trader.orders.bid_id == 1

    def test_unknown_fill_ignored(self, trader, sender):
        trader.on_order_filled(42, 20000, 10)
        assert trader.position == 0 and sender.hedges == []

    def test_hedge_filled_only_counted(self, trader):
        trader.on_hedge_filled(2, 100, 10)
        assert trader.hedger.hedged_lots == 10
        assert trader.position == 0


class TestSendFailures:
    @staticmethod
    def flaky_trader(**failures):
        sender = FlakySender(**failures)
        return AutoTrader(sender, TraderConfig(strategy="fixed"), FixedLot()), sender

    def test_unsent_insert_releases_slot(self):
        trader, sender = self.flaky_trader(insert=1)
        quote_pair(trader, 19800, 20000, 19900, 20100)
        assert sender.inserts == []
        assert trader.orders.bid_id == 0 and not trader.orders.bids

        book(trader, Instrument.ETF, 19800, 20000)
        assert sender.inserts == [(2, Side.BUY, 20000, 10, Lifespan.GOOD_FOR_DAY)]
        assert trader.orders.bid_id == 2

    def test_unsent_cancel_asked_again(self):
        trader, sender = self.flaky_trader(cancel=1)
        quote_pair(trader, 19800, 20000, 19900, 20100)
        book(trader, Instrument.ETF, 20000, 20000)       # ratio 1.0 → cancel bid
        assert sender.cancels == []
        assert trader.orders.bid_id == 1

        book(trader, Instrument.ETF, 20000, 20000)
        assert sender.cancels == [1]

    def test_hedge_retried_until_sent(self):
        trader, sender = self.flaky_trader(hedge=1)
        quote_pair(trader, 19800, 20000, 19900, 20100)
        trader.on_order_filled(1, 20000, 10)
        assert sender.attempts["hedge"] == 2
        assert sender.hedges == [(2, Side.SELL, 100, 10)]
        assert trader.hedger.unhedged_lots == 0

    def test_unsent_hedge_counted_as_unhedged(self):
        trader, sender = self.flaky_trader(hedge=HEDGE_SEND_ATTEMPTS)
        quote_pair(trader, 20100, 20300, 20000, 20000)
        trader.on_order_filled(1, 20100, 10)
        assert sender.hedges == []
        assert sender.attempts["hedge"] == HEDGE_SEND_ATTEMPTS
        assert trader.position == -10
        assert trader.snapshot()["unhedged_lots"] == 10


class TestErrorsAndSession:
    def test_error_frees_slot_for_next_signal(self, trader, sender):
        quote_pair(trader, 19800, 20000, 19900, 20100)
        trader.on_error(1, "order rejected")
        assert trader.orders.bid_id == 0
        book(trader, Instrument.ETF, 19800, 20000)
        assert [i[0] for i in sender.inserts] == [1, 2]

    def test_error_without_order(self, trader):
        trader.on_error(0, "bad message")
        assert trader.orders.bid_id == 0 and trader.orders.ask_id == 0

    def test_paused_blocks_inserts_not_cancels(self, trader, sender):
        quote_pair(trader, 20100, 20300, 20000, 20000)
        trader.paused = True
        book(trader, Instrument.ETF, 19800, 19800)      # cancel ask + would buy
        assert sender.cancels == [1]
        assert len(sender.inserts) == 1

    def test_disconnect(self, trader):
        trader.on_disconnect()
        assert trader.disconnected
        assert trader.snapshot()["disconnected"] == 1

    def test_snapshot(self, trader):
        quote_pair(trader, 19800, 20000, 19900, 20100)
        snap = trader.snapshot()
        assert snap["bid_id"] == 1 and snap["ask_id"] == 0
        assert snap["etf_mid"] == 19900 and snap["future_mid"] == 20000
        assert snap["strategy"] == "fixed"
        assert snap["position_limit"] == 100
