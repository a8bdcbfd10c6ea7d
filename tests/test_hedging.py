from autotrader.enums import Side
from autotrader.hedging import HedgeManager
from shared.constants import MAXIMUM_ASK


class TestHedgeManager:
    def test_ask_fill_goes_short_and_buys_hedge(self):
        hm = HedgeManager(tick_size=100)
        hedge = hm.on_fill(Side.SELL, 20, order_id=7)
        assert hm.position == -20
        assert hedge.order_id == 7
        assert hedge.side is Side.BUY
        assert hedge.price == 2_147_483_600
        assert hedge.price % 100 == 0 and hedge.price <= MAXIMUM_ASK
        assert hedge.volume == 20

    def test_bid_fill_goes_long_and_sells_hedge(self):
        hm = HedgeManager(tick_size=100)
        hedge = hm.on_fill(Side.BUY, 15, order_id=3)
        assert hm.position == 15
        assert hedge.side is Side.SELL
        assert hedge.price == 100

    def test_hedge_fills_are_counted(self):
        hm = HedgeManager(tick_size=100)
        hm.on_hedge_filled(10)
        hm.on_hedge_filled(5)
        assert hm.hedged_lots == 15
        assert hm.position == 0

    def test_failed_hedges_are_counted(self):
        hm = HedgeManager(tick_size=100)
        hm.on_fill(Side.SELL, 20, order_id=2)
        hm.on_hedge_failed(20)
        assert hm.unhedged_lots == 20
        assert hm.position == -20
