from app.services.change_feed import ChangeType, ProductChange
from app.services.notifications import StockAlertNotifier

from conftest import make_product


class RecordingMailer:
    def __init__(self):
        self.sent = []

    async def __call__(self, recipient, product):
        self.sent.append((recipient, product.name))


async def test_low_stock_update_sends_alert():
    mailer = RecordingMailer()
    notifier = StockAlertNotifier("manager@shop.test", mailer)

    await notifier.on_product_change(ProductChange(event_type=ChangeType.UPDATE, new=make_product(stock=1, min_stock=5)))

    assert mailer.sent == [("manager@shop.test", "Milk Chocolate Bar")]


async def test_healthy_stock_and_deletes_send_nothing():
    mailer = RecordingMailer()
    notifier = StockAlertNotifier("manager@shop.test", mailer)

    await notifier.on_product_change(ProductChange(event_type=ChangeType.INSERT, new=make_product(stock=50)))
    await notifier.on_product_change(ProductChange(event_type=ChangeType.DELETE, old={"id": "x"}))

    assert mailer.sent == []


async def test_without_mailer_only_logs(caplog):
    notifier = StockAlertNotifier()
    with caplog.at_level("INFO"):
        await notifier.on_product_change(ProductChange(event_type=ChangeType.UPDATE, new=make_product(stock=0)))
    assert "Product updated: Milk Chocolate Bar" in caplog.text
