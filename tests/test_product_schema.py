from datetime import date, timedelta

from conftest import make_product


def in_days(n):
    return date.today() + timedelta(days=n)


def test_no_expiry_date_is_not_expiring():
    assert make_product(expiry_date=None).is_expiring_soon is False


def test_expiry_within_lead_days():
    assert make_product(expiry_date=date.today(), expiry_notification_days=30).is_expiring_soon is True
    assert make_product(expiry_date=in_days(30), expiry_notification_days=30).is_expiring_soon is True


def test_expiry_beyond_lead_days():
    assert make_product(expiry_date=in_days(31), expiry_notification_days=30).is_expiring_soon is False


def test_already_expired_is_not_expiring_soon():
    assert make_product(expiry_date=in_days(-1)).is_expiring_soon is False


def test_low_stock_at_minimum():
    assert make_product(stock=5, min_stock=5).is_low_stock is True
    assert make_product(stock=6, min_stock=5).is_low_stock is False


def test_flags_are_serialised():
    data = make_product(expiry_date=in_days(3)).model_dump()
    assert data["is_expiring_soon"] is True
    assert data["is_low_stock"] is False
