"""Column types: timestamps come back as aware UTC, money as exact Decimal."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlmodel import Session, select

from storefront.models import Account, Order, utcnow
from storefront.utils.db import build_engine, create_tables


def make_account(**kwargs):
    return Account(
        email="a@x.com",
        password_hash="x",
        full_name="Alice",
        phone_number="+15551234567",
        **kwargs,
    )


def reload(engine, model, row_id):
    with Session(engine) as session:
        return session.get(model, row_id)


def test_timestamps_round_trip_as_aware_utc():
    engine = build_engine("sqlite://")
    create_tables(engine)
    stamp = utcnow()
    with Session(engine) as session:
        account = make_account(created_at=stamp, updated_at=stamp)
        session.add(account)
        session.commit()
        account_id = account.id

    stored = reload(engine, Account, account_id)
    assert stored.created_at.tzinfo is not None
    assert stored.created_at == stamp


def test_other_offsets_are_stored_as_utc():
    engine = build_engine("sqlite://")
    create_tables(engine)
    local = datetime(2024, 5, 1, 17, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    with Session(engine) as session:
        account = make_account(created_at=local, updated_at=local)
        session.add(account)
        session.commit()
        account_id = account.id

    stored = reload(engine, Account, account_id)
    assert stored.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert stored.created_at.utcoffset() == timedelta(0)


def test_money_columns_are_decimal():
    engine = build_engine("sqlite://")
    create_tables(engine)
    with Session(engine) as session:
        account = make_account()
        session.add(account)
        session.flush()
        session.add(
            Order(
                account_id=account.id,
                order_number="ORD-1-AAAAAAAAA",
                subtotal=Decimal("0.30"),
                shipping_cost=Decimal("0.01"),
                tax=Decimal("0.01"),
                total=Decimal("0.32"),
                shipping_full_name="Alice",
                shipping_email="a@x.com",
                shipping_phone="+15551234567",
                shipping_address="1 Main St",
                shipping_city="Pune",
                shipping_state="MH",
                shipping_zip_code="411001",
                shipping_country="India",
                payment_method="card",
            )
        )
        session.commit()

    with Session(engine) as session:
        order = session.exec(select(Order)).one()
        assert isinstance(order.total, Decimal)
        assert order.total == order.subtotal + order.shipping_cost + order.tax
