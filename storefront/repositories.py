# storefront/repositories.py
"""
Thin data access over a SQLModel Session.
Repositories never commit on their own except where noted; the services
decide where the transaction boundary is.
"""

from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import case, func
from sqlmodel import Session, select

from storefront.models import (
    Account,
    IssuedCode,
    Order,
    OrderItem,
    OrderStats,
    OrderStatus,
    ResendAttempt,
    VerificationCode,
    utcnow,
)


class AccountRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, account_id: int) -> Optional[Account]:
        return self.session.get(Account, account_id)

    def find_by_email(self, email: str) -> Optional[Account]:
        statement = select(Account).where(Account.email == email.strip().lower())
        return self.session.exec(statement).first()

    def add(self, account: Account) -> Account:
        self.session.add(account)
        self.session.flush()
        return account

    def save(self, account: Account) -> Account:
        account.updated_at = utcnow()
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        return account


class VerificationCodeRepository:
    def __init__(self, session: Session):
        self.session = session

    def add(self, account_id: int, code: str, expires_at: datetime, now: datetime) -> VerificationCode:
        record = VerificationCode(
            account_id=account_id, code=code, expires_at=expires_at, created_at=now
        )
        self.session.add(record)
        self.session.flush()
        return record

    def latest(self, account_id: int) -> Optional[VerificationCode]:
        statement = (
            select(VerificationCode)
            .where(VerificationCode.account_id == account_id)
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
        )
        return self.session.exec(statement).first()

    def list_for(self, account_id: int) -> List[VerificationCode]:
        statement = select(VerificationCode).where(VerificationCode.account_id == account_id)
        return list(self.session.exec(statement).all())

    def delete_for(self, account_id: int) -> None:
        for record in self.list_for(account_id):
            self.session.delete(record)
        self.session.flush()


class ResendAttemptRepository:
    def __init__(self, session: Session):
        self.session = session

    def record(self, account_id: int, now: datetime) -> None:
        self.session.add(ResendAttempt(account_id=account_id, created_at=now))

    def count_since(self, account_id: int, since: datetime) -> int:
        statement = (
            select(func.count())
            .select_from(ResendAttempt)
            .where(ResendAttempt.account_id == account_id, ResendAttempt.created_at > since)
        )
        return self.session.exec(statement).one()


class IssuedCodeRepository:
    def __init__(self, session: Session):
        self.session = session

    def record(self, account_id: int, code: str, now: datetime) -> None:
        self.session.add(IssuedCode(account_id=account_id, code=code, created_at=now))

    def codes_for(self, account_id: int) -> Set[str]:
        statement = select(IssuedCode.code).where(IssuedCode.account_id == account_id)
        return set(self.session.exec(statement).all())


class OrderRepository:
    def __init__(self, session: Session):
        self.session = session

    def add_order(self, order: Order) -> Order:
        self.session.add(order)
        self.session.flush()  # assigns order.id
        return order

    def add_item(self, item: OrderItem) -> OrderItem:
        self.session.add(item)
        self.session.flush()
        return item

    def get(self, order_id: int) -> Optional[Order]:
        return self.session.get(Order, order_id)

    def get_owned(self, order_id: int, account_id: int) -> Optional[Order]:
        statement = select(Order).where(Order.id == order_id, Order.account_id == account_id)
        return self.session.exec(statement).first()

    def list_for(self, account_id: int) -> List[Order]:
        statement = (
            select(Order)
            .where(Order.account_id == account_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(self.session.exec(statement).all())

    def list_all(self) -> List[Order]:
        statement = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        return list(self.session.exec(statement).all())

    def set_status(self, order: Order, status: OrderStatus, now: datetime) -> Order:
        order.status = status
        order.updated_at = now
        self.session.add(order)
        self.session.commit()
        self.session.refresh(order)
        return order

    def stats(self) -> OrderStats:
        def count_of(status: OrderStatus):
            return func.coalesce(func.sum(case((Order.status == status, 1), else_=0)), 0)

        statement = select(
            func.count(Order.id),
            *[count_of(status) for status in OrderStatus],
            func.coalesce(func.sum(Order.total), 0),
            func.coalesce(func.avg(Order.total), 0),
        )
        row = self.session.exec(statement).one()
        total_orders, *per_status, revenue, average = row
        counts = {status.value: int(n) for status, n in zip(OrderStatus, per_status)}
        return OrderStats(
            total_orders=int(total_orders),
            total_revenue=round(float(revenue), 2),
            average_order_value=round(float(average), 2),
            **counts,
        )
