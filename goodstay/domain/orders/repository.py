"""Order repository - Database operations for orders"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Order, Product


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def get_by_payment_intent(db: Session, payment_intent_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.stripe_payment_intent_id == payment_intent_id).first()

    @staticmethod
    def get_order(db: Session, order_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.id == order_id).first()

    @staticmethod
    def list_orders(db: Session, status: Optional[str] = None) -> list[Order]:
        query = db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc()).all()

    @staticmethod
    def add_order(db: Session, order: Order) -> Order:
        """Insert an order together with its items in one commit"""
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def update_order(db: Session, order: Order, **updates) -> Order:
        for key, value in updates.items():
            if hasattr(order, key):
                setattr(order, key, value)

        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def delete_order(db: Session, order: Order) -> None:
        db.delete(order)
        db.commit()

    @staticmethod
    def get_product_names(db: Session, product_ids: list[str]) -> dict[str, str]:
        """Current catalog names for the given ids; deleted products are simply absent"""
        ids = [pid for pid in set(product_ids) if pid]
        if not ids:
            return {}
        rows = db.query(Product.id, Product.name).filter(Product.id.in_(ids)).all()
        return {row.id: row.name for row in rows}
