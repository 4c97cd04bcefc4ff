"""Catalog repository - Database operations for products"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Product


class ProductRepository:
    """Repository for product database operations"""

    @staticmethod
    def list_products(db: Session, active_only: bool = True, category: Optional[str] = None) -> list[Product]:
        query = db.query(Product)
        if active_only:
            query = query.filter(Product.is_active.is_(True))
        if category:
            query = query.filter(Product.category == category)
        return query.order_by(Product.name.asc()).all()

    @staticmethod
    def get_product(db: Session, product_id: str) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    @staticmethod
    def get_products_by_ids(db: Session, product_ids: list[str]) -> dict[str, Product]:
        """Fetch several products at once, keyed by id"""
        if not product_ids:
            return {}
        rows = db.query(Product).filter(Product.id.in_(product_ids)).all()
        return {p.id: p for p in rows}

    @staticmethod
    def create_product(db: Session, **product_data) -> Product:
        product = Product(**product_data)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def update_product(db: Session, product: Product, **updates) -> Product:
        for key, value in updates.items():
            if value is not None and hasattr(product, key):
                setattr(product, key, value)

        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, product: Product) -> None:
        db.delete(product)
        db.commit()
