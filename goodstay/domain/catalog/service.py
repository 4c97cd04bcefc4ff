"""Catalog service - product lookups for the shop and admin CRUD"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import NotFoundError
from ...models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository()

    def list_active_products(self, category: Optional[str] = None) -> list[Product]:
        return self.repo.list_products(self.db, active_only=True, category=category)

    def list_all_products(self) -> list[Product]:
        return self.repo.list_products(self.db, active_only=False)

    def get_active_product(self, product_id: str) -> Product:
        product = self.repo.get_product(self.db, product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found")
        return product

    def get_product(self, product_id: str) -> Product:
        product = self.repo.get_product(self.db, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def find_unorderable(self, product_ids: list[str]) -> list[str]:
        """Ids from `product_ids` that are missing from the catalog or deactivated"""
        products = self.repo.get_products_by_ids(self.db, list(set(product_ids)))
        unavailable = []
        for product_id in product_ids:
            product = products.get(product_id)
            if (product is None or not product.is_active) and product_id not in unavailable:
                unavailable.append(product_id)
        return unavailable

    def create_product(self, data: ProductCreate) -> Product:
        product = self.repo.create_product(self.db, **data.model_dump())
        logger.info(f"✅ Created product {product.id} ({product.name})")
        return product

    def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        product = self.get_product(product_id)
        return self.repo.update_product(self.db, product, **data.model_dump(exclude_unset=True))

    def delete_product(self, product_id: str) -> dict:
        # Order items keep their product_id and captured name, so history survives this
        product = self.get_product(product_id)
        self.repo.delete_product(self.db, product)
        logger.info(f"🗑️ Deleted product {product_id}")
        return {"message": "Product deleted"}
