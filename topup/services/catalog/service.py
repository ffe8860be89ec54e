"""Product and category management."""

from datetime import datetime, timezone

from sqlalchemy import delete, or_, select

from topup.common.db import session_scope
from topup.common.errors import AlreadyExists, NotFound, ValidationError
from topup.common.logging import logger
from topup.services.catalog.models import Category, Product
from topup.services.catalog.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate

DEFAULT_CATEGORIES = [
    {"id": "c1", "name": "Diamond TopUp", "badge": "Free Fire", "description": "Fast delivery"},
    {"id": "c2", "name": "Weekly & Monthly", "badge": "Pass", "description": "Membership packs"},
    {"id": "c3", "name": "Special Deals", "badge": "Limited", "description": "Best offers"},
]

DEFAULT_PRODUCTS = [
    {"id": "p1", "category_id": "c1", "name": "50 Diamond", "diamonds": 50, "price": 45, "tag": "Hot"},
    {"id": "p2", "category_id": "c1", "name": "240 Diamond", "diamonds": 240, "price": 185, "bonus": "+10 bonus"},
    {"id": "p3", "category_id": "c1", "name": "560 Diamond", "diamonds": 560, "price": 430, "tag": "Best value"},
    {"id": "p4", "category_id": "c1", "name": "1120 Diamond", "diamonds": 1120, "price": 780, "bonus": "+60 bonus"},
    {"id": "p5", "category_id": "c2", "name": "Weekly Membership", "diamonds": 0, "price": 160, "tag": "Weekly"},
    {"id": "p6", "category_id": "c2", "name": "Monthly Membership", "diamonds": 0, "price": 750, "tag": "Monthly"},
    {"id": "p7", "category_id": "c3", "name": "Level Up Pass", "diamonds": 0, "price": 349, "bonus": "Exclusive"},
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CatalogService:
    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def list_products(self) -> list[Product]:
        with session_scope(self.session_factory) as db:
            return list(
                db.execute(select(Product).where(Product.is_active.is_(True)).order_by(Product.price)).scalars()
            )

    def get_product(self, product_id: str) -> Product:
        with session_scope(self.session_factory) as db:
            product = db.execute(
                select(Product).where(Product.id == product_id, Product.is_active.is_(True))
            ).scalar_one_or_none()
            if product is None:
                raise NotFound("Product not found")
            return product

    def products_by_category(self, category_id: str) -> list[Product]:
        with session_scope(self.session_factory) as db:
            return list(
                db.execute(
                    select(Product)
                    .where(Product.category_id == category_id, Product.is_active.is_(True))
                    .order_by(Product.price)
                ).scalars()
            )

    def list_categories(self) -> list[Category]:
        with session_scope(self.session_factory) as db:
            return list(
                db.execute(select(Category).where(Category.is_active.is_(True)).order_by(Category.name)).scalars()
            )

    def seed(self) -> tuple[int, int]:
        """Replace the whole catalog with the default storefront packs."""

        now = _now()
        names = {c["id"]: c["name"] for c in DEFAULT_CATEGORIES}
        with session_scope(self.session_factory) as db:
            db.execute(delete(Product))
            db.execute(delete(Category))
            db.add_all(
                Category(is_active=True, created_at=now, updated_at=now, **row) for row in DEFAULT_CATEGORIES
            )
            db.flush()
            db.add_all(
                Product(
                    category_name=names[row["category_id"]],
                    bonus=row.get("bonus", ""),
                    tag=row.get("tag", ""),
                    is_active=True,
                    created_at=now,
                    updated_at=now,
                    **{k: v for k, v in row.items() if k not in ("bonus", "tag")},
                )
                for row in DEFAULT_PRODUCTS
            )
            db.commit()
        logger.info("catalog_seeded categories=%s products=%s", len(DEFAULT_CATEGORIES), len(DEFAULT_PRODUCTS))
        return len(DEFAULT_CATEGORIES), len(DEFAULT_PRODUCTS)

    def create_category(self, req: CategoryCreate) -> Category:
        with session_scope(self.session_factory) as db:
            existing = db.execute(
                select(Category.id).where(or_(Category.id == req.id, Category.name == req.name))
            ).first()
            if existing is not None:
                raise AlreadyExists("Category already exists")
            now = _now()
            category = Category(
                id=req.id,
                name=req.name,
                description=req.description,
                badge=req.badge,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            db.add(category)
            db.commit()
            return category

    def create_product(self, req: ProductCreate) -> Product:
        with session_scope(self.session_factory) as db:
            if db.get(Product, req.id) is not None:
                raise AlreadyExists("Product ID already exists")
            category = db.get(Category, req.category_id)
            if category is None:
                raise ValidationError("Category not found")
            now = _now()
            product = Product(
                id=req.id,
                category_id=req.category_id,
                category_name=category.name,
                name=req.name,
                diamonds=req.diamonds,
                price=req.price,
                bonus=req.bonus,
                tag=req.tag,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            db.add(product)
            db.commit()
            return product

    def update_category(self, category_id: str, req: CategoryUpdate) -> Category:
        with session_scope(self.session_factory) as db:
            category = db.get(Category, category_id)
            if category is None:
                raise NotFound("Category not found")
            for field, value in req.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(category, field, value)
            category.updated_at = _now()
            db.commit()
            return category

    def update_product(self, product_id: str, req: ProductUpdate) -> Product:
        changes = req.model_dump(exclude_unset=True, exclude_none=True)
        with session_scope(self.session_factory) as db:
            if changes.get("category_id"):
                category = db.get(Category, changes["category_id"])
                if category is None:
                    raise ValidationError("Category not found")
                changes["category_name"] = category.name
            product = db.get(Product, product_id)
            if product is None:
                raise NotFound("Product not found")
            for field, value in changes.items():
                setattr(product, field, value)
            product.updated_at = _now()
            db.commit()
            return product

    def delete_category(self, category_id: str) -> None:
        self.update_category(category_id, CategoryUpdate(is_active=False))

    def delete_product(self, product_id: str) -> None:
        self.update_product(product_id, ProductUpdate(is_active=False))
