"""HTTP routes for products and categories."""

from fastapi import APIRouter, Depends

from topup.common.schemas import envelope
from topup.services.api_gateway.dependencies import get_catalog_service
from topup.services.catalog.schemas import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from topup.services.catalog.service import CatalogService

router = APIRouter(prefix="/api/products", tags=["products"])


def _products(rows) -> list[ProductRead]:
    return [ProductRead.model_validate(row) for row in rows]


@router.get("")
def list_products(catalog: CatalogService = Depends(get_catalog_service)):
    products = catalog.list_products()
    return envelope(True, "Products retrieved", _products(products), count=len(products))


@router.get("/categories/all")
def list_categories(catalog: CatalogService = Depends(get_catalog_service)):
    categories = catalog.list_categories()
    return envelope(
        True,
        "Categories retrieved",
        [CategoryRead.model_validate(row) for row in categories],
        count=len(categories),
    )


@router.get("/category/{category_id}")
def products_by_category(category_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    products = catalog.products_by_category(category_id)
    return envelope(True, "Products retrieved", _products(products), count=len(products))


@router.get("/{product_id}")
def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    return envelope(True, "Product retrieved", ProductRead.model_validate(catalog.get_product(product_id)))


@router.post("/seed", status_code=201)
def seed_catalog(catalog: CatalogService = Depends(get_catalog_service)):
    """Wipe the catalog and load the default packs."""

    categories, products = catalog.seed()
    return envelope(True, "Database seeded successfully", {"categories": categories, "products": products})


@router.post("/categories", status_code=201)
def create_category(req: CategoryCreate, catalog: CatalogService = Depends(get_catalog_service)):
    category = catalog.create_category(req)
    return envelope(True, "Category created successfully", CategoryRead.model_validate(category))


@router.post("", status_code=201)
def create_product(req: ProductCreate, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.create_product(req)
    return envelope(True, "Product created successfully", ProductRead.model_validate(product))


@router.put("/categories/{category_id}")
def update_category(category_id: str, req: CategoryUpdate, catalog: CatalogService = Depends(get_catalog_service)):
    category = catalog.update_category(category_id, req)
    return envelope(True, "Category updated successfully", CategoryRead.model_validate(category))


@router.put("/{product_id}")
def update_product(product_id: str, req: ProductUpdate, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.update_product(product_id, req)
    return envelope(True, "Product updated successfully", ProductRead.model_validate(product))


@router.delete("/categories/{category_id}")
def delete_category(category_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    catalog.delete_category(category_id)
    return envelope(True, "Category deleted successfully")


@router.delete("/{product_id}")
def delete_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    catalog.delete_product(product_id)
    return envelope(True, "Product deleted successfully")
