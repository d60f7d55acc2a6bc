# app/main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .auth import Principal, require_admin, require_principal
from .catalog import CatalogService
from .categories import CategoryService
from .config import get_settings
from .core import (
    AverageRating, CategoryIn, CategoryOut, DraftCreated, OrderIn, OrderOut, PaymentEvent,
    PaymentEventResult, PlacedOrder, ProductIn, ProductOut, ProductPage, ReviewIn, ReviewOut,
    StatisticItem,
)
from .database import get_db, init_db
from .errors import StoreError
from .filters import ProductCriteria
from .orders import OrderService, payment_request_for
from .reviews import ReviewService
from .statistics import StatisticsService

settings = get_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("storefront.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="storefront", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Error mapping
# ---------------------------
@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "conflicting record"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------
# Service wiring
# ---------------------------
def get_categories(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_catalog(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db, CategoryService(db), default_per_page=settings.default_per_page)


def get_reviews(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db, CatalogService(db, CategoryService(db), settings.default_per_page))


def get_orders(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_statistics(db: Session = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db)


@app.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/products", response_model=ProductPage)
def list_products(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    ratings: Optional[str] = None,
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    sort: Optional[str] = None,
    page: Optional[str] = None,
    per_page: Optional[str] = Query(None, alias="perPage"),
    catalog: CatalogService = Depends(get_catalog),
):
    criteria = ProductCriteria.from_query(category_id, min_price, max_price, ratings, search_term)
    products, count = catalog.list_products(criteria, sort, page, per_page)
    return {"products": products, "count": count}


@app.get("/products/similar/{product_id}", response_model=List[ProductOut])
def similar_products(product_id: int, catalog: CatalogService = Depends(get_catalog)):
    return catalog.list_similar(product_id)


@app.get("/products/by-slug/{slug}", response_model=ProductOut)
def product_by_slug(slug: str, catalog: CatalogService = Depends(get_catalog)):
    return catalog.get_by_slug(slug)


@app.get("/products/by-category/{category_slug}", response_model=List[ProductOut])
def products_by_category(category_slug: str, catalog: CatalogService = Depends(get_catalog)):
    return catalog.list_by_category_slug(category_slug)


@app.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, catalog: CatalogService = Depends(get_catalog),
                _: Principal = Depends(require_admin)):
    return catalog.get_by_id(product_id)


@app.post("/products", response_model=DraftCreated)
def create_product(catalog: CatalogService = Depends(get_catalog), _: Principal = Depends(require_admin)):
    return {"id": catalog.create_draft()}


@app.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn, catalog: CatalogService = Depends(get_catalog),
                   _: Principal = Depends(require_admin)):
    return catalog.update(
        product_id,
        name=payload.name,
        description=payload.description,
        price=payload.price,
        images=payload.images,
        category_id=payload.category_id,
    )


@app.delete("/products/{product_id}")
def delete_product(product_id: int, catalog: CatalogService = Depends(get_catalog),
                   _: Principal = Depends(require_admin)):
    catalog.delete(product_id)
    return {"id": product_id, "deleted": True}


# ---------------------------
# Category endpoints
# ---------------------------
@app.get("/categories", response_model=List[CategoryOut])
def list_categories(categories: CategoryService = Depends(get_categories),
                    _: Principal = Depends(require_principal)):
    return categories.list()


@app.get("/categories/by-slug/{slug}", response_model=CategoryOut)
def category_by_slug(slug: str, categories: CategoryService = Depends(get_categories)):
    return categories.get_by_slug(slug)


@app.get("/categories/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, categories: CategoryService = Depends(get_categories),
                 _: Principal = Depends(require_principal)):
    return categories.get_by_id(category_id)


@app.post("/categories", response_model=CategoryOut)
def create_category(categories: CategoryService = Depends(get_categories),
                    _: Principal = Depends(require_principal)):
    return categories.create()


@app.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryIn, categories: CategoryService = Depends(get_categories),
                    _: Principal = Depends(require_principal)):
    return categories.update(category_id, payload.name)


@app.delete("/categories/{category_id}")
def delete_category(category_id: int, categories: CategoryService = Depends(get_categories),
                    _: Principal = Depends(require_principal)):
    categories.delete(category_id)
    return {"id": category_id, "deleted": True}


# ---------------------------
# Review endpoints
# ---------------------------
@app.get("/reviews", response_model=List[ReviewOut])
def list_reviews(reviews: ReviewService = Depends(get_reviews)):
    return reviews.list()


@app.post("/reviews/leave/{product_id}", response_model=ReviewOut)
def leave_review(product_id: int, payload: ReviewIn, reviews: ReviewService = Depends(get_reviews),
                 principal: Principal = Depends(require_principal)):
    return reviews.create(principal.user_id, product_id, payload.rating, payload.text)


@app.get("/reviews/average-by-product/{product_id}", response_model=AverageRating)
def average_rating(product_id: int, reviews: ReviewService = Depends(get_reviews)):
    return {"rating": reviews.average_by_product(product_id)}


# ---------------------------
# Orders
# ---------------------------
@app.get("/orders", response_model=List[OrderOut])
def my_orders(orders: OrderService = Depends(get_orders), principal: Principal = Depends(require_principal)):
    return orders.list_for_user(principal.user_id)


@app.get("/orders/all", response_model=List[OrderOut])
def all_orders(orders: OrderService = Depends(get_orders), _: Principal = Depends(require_admin)):
    return orders.list_all()


@app.post("/orders", response_model=PlacedOrder)
def place_order(payload: OrderIn, orders: OrderService = Depends(get_orders),
                principal: Principal = Depends(require_principal)):
    order = orders.place_order(principal.user_id, payload.items)
    return {"order": order, "payment": payment_request_for(order)}


@app.post("/orders/status", response_model=PaymentEventResult)
def payment_status(event: PaymentEvent, orders: OrderService = Depends(get_orders)):
    return orders.apply_payment_event(event)


# ---------------------------
# Statistics
# ---------------------------
@app.get("/statistics/main", response_model=List[StatisticItem])
def main_statistics(statistics: StatisticsService = Depends(get_statistics),
                    principal: Principal = Depends(require_principal)):
    return statistics.main(principal.user_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8085)
