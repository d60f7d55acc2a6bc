# sdk/pystore.py
from typing import Any, Dict, List, Optional

import httpx
import requests


class StoreClient:
    def __init__(self, base_url: str = "http://localhost:8085", user_id: Optional[int] = None,
                 role: Optional[str] = None, timeout: int = 10, session: Any = None):
        self.base_url = base_url.rstrip("/")
        # anything with the requests.Session call surface works (e.g. FastAPI's TestClient)
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.user_id = user_id
        self.role = role

    def _headers(self) -> Dict[str, str]:
        headers = {}
        if self.user_id is not None:
            headers["X-User-Id"] = str(self.user_id)
        if self.role:
            headers["X-User-Role"] = self.role
        return headers

    def _request(self, method: str, path: str, **kwargs):
        r = self.session.request(method, f"{self.base_url}{path}", headers=self._headers(),
                                 timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    def as_user(self, user_id: int, role: Optional[str] = None) -> "StoreClient":
        return StoreClient(self.base_url, user_id=user_id, role=role, timeout=self.timeout, session=self.session)

    # Catalog
    def list_products(self, category_id: Optional[int] = None, min_price: Optional[int] = None,
                      max_price: Optional[int] = None, ratings: Optional[List[int]] = None,
                      search_term: Optional[str] = None, sort: Optional[str] = None,
                      page: Optional[int] = None, per_page: Optional[int] = None):
        params = {
            "categoryId": category_id,
            "minPrice": min_price,
            "maxPrice": max_price,
            "ratings": "|".join(str(r) for r in ratings) if ratings else None,
            "searchTerm": search_term,
            "sort": sort,
            "page": page,
            "perPage": per_page,
        }
        params = {k: v for k, v in params.items() if v is not None}
        return self._request("GET", "/products", params=params)

    def search_products(self, term: str):
        return self.list_products(search_term=term)["products"]

    def get_product(self, product_id: int):
        return self._request("GET", f"/products/{product_id}")

    def get_product_by_slug(self, slug: str):
        return self._request("GET", f"/products/by-slug/{slug}")

    def products_by_category(self, category_slug: str):
        return self._request("GET", f"/products/by-category/{category_slug}")

    def similar_products(self, product_id: int):
        return self._request("GET", f"/products/similar/{product_id}")

    # Admin: two-phase product creation
    def create_product(self) -> int:
        return self._request("POST", "/products")["id"]

    def update_product(self, product_id: int, name: str, price: int, category_id: int,
                       description: str = "", images: Optional[List[str]] = None):
        return self._request("PUT", f"/products/{product_id}", json={
            "name": name, "price": price, "categoryId": category_id,
            "description": description, "images": images or [],
        })

    def register_product(self, name: str, price: int, category_id: int, description: str = "",
                         images: Optional[List[str]] = None):
        pid = self.create_product()
        return self.update_product(pid, name, price, category_id, description, images)

    def delete_product(self, product_id: int):
        return self._request("DELETE", f"/products/{product_id}")

    # Categories
    def list_categories(self):
        return self._request("GET", "/categories")

    def get_category_by_slug(self, slug: str):
        return self._request("GET", f"/categories/by-slug/{slug}")

    def create_category(self, name: str):
        category = self._request("POST", "/categories")
        return self._request("PUT", f"/categories/{category['id']}", json={"name": name})

    # Reviews
    def leave_review(self, product_id: int, rating: int, text: str = ""):
        return self._request("POST", f"/reviews/leave/{product_id}", json={"rating": rating, "text": text})

    def average_rating(self, product_id: int):
        return self._request("GET", f"/reviews/average-by-product/{product_id}")["rating"]

    # Orders
    def place_order(self, items: List[Dict[str, int]]):
        return self._request("POST", "/orders", json={"items": items})

    def list_orders(self):
        return self._request("GET", "/orders")

    def statistics(self):
        return self._request("GET", "/statistics/main")

    # Payment gateway callback
    def send_payment_event(self, event: str, description: Optional[str] = None,
                           metadata: Optional[Dict[str, str]] = None):
        payload = {"event": event, "object": {"description": description, "metadata": metadata or {}}}
        # do not raise_for_status() — callers inspect 400/404 to decide on redelivery
        return self.session.post(f"{self.base_url}/orders/status", json=payload, timeout=self.timeout)

    async def send_payment_event_async(self, event: str, description: Optional[str] = None,
                                       metadata: Optional[Dict[str, str]] = None):
        payload = {"event": event, "object": {"description": description, "metadata": metadata or {}}}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(f"{self.base_url}/orders/status", json=payload)
