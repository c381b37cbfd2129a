"""
Catalog store: the product listing, its pagination, the active listing mode
(plain, search or filter) and the product selected for the detail view,
plus the admin create/update/delete actions.
"""

import logging
import math
import os
from typing import Any, Dict, List, Optional, Tuple, Union

from storefront import config
from storefront.errors import ApiError
from storefront.schemas import Pagination, Product, ProductFilter, ProductForm
from storefront.stores.base import Store

logger = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized: Admin access required"

# (filename, content, content type)
ImagePart = Tuple[str, bytes, str]

_IMAGE_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def image_part(image: Union[str, ImagePart]) -> ImagePart:
    """Accept a file path or an already built (name, bytes, type) tuple."""
    if isinstance(image, tuple):
        return image
    with open(image, "rb") as f:
        content = f.read()
    name = os.path.basename(image)
    content_type = _IMAGE_TYPES.get(os.path.splitext(name)[1].lower(), "application/octet-stream")
    return name, content, content_type


class CatalogStore(Store):
    name = "catalog"

    MODE_ALL = "all"
    MODE_SEARCH = "search"
    MODE_FILTER = "filter"

    def __init__(self, api):
        super().__init__(api)
        self.products: List[Product] = []
        self.pagination = Pagination(page_size=config.DEFAULT_PAGE_SIZE)
        self.current_filters: Dict[str, Any] = {}
        self.current_search_query = ""
        self.selected_product: Optional[Product] = None
        self.admin_action_loading = False
        self.admin_action_success = False
        self.admin_action_error: Optional[str] = None

    @property
    def mode(self) -> str:
        if self.current_search_query:
            return self.MODE_SEARCH
        if self.current_filters:
            return self.MODE_FILTER
        return self.MODE_ALL

    # --- listing ---

    def _apply_page(self, payload: Dict[str, Any], query: str, filters: Dict[str, Any]) -> List[Product]:
        items = payload.get("products")
        if items is None:
            items = payload.get("items", [])
        self.products = [Product.model_validate(p) for p in items]
        self.pagination = Pagination.model_validate({
            "currentPage": payload.get("currentPage", 1),
            "totalPages": payload.get("totalPages", 1),
            "totalItems": payload.get("totalItems", len(self.products)),
            "pageSize": payload.get("pageSize", self.pagination.page_size),
        })
        self.current_search_query = query
        self.current_filters = filters
        return self.products

    def fetch_all(self, page: int = 1, page_size: Optional[int] = None) -> Optional[List[Product]]:
        page_size = page_size or self.pagination.page_size
        return self._run(
            "list",
            lambda: self.api.get("/products", {"page": page, "pageSize": page_size},
                                 fallback="Failed to fetch products"),
            lambda payload: self._apply_page(payload, "", {}),
        )

    def search(self, query: str, page: int = 1, page_size: Optional[int] = None) -> Optional[List[Product]]:
        page_size = page_size or self.pagination.page_size
        return self._run(
            "list",
            lambda: self.api.get("/products/search", {"query": query, "page": page, "pageSize": page_size},
                                 fallback="Failed to search products"),
            lambda payload: self._apply_page(payload, query, {}),
        )

    def filter(self, criteria: Any, page: int = 1, page_size: Optional[int] = None) -> Optional[List[Product]]:
        criteria = self._validate(ProductFilter, criteria or {})
        if criteria is None:
            return None
        filters = criteria.to_params()
        page_size = page_size or self.pagination.page_size
        return self._run(
            "list",
            lambda: self.api.get("/products/filter", {**filters, "page": page, "pageSize": page_size},
                                 fallback="Failed to filter products"),
            lambda payload: self._apply_page(payload, "", filters),
        )

    def change_page(self, page: int) -> Optional[List[Product]]:
        """Re-issue whichever listing is active, on another page."""
        if self.mode == self.MODE_SEARCH:
            return self.search(self.current_search_query, page)
        if self.mode == self.MODE_FILTER:
            return self.filter(self.current_filters, page)
        return self.fetch_all(page)

    def set_page_size(self, page_size: int) -> Optional[List[Product]]:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.pagination.page_size = page_size
        return self.change_page(1)

    def fetch_by_id(self, product_id: int) -> Optional[Product]:
        def pending():
            self.selected_product = None

        def apply(payload):
            self.selected_product = Product.model_validate(payload)
            return self.selected_product

        return self._run(
            "detail",
            lambda: self.api.get(f"/products/{product_id}", fallback="Failed to fetch product details"),
            apply,
            on_pending=pending,
        )

    # --- admin ---

    def _admin(self, slot: str, call, apply):
        def guarded():
            try:
                return call()
            except ApiError as e:
                if e.is_auth_error:
                    raise ApiError(UNAUTHORIZED, e.status_code, e.payload) from e
                raise

        def done(payload):
            self.admin_action_success = True
            return apply(payload)

        self.admin_action_success = False
        return self._run(slot, guarded, done,
                         loading_attr="admin_action_loading", error_attr="admin_action_error")

    def _recount(self, delta: int):
        self.pagination.total_items = max(0, self.pagination.total_items + delta)
        self.pagination.total_pages = math.ceil(self.pagination.total_items / max(1, self.pagination.page_size))

    def _multipart(self, form: ProductForm, image) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"data": form.to_form_fields()}
        if image is not None:
            kwargs["files"] = {"image": image_part(image)}
        return kwargs

    def create(self, form: Any, image=None) -> Optional[Product]:
        form = self._validate(ProductForm, form, error_attr="admin_action_error")
        if form is None:
            return None

        def apply(payload):
            product = Product.model_validate(payload)
            if self.pagination.current_page == 1:
                self.products = [product] + self.products[:self.pagination.page_size - 1]
            self._recount(+1)
            return product

        return self._admin(
            "create",
            lambda: self.api.request("POST", "/products", fallback="Failed to create product",
                                     **self._multipart(form, image)),
            apply,
        )

    def update(self, product_id: int, form: Any, image=None) -> Optional[Product]:
        form = self._validate(ProductForm, form, error_attr="admin_action_error")
        if form is None:
            return None

        def apply(payload):
            product = Product.model_validate(payload)
            self.products = [product if p.id == product.id else p for p in self.products]
            if self.selected_product is not None and self.selected_product.id == product.id:
                self.selected_product = product
            return product

        return self._admin(
            f"update:{product_id}",
            lambda: self.api.request("PUT", f"/products/{product_id}", fallback="Failed to update product",
                                     **self._multipart(form, image)),
            apply,
        )

    def delete(self, product_id: int, refetch: bool = True) -> bool:
        """
        Remove a product, then reload the page it was on. When it was the only
        product left on a page past the first, the previous page is loaded.
        """
        was_last_on_page = len(self.products) == 1 and self.products[0].id == product_id
        page = self.pagination.current_page

        def apply(_payload):
            self.products = [p for p in self.products if p.id != product_id]
            self._recount(-1)
            if self.selected_product is not None and self.selected_product.id == product_id:
                self.selected_product = None
            return True

        deleted = self._admin(
            f"delete:{product_id}",
            lambda: self.api.delete(f"/products/{product_id}", fallback="Failed to delete product"),
            apply,
        )
        if not deleted:
            return False
        if refetch:
            if was_last_on_page and page > 1:
                page -= 1
            self.change_page(page)
        return True

    def clear_admin_action_status(self) -> None:
        self.admin_action_success = False
        self.admin_action_error = None
