"""
In-memory stand-in for the storefront REST backend, used by the tests.

Speaks the same camelCase JSON the real backend does, guards admin routes with
bearer tokens, and records every request so tests can see what a store sent.
"""

import math
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

ALICE_TOKEN = "abc"
ADMIN_TOKEN = "admin-token"


# --- Request bodies ---

class LoginBody(BaseModel):
    username: str
    password: str


class CategoryIn(BaseModel):
    name: str
    description: Optional[str] = None


class OrderLineIn(BaseModel):
    productId: int
    quantity: int
    price: float


class OrderIn(BaseModel):
    orderItems: List[OrderLineIn]
    shippingAddress: str
    paymentMethod: str
    notes: Optional[str] = None
    totalPrice: float


class StatusIn(BaseModel):
    status: str


class UserStatusIn(BaseModel):
    isActive: bool


ORDER_STATUSES = ("Pending", "Processing", "Shipped", "Delivered", "Cancelled")


def _seed() -> Dict[str, Any]:
    categories = {
        1: {"id": 1, "name": "Filtres", "description": "Oil, air and fuel filters", "productCount": 0},
        2: {"id": 2, "name": "Freinage", "description": "Pads, discs and calipers", "productCount": 0},
    }
    products = {}
    for i in range(1, 14):
        category_id = 1 if i % 2 else 2
        products[i] = {
            "id": i,
            "name": f"{'Filtre' if category_id == 1 else 'Plaquette'} {i}",
            "description": f"Part number {i}",
            "price": float(10 * i),
            "categoryId": category_id,
            "categoryName": categories[category_id]["name"],
            "stockQuantity": i % 5,
            "sku": f"SKU-{i:03d}",
            "imageUrl": None,
            "isActive": True,
            "isFeatured": i == 1,
        }
    users = {
        1: {"id": 1, "username": "alice", "password": "secret", "firstName": "Alice", "lastName": "Martin",
            "email": "alice@example.com", "phone": "0600000001", "isAdmin": False, "isActive": True,
            "createdAt": "2024-01-01T00:00:00"},
        2: {"id": 2, "username": "admin", "password": "admin123", "firstName": "Sami", "lastName": "Admin",
            "email": "admin@example.com", "phone": "0600000002", "isAdmin": True, "isActive": True,
            "createdAt": "2024-01-01T00:00:00"},
    }
    return {
        "categories": categories,
        "products": products,
        "users": users,
        "orders": {},
        "tokens": {ALICE_TOKEN: 1, ADMIN_TOKEN: 2},
        "settings": {
            "siteName": "Auto Pieces",
            "siteDescription": "Spare parts for every car",
            "primaryColor": "#1a2642",
            "companyVAT": "MA123",
            "enableShipping": True,
            "shippingFlatRate": 30,
            "freeShippingThreshold": 500,
            "emailPort": 587,
        },
        "requests": [],
        "payloads": {},
    }


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password"}


def _page(items: List[Dict[str, Any]], page: int, page_size: int) -> Dict[str, Any]:
    total = len(items)
    start = (page - 1) * page_size
    return {
        "products": items[start:start + page_size],
        "currentPage": page,
        "totalPages": max(1, math.ceil(total / page_size)),
        "totalItems": total,
        "pageSize": page_size,
    }


def create_app() -> FastAPI:
    app = FastAPI(title="Storefront test backend")
    db = _seed()
    app.state.db = db

    @app.middleware("http")
    async def record(request: Request, call_next):
        db["requests"].append((request.method, request.url.path, dict(request.query_params)))
        return await call_next(request)

    def current_user(authorization: Optional[str] = Header(None)):
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Not authenticated")
        user_id = db["tokens"].get(authorization[len("Bearer "):])
        if user_id is None:
            raise HTTPException(status_code=401, detail="Invalid token")
        return db["users"][user_id]

    def require_admin(user=Depends(current_user)):
        if not user["isAdmin"]:
            raise HTTPException(status_code=403, detail="Admin access required")
        return user

    # --- Auth ---

    @app.post("/auth/login")
    def login(body: LoginBody):
        for user in db["users"].values():
            if user["username"] == body.username and user["password"] == body.password:
                token = next(t for t, uid in db["tokens"].items() if uid == user["id"])
                return {"user": _public_user(user), "token": token}
        raise HTTPException(status_code=400, detail="Invalid username or password")

    @app.post("/auth/register")
    def register(payload: Dict[str, Any] = Body(...)):
        if any(u["username"] == payload.get("username") for u in db["users"].values()):
            return JSONResponse(status_code=400, content={
                "message": "Username already taken",
                "errors": {"Username": ["Username already taken"]},
            })
        new_id = max(db["users"]) + 1
        db["users"][new_id] = {
            "id": new_id,
            "username": payload["username"],
            "password": payload["password"],
            "firstName": payload.get("firstName"),
            "lastName": payload.get("lastName"),
            "email": payload.get("email"),
            "phone": payload.get("phoneNumber"),
            "isAdmin": False,
            "isActive": True,
            "createdAt": "2024-02-01T00:00:00",
        }
        return {"message": "Registration successful"}

    # --- Products ---

    @app.get("/products")
    def list_products(page: int = 1, pageSize: int = 5):
        return _page(list(db["products"].values()), page, pageSize)

    @app.get("/products/search")
    def search_products(query: str = "", page: int = 1, pageSize: int = 5):
        q = query.lower()
        items = [p for p in db["products"].values() if q in p["name"].lower() or q in p["sku"].lower()]
        return _page(items, page, pageSize)

    @app.get("/products/filter")
    def filter_products(minPrice: Optional[float] = None, maxPrice: Optional[float] = None,
                        categoryId: Optional[int] = None, inStock: bool = False,
                        page: int = 1, pageSize: int = 5):
        items = list(db["products"].values())
        if minPrice is not None:
            items = [p for p in items if p["price"] >= minPrice]
        if maxPrice is not None:
            items = [p for p in items if p["price"] <= maxPrice]
        if categoryId is not None:
            items = [p for p in items if p["categoryId"] == categoryId]
        if inStock:
            items = [p for p in items if p["stockQuantity"] > 0]
        return _page(items, page, pageSize)

    @app.get("/products/{product_id}")
    def get_product(product_id: int):
        product = db["products"].get(product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return product

    async def _product_from_form(request: Request, product: Dict[str, Any]) -> Dict[str, Any]:
        form = await request.form()
        category_id = int(form["categoryId"])
        product.update({
            "name": form["name"],
            "description": form["description"],
            "price": float(form["price"]),
            "categoryId": category_id,
            "categoryName": db["categories"][category_id]["name"],
            "stockQuantity": int(form["stockQuantity"]),
            "sku": form["sku"],
            "isActive": form["isActive"] == "true",
            "isFeatured": form["isFeatured"] == "true",
        })
        image = form.get("image")
        if image is not None and hasattr(image, "filename"):
            product["imageUrl"] = f"/images/{image.filename}"
            db["payloads"]["image"] = await image.read()
        return product

    @app.post("/products", dependencies=[Depends(require_admin)])
    async def create_product(request: Request):
        new_id = max(db["products"], default=0) + 1
        product = await _product_from_form(request, {"id": new_id, "imageUrl": None})
        db["products"] = {new_id: product, **db["products"]}
        return product

    @app.put("/products/{product_id}", dependencies=[Depends(require_admin)])
    async def update_product(product_id: int, request: Request):
        product = db["products"].get(product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return await _product_from_form(request, product)

    @app.delete("/products/{product_id}", dependencies=[Depends(require_admin)])
    def delete_product(product_id: int):
        if db["products"].pop(product_id, None) is None:
            raise HTTPException(status_code=404, detail="Product not found")
        return {"id": product_id}

    # --- Categories ---

    @app.get("/categories")
    def list_categories():
        return list(db["categories"].values())

    @app.get("/categories/{category_id}")
    def get_category(category_id: int):
        if category_id not in db["categories"]:
            raise HTTPException(status_code=404, detail="Category not found")
        return db["categories"][category_id]

    @app.post("/categories", dependencies=[Depends(require_admin)])
    def create_category(category: CategoryIn):
        new_id = max(db["categories"]) + 1
        db["categories"][new_id] = {"id": new_id, "productCount": 0, **category.model_dump()}
        return db["categories"][new_id]

    @app.put("/categories/{category_id}", dependencies=[Depends(require_admin)])
    def update_category(category_id: int, category: CategoryIn):
        if category_id not in db["categories"]:
            raise HTTPException(status_code=404, detail="Category not found")
        db["categories"][category_id].update(category.model_dump())
        return db["categories"][category_id]

    @app.delete("/categories/{category_id}", dependencies=[Depends(require_admin)])
    def delete_category(category_id: int):
        if any(p["categoryId"] == category_id for p in db["products"].values()):
            raise HTTPException(status_code=400, detail="Category still has products")
        if db["categories"].pop(category_id, None) is None:
            raise HTTPException(status_code=404, detail="Category not found")
        return {"id": category_id}

    # --- Orders ---

    @app.post("/orders")
    def create_order(payload: OrderIn, user=Depends(current_user)):
        items = []
        for line in payload.orderItems:
            product = db["products"].get(line.productId)
            if not product:
                raise HTTPException(status_code=404, detail=f"Product {line.productId} not found")
            if product["stockQuantity"] < line.quantity:
                raise HTTPException(status_code=400, detail=f"Insufficient stock for {product['name']}")
            items.append({"productId": product["id"], "product": dict(product),
                          "price": line.price, "quantity": line.quantity})
        for item in items:
            db["products"][item["productId"]]["stockQuantity"] -= item["quantity"]

        subtotal = sum(i["price"] * i["quantity"] for i in items)
        settings = db["settings"]
        shipping = 0 if subtotal >= settings["freeShippingThreshold"] else settings["shippingFlatRate"]
        new_id = len(db["orders"]) + 1
        order = {
            "id": new_id,
            "userId": user["id"],
            "orderNumber": f"ORD-{new_id:05d}",
            "orderDate": "2024-03-01T10:00:00",
            "status": "Pending",
            "isPaid": False,
            "paymentMethod": payload.paymentMethod,
            "shippingAddress": payload.shippingAddress,
            "notes": payload.notes,
            "totalAmount": subtotal + shipping,
            "shippingCost": shipping,
            "taxAmount": 0,
            "orderItems": items,
        }
        db["orders"][new_id] = order
        return order

    @app.get("/orders/my-orders")
    def my_orders(user=Depends(current_user)):
        return [o for o in db["orders"].values() if o["userId"] == user["id"]]

    @app.get("/orders/admin", dependencies=[Depends(require_admin)])
    def all_orders():
        return list(db["orders"].values())

    @app.get("/orders/{order_id}")
    def get_order(order_id: int, user=Depends(current_user)):
        order = db["orders"].get(order_id)
        if not order or (order["userId"] != user["id"] and not user["isAdmin"]):
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    @app.put("/orders/{order_id}/status", dependencies=[Depends(require_admin)])
    def update_order_status(order_id: int, body: StatusIn):
        order = db["orders"].get(order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        if body.status not in ORDER_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status")
        order["status"] = body.status
        if body.status == "Delivered":
            order["isPaid"] = True
        return order

    # --- Users ---

    @app.get("/users", dependencies=[Depends(require_admin)])
    def list_users():
        return [_public_user(u) for u in db["users"].values()]

    @app.put("/users/profile")
    def update_profile(payload: Dict[str, Any] = Body(...), user=Depends(current_user)):
        user.update({
            "firstName": payload["firstName"],
            "lastName": payload["lastName"],
            "email": payload["email"],
            "phone": payload["phoneNumber"],
            "address": payload["address"],
            "city": payload["city"],
        })
        return _public_user(user)

    @app.get("/users/{user_id}", dependencies=[Depends(require_admin)])
    def get_user(user_id: int):
        if user_id not in db["users"]:
            raise HTTPException(status_code=404, detail="User not found")
        return _public_user(db["users"][user_id])

    @app.post("/users", dependencies=[Depends(require_admin)])
    def create_user(payload: Dict[str, Any] = Body(...)):
        new_id = max(db["users"]) + 1
        db["users"][new_id] = {"id": new_id, "username": payload["email"], "createdAt": "2024-02-01T00:00:00",
                               **payload}
        return _public_user(db["users"][new_id])

    @app.put("/users/{user_id}", dependencies=[Depends(require_admin)])
    def update_user(user_id: int, payload: Dict[str, Any] = Body(...)):
        if user_id not in db["users"]:
            raise HTTPException(status_code=404, detail="User not found")
        db["payloads"]["user_update"] = payload
        db["users"][user_id].update(payload)
        return _public_user(db["users"][user_id])

    @app.delete("/users/{user_id}", dependencies=[Depends(require_admin)])
    def delete_user(user_id: int):
        if db["users"].pop(user_id, None) is None:
            raise HTTPException(status_code=404, detail="User not found")
        return {"id": user_id}

    @app.patch("/users/{user_id}/status", dependencies=[Depends(require_admin)])
    def toggle_user_status(user_id: int, body: UserStatusIn):
        if user_id not in db["users"]:
            raise HTTPException(status_code=404, detail="User not found")
        db["users"][user_id]["isActive"] = body.isActive
        return _public_user(db["users"][user_id])

    # --- Dashboard & reports ---

    @app.get("/dashboard/stats", dependencies=[Depends(require_admin)])
    def dashboard_stats(dateRange: Optional[str] = None):
        return {
            "totalProducts": len(db["products"]),
            "totalOrders": len(db["orders"]),
            "totalUsers": len(db["users"]),
            "totalRevenue": sum(o["totalAmount"] for o in db["orders"].values()),
            "dateRange": dateRange,
        }

    @app.get("/dashboard/recent-orders", dependencies=[Depends(require_admin)])
    def recent_orders(dateRange: Optional[str] = None):
        return list(db["orders"].values())[-5:]

    @app.get("/dashboard/low-stock", dependencies=[Depends(require_admin)])
    def low_stock(dateRange: Optional[str] = None):
        return [p for p in db["products"].values() if p["stockQuantity"] < 2]

    @app.get("/reports/sales", dependencies=[Depends(require_admin)])
    def sales_report(dateRange: str):
        return {"dateRange": dateRange, "totalSales": sum(o["totalAmount"] for o in db["orders"].values())}

    @app.get("/reports/top-products", dependencies=[Depends(require_admin)])
    def top_products(dateRange: str):
        return [{"productId": 1, "name": "Filtre 1", "quantity": 3, "dateRange": dateRange}]

    @app.get("/reports/top-customers", dependencies=[Depends(require_admin)])
    def top_customers(dateRange: str):
        return [{"userId": 1, "name": "Alice Martin", "total": 120.0, "dateRange": dateRange}]

    @app.get("/reports/sales-by-category", dependencies=[Depends(require_admin)])
    def sales_by_category(dateRange: str):
        return [{"category": "Filtres", "total": 80.0, "dateRange": dateRange}]

    @app.get("/reports/sales-timeline", dependencies=[Depends(require_admin)])
    def sales_timeline(dateRange: str):
        return [{"date": "2024-03-01", "total": 80.0, "dateRange": dateRange}]

    # --- Settings ---

    @app.get("/settings", dependencies=[Depends(require_admin)])
    def get_settings():
        return db["settings"]

    @app.put("/settings", dependencies=[Depends(require_admin)])
    def update_settings(payload: Dict[str, Any] = Body(...)):
        errors = {}
        if not payload.get("siteName"):
            errors["SiteName"] = ["The SiteName field is required."]
        if payload.get("companyEmail") and "@" not in payload["companyEmail"]:
            errors["CompanyEmail"] = ["The CompanyEmail field is not a valid e-mail address."]
        if errors:
            return JSONResponse(status_code=400, content={"title": "Validation failed", "errors": errors})
        db["settings"] = payload
        return payload

    return app
