"""
Storefront Schemas

Pydantic models for everything the backend sends and receives.
Python attributes are snake_case; the wire format is camelCase:
- Product.stock_quantity <-> "stockQuantity"
- User.is_admin <-> "isAdmin"

Form models (the *Form / *Create classes) are validated before any request
is dispatched, so a store never sends a payload the form layer rejected.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", **kwargs)


# --- Session ---

class SessionUser(WireModel):
    """
    The authenticated user as returned by /auth/login
    Unknown profile fields (address, city, ...) are kept.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False


class LoginResponse(WireModel):
    user: SessionUser
    token: str


class LoginForm(WireModel):
    username: str = Field(..., min_length=1, description="Username is required")
    password: str = Field(..., min_length=1, description="Password is required")


class RegisterForm(WireModel):
    username: str = Field(..., min_length=3)
    email: str = Field(..., pattern=r"[^@]+@[^@]+\.[^@]+")
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)


# --- Catalog ---

class Category(WireModel):
    id: int
    name: str
    description: Optional[str] = None
    product_count: int = 0


class CategoryForm(WireModel):
    name: str = Field(..., min_length=1, description="Category name")
    description: Optional[str] = None


class Product(WireModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    stock_quantity: int = Field(0, ge=0)
    sku: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False


class ProductForm(WireModel):
    """
    Admin product editor payload, sent as multipart form data
    """
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    category_id: int = Field(..., gt=0)
    stock_quantity: int = Field(0, ge=0)
    sku: str = Field(..., min_length=1)
    is_active: bool = True
    is_featured: bool = False

    def to_form_fields(self) -> Dict[str, str]:
        fields = {}
        for key, value in self.to_wire().items():
            if isinstance(value, bool):
                fields[key] = "true" if value else "false"
            else:
                fields[key] = str(value)
        return fields


class ProductFilter(WireModel):
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = None
    in_stock: bool = False

    @field_validator("min_price", "max_price", "category_id", mode="before")
    @classmethod
    def blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_params(self) -> Dict[str, Any]:
        """Only the criteria that are actually set."""
        params = self.to_wire(exclude_none=True)
        if not self.in_stock:
            params.pop("inStock", None)
        return params


class Pagination(WireModel):
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    page_size: int = 5


# --- Cart ---

class CartItem(WireModel):
    id: int = Field(..., description="Product id")
    name: str
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    quantity: int = 1
    stock_quantity: int = Field(..., description="Stock snapshot at add-to-cart time")

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartItem":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
            quantity=quantity,
            stock_quantity=product.stock_quantity,
        )


# --- Orders ---

class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class OrderItem(WireModel):
    product_id: int
    product: Optional[Dict[str, Any]] = Field(None, description="Denormalized product snapshot")
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class Order(WireModel):
    id: int
    order_number: Optional[str] = None
    order_date: Optional[str] = None
    status: str = OrderStatus.PENDING.value
    is_paid: bool = False
    payment_method: Optional[str] = None
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    total_amount: float = 0
    shipping_cost: float = 0
    tax_amount: float = 0
    order_items: List[OrderItem] = []


class OrderLine(WireModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class CheckoutForm(WireModel):
    shipping_address: str = Field(..., min_length=1, description="Free-text delivery address")
    payment_method: str = Field("CashOnDelivery", min_length=1)
    notes: Optional[str] = None


class OrderCreate(WireModel):
    order_items: List[OrderLine] = Field(..., min_length=1)
    shipping_address: str = Field(..., min_length=1)
    payment_method: str
    notes: Optional[str] = None
    total_price: float = Field(..., ge=0)


# --- Users ---

class User(WireModel):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False
    is_active: bool = True
    created_at: Optional[str] = None


class UserForm(WireModel):
    """
    Admin user editor. The password is write-only: blank means "keep the
    current one" on update.
    """
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"[^@]+@[^@]+\.[^@]+")
    phone: Optional[str] = None
    is_admin: bool = False
    is_active: bool = True
    password: Optional[str] = None

    def to_payload(self, updating: bool) -> Dict[str, Any]:
        payload = self.to_wire()
        if updating and not self.password:
            payload.pop("password", None)
        return payload


class ProfileForm(WireModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"[^@]+@[^@]+\.[^@]+")
    phone_number: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)


# --- Settings ---

class Settings(WireModel):
    """
    Site-wide configuration, replaced wholesale on fetch and save
    Unknown keys coming from the backend are preserved.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    # General
    site_name: str = ""
    site_description: str = ""
    logo_url: str = ""
    favicon_url: str = ""
    primary_color: str = "#1a2642"

    # Company
    company_name: str = ""
    company_address: str = ""
    company_city: str = ""
    company_postal_code: str = ""
    company_country: str = ""
    company_phone: str = ""
    company_email: str = ""
    company_vat: str = Field("", alias="companyVAT")

    # Shipping
    enable_shipping: bool = True
    shipping_flat_rate: float = Field(0, ge=0)
    free_shipping_threshold: float = Field(0, ge=0)

    # Payment
    enable_cash_on_delivery: bool = True
    enable_bank_transfer: bool = True
    bank_account_name: str = ""
    bank_account_number: str = ""
    bank_name: str = ""

    # Email
    email_sender: str = ""
    email_reply_to: str = ""
    email_host: str = ""
    email_port: str = ""
    email_username: str = ""
    email_password: str = ""

    @field_validator("email_port", mode="before")
    @classmethod
    def _port_as_text(cls, value):
        return "" if value is None else str(value)
