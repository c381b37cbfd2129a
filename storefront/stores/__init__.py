from storefront.stores.cart import CartStore
from storefront.stores.catalog import CatalogStore
from storefront.stores.orders import OrderStore
from storefront.stores.reports import DashboardStore, ReportStore
from storefront.stores.resources import CategoryStore, UserStore
from storefront.stores.session import SessionStore
from storefront.stores.settings import SettingsStore

__all__ = [
    "CartStore",
    "CatalogStore",
    "CategoryStore",
    "DashboardStore",
    "OrderStore",
    "ReportStore",
    "SessionStore",
    "SettingsStore",
    "UserStore",
]
