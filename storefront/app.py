"""
The storefront application state: one API client shared by every store.
"""

import logging
from typing import Optional

from storefront import config
from storefront.api import ApiClient
from storefront.guard import GuardDecision, resolve
from storefront.notices import Notifier
from storefront.storage import JsonFileStorage
from storefront.stores import (
    CartStore,
    CatalogStore,
    CategoryStore,
    DashboardStore,
    OrderStore,
    ReportStore,
    SessionStore,
    SettingsStore,
    UserStore,
)

logger = logging.getLogger(__name__)


class Storefront:
    def __init__(self, base_url: Optional[str] = None, http_session=None, storage=None,
                 notifier: Optional[Notifier] = None):
        self.notifier = notifier or Notifier()
        self.storage = storage if storage is not None else JsonFileStorage(config.STATE_FILE)
        self.api = ApiClient(base_url, session=http_session, token_getter=lambda: self.session.token)

        self.session = SessionStore(self.api, self.storage)
        self.catalog = CatalogStore(self.api)
        self.cart = CartStore(self.notifier)
        self.orders = OrderStore(self.api, self.cart, self.session, self.notifier)
        self.categories = CategoryStore(self.api)
        self.users = UserStore(self.api, self.session)
        self.reports = ReportStore(self.api)
        self.dashboard = DashboardStore(self.api)
        self.settings = SettingsStore(self.api)
        logger.debug("storefront ready against %s (authenticated=%s)",
                     self.api.base_url, self.session.is_authenticated)

    def navigate(self, path: str) -> GuardDecision:
        return resolve(path, self.session)
