"""
Settings store. The whole settings object is replaced on fetch and on save;
a rejected save leaves a field -> message map in `error`.
"""

import logging
from typing import Any, Optional

from storefront.errors import FieldErrors
from storefront.schemas import Settings
from storefront.stores.base import Store

logger = logging.getLogger(__name__)


class SettingsStore(Store):
    name = "settings"

    def __init__(self, api):
        super().__init__(api)
        self.settings: Optional[Settings] = None

    def _replace(self, payload) -> Settings:
        self.settings = Settings.model_validate(payload or {})
        return self.settings

    def fetch(self) -> Optional[Settings]:
        return self._run(
            "settings",
            lambda: self.api.get("/settings", fallback="Failed to fetch settings"),
            self._replace,
        )

    def save(self, settings: Any) -> Optional[Settings]:
        form = self._validate(Settings, settings)
        if form is None:
            return None
        return self._run(
            "settings",
            lambda: self.api.put("/settings", form.to_wire(), fallback="Failed to update settings"),
            self._replace,
            field_errors=True,
        )

    @property
    def field_errors(self) -> FieldErrors:
        if isinstance(self.error, FieldErrors):
            return self.error
        return FieldErrors()

    def field_error(self, field: str) -> Optional[str]:
        return self.field_errors.get(field)
