"""
CRUD mirrors of backend collections: categories and users.
"""

import logging
from typing import Any, List, Optional, Type

from pydantic import BaseModel

from storefront.schemas import Category, CategoryForm, ProfileForm, SessionUser, User, UserForm
from storefront.stores.base import Store

logger = logging.getLogger(__name__)


class ResourceStore(Store):
    """
    A collection at `path` mirrored as `items`, with `current` holding the
    last record fetched or updated. Subclasses set the model and form types.
    """

    path = ""
    label = "item"
    model: Type[BaseModel] = BaseModel
    form: Type[BaseModel] = BaseModel

    def __init__(self, api):
        super().__init__(api)
        self.items: List[Any] = []
        self.current: Optional[Any] = None

    def _payload(self, form, updating: bool):
        return form.to_wire()

    def fetch_all(self) -> Optional[List[Any]]:
        def apply(payload):
            self.items = [self.model.model_validate(i) for i in payload or []]
            return self.items

        return self._run(
            "list",
            lambda: self.api.get(self.path, fallback=f"Failed to fetch {self.label}s"),
            apply,
        )

    def fetch_one(self, item_id: int) -> Optional[Any]:
        def apply(payload):
            self.current = self.model.model_validate(payload)
            return self.current

        return self._run(
            "current",
            lambda: self.api.get(f"{self.path}/{item_id}", fallback=f"Failed to fetch {self.label}"),
            apply,
        )

    def create(self, data: Any) -> Optional[Any]:
        form = self._validate(self.form, data)
        if form is None:
            return None

        def apply(payload):
            item = self.model.model_validate(payload)
            self.items.append(item)
            return item

        return self._run(
            "create",
            lambda: self.api.post(self.path, self._payload(form, updating=False),
                                  fallback=f"Failed to create {self.label}"),
            apply,
        )

    def _replace(self, item):
        self.items = [item if i.id == item.id else i for i in self.items]

    def update(self, item_id: int, data: Any) -> Optional[Any]:
        form = self._validate(self.form, data)
        if form is None:
            return None

        def apply(payload):
            item = self.model.model_validate(payload)
            self._replace(item)
            self.current = item
            return item

        return self._run(
            f"update:{item_id}",
            lambda: self.api.put(f"{self.path}/{item_id}", self._payload(form, updating=True),
                                 fallback=f"Failed to update {self.label}"),
            apply,
        )

    def delete(self, item_id: int) -> bool:
        def apply(_payload):
            self.items = [i for i in self.items if i.id != item_id]
            if self.current is not None and self.current.id == item_id:
                self.current = None
            return True

        return bool(self._run(
            f"delete:{item_id}",
            lambda: self.api.delete(f"{self.path}/{item_id}", fallback=f"Failed to delete {self.label}"),
            apply,
        ))

    def clear_current(self) -> None:
        self.current = None


class CategoryStore(ResourceStore):
    name = "categories"
    path = "/categories"
    label = "category"
    model = Category
    form = CategoryForm

    @property
    def categories(self) -> List[Category]:
        return self.items


class UserStore(ResourceStore):
    name = "users"
    path = "/users"
    label = "user"
    model = User
    form = UserForm

    def __init__(self, api, session=None):
        super().__init__(api)
        self.session = session

    @property
    def users(self) -> List[User]:
        return self.items

    def _payload(self, form: UserForm, updating: bool):
        return form.to_payload(updating)

    def toggle_status(self, user_id: int, is_active: bool) -> Optional[User]:
        def apply(payload):
            user = User.model_validate(payload)
            self._replace(user)
            return user

        return self._run(
            f"status:{user_id}",
            lambda: self.api.patch(f"{self.path}/{user_id}/status", {"isActive": is_active},
                                   fallback="Failed to update user status"),
            apply,
        )

    def update_profile(self, values: Any) -> Optional[SessionUser]:
        """Save the logged-in user's own profile and refresh the session copy."""
        form = self._validate(ProfileForm, values)
        if form is None:
            return None

        def apply(payload):
            if self.session is not None:
                return self.session.update_user_in_auth(payload or {})
            return SessionUser.model_validate(payload)

        return self._run(
            "profile",
            lambda: self.api.put(f"{self.path}/profile", form.to_wire(),
                                 fallback="Failed to update user profile"),
            apply,
            field_errors=True,
        )
