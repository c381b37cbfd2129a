"""
Session store: who is logged in, with which token, and whether they are an
admin. Mirrored to durable storage so a restart does not log the user out.
"""

import json
import logging
from typing import Any, Dict, Optional

from storefront import config
from storefront.schemas import LoginForm, LoginResponse, RegisterForm, SessionUser
from storefront.stores.base import Store

logger = logging.getLogger(__name__)


def _wire_key(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class SessionStore(Store):
    name = "session"

    def __init__(self, api, storage):
        super().__init__(api)
        self.storage = storage
        self.user: Optional[SessionUser] = None
        self.token: Optional[str] = None
        self._hydrate()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user is not None and self.user.is_admin)

    def _hydrate(self):
        raw_user = self.storage.get(config.USER_KEY)
        token = self.storage.get(config.TOKEN_KEY)
        if raw_user is None:
            if token is not None:
                self.storage.remove(config.TOKEN_KEY)
            return
        try:
            data = json.loads(raw_user) if isinstance(raw_user, str) else raw_user
            self.user = SessionUser.model_validate(data)
        except (ValueError, TypeError) as e:
            logger.warning("Discarding corrupt stored session: %s", e)
            self.storage.remove(config.USER_KEY)
            self.storage.remove(config.TOKEN_KEY)
            return
        self.token = token

    def _persist(self):
        self.storage.set(config.USER_KEY, json.dumps(self.user.to_wire()))
        if self.token is not None:
            self.storage.set(config.TOKEN_KEY, self.token)

    def login(self, credentials: Any) -> Optional[SessionUser]:
        form = self._validate(LoginForm, credentials)
        if form is None:
            return None

        def apply(payload):
            response = LoginResponse.model_validate(payload)
            self.user = response.user
            self.token = response.token
            self._persist()
            return self.user

        return self._run(
            "login",
            lambda: self.api.post("/auth/login", form.to_wire(), fallback="Login failed"),
            apply,
            field_errors=True,
        )

    def register(self, user_data: Any) -> Optional[Dict[str, Any]]:
        """Create the account. The caller logs in separately afterwards."""
        form = self._validate(RegisterForm, user_data)
        if form is None:
            return None
        return self._run(
            "register",
            lambda: self.api.post("/auth/register", form.to_wire(), fallback="Registration failed"),
            lambda payload: payload if payload is not None else {},
            field_errors=True,
        )

    def logout(self) -> None:
        self.storage.remove(config.TOKEN_KEY)
        self.storage.remove(config.USER_KEY)
        self.user = None
        self.token = None
        self.is_loading = False
        self.error = None

    def update_user_in_auth(self, partial: Any) -> Optional[SessionUser]:
        """Merge profile changes made elsewhere into the session user."""
        if self.user is None:
            logger.warning("update_user_in_auth called without a session")
            return None
        if hasattr(partial, "to_wire"):
            partial = partial.to_wire(exclude_unset=True)
        merged = {**self.user.to_wire(), **{_wire_key(k): v for k, v in dict(partial).items()}}
        self.user = SessionUser.model_validate(merged)
        self._persist()
        return self.user
