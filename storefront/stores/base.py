"""
Common machinery for every store: a loading flag, an error slot, request
tickets that keep a slow earlier response from overwriting a newer one, and
form validation ahead of dispatch.
"""

import itertools
import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from storefront.errors import ApiError, error_slot, field_errors_from_validation

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

MALFORMED_RESPONSE = "Unexpected response from server"


class Store:
    name = "store"

    def __init__(self, api):
        self.api = api
        self.is_loading = False
        self.error: Any = None
        self._tickets = itertools.count(1)
        self._latest: Dict[str, int] = {}

    # --- tickets ---

    def _issue(self, slot: str) -> int:
        ticket = next(self._tickets)
        self._latest[slot] = ticket
        return ticket

    def _is_stale(self, slot: str, ticket: int) -> bool:
        return self._latest.get(slot) != ticket

    # --- dispatch ---

    def _run(self, slot: str, call: Callable[[], Any], apply: Callable[[Any], Any], *,
             field_errors: bool = False, loading_attr: str = "is_loading",
             error_attr: str = "error", on_pending: Optional[Callable[[], None]] = None,
             clear_error: bool = True) -> Any:
        """
        Issue `call` and hand its payload to `apply` unless a newer request
        for the same slot went out in the meantime. Returns whatever `apply`
        returns, or None when the request failed or was superseded. With
        `clear_error=False` an earlier failure stays in the error slot.
        """
        ticket = self._issue(slot)
        setattr(self, loading_attr, True)
        if clear_error:
            setattr(self, error_attr, None)
        if on_pending:
            on_pending()

        try:
            payload = call()
        except ApiError as e:
            if self._is_stale(slot, ticket):
                logger.debug("%s: dropping stale failure for %s", self.name, slot)
                return None
            setattr(self, loading_attr, False)
            setattr(self, error_attr, error_slot(e) if field_errors else e.message)
            logger.warning("%s: %s failed: %s", self.name, slot, e.message)
            return None

        if self._is_stale(slot, ticket):
            logger.debug("%s: dropping stale response for %s", self.name, slot)
            return None
        setattr(self, loading_attr, False)
        try:
            return apply(payload)
        except ValidationError as e:
            setattr(self, error_attr, MALFORMED_RESPONSE)
            logger.warning("%s: malformed response for %s: %s", self.name, slot, e)
            return None

    def _validate(self, model: Type[M], data: Any, error_attr: str = "error") -> Optional[M]:
        """Coerce a dict (or model) into `model`; on failure fill the error slot."""
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(by_alias=True)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            setattr(self, error_attr, field_errors_from_validation(e))
            logger.info("%s: rejected invalid %s", self.name, model.__name__)
            return None

    def clear_error(self) -> None:
        self.error = None
