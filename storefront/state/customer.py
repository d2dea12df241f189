"""Authenticated customer session (bearer token + profile)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.errors import NetworkError, ParseError, ValidationError
from storefront.state.store import PersistentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerSession:
    token: Optional[str] = None
    customer: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.customer is not None


class CustomerSessionStore(PersistentStore[CustomerSession]):
    storage_key = "customer"

    def __init__(self, storage, api=None):
        super().__init__(storage)
        self._api = api
        # bumped on login/logout so an in-flight refresh can tell it went stale
        self._generation = 0

    def empty(self) -> CustomerSession:
        return CustomerSession()

    def encode(self, state: CustomerSession) -> Dict[str, Any]:
        return {"token": state.token, "customer": state.customer}

    def decode(self, data: Dict[str, Any]) -> CustomerSession:
        token = data.get("token")
        customer = data.get("customer")
        if token is None and customer is None:
            return CustomerSession()
        if not isinstance(token, str) or not token or not isinstance(customer, dict):
            raise ParseError("Customer record is partially authenticated")
        return CustomerSession(token=token, customer=customer)

    @property
    def token(self) -> Optional[str]:
        return self.snapshot.token

    @property
    def customer(self) -> Optional[Dict[str, Any]]:
        return self.snapshot.customer

    @property
    def is_authenticated(self) -> bool:
        return self.snapshot.is_authenticated

    def login(self, token: str, customer: Dict[str, Any]) -> CustomerSession:
        if not token or not isinstance(customer, dict):
            raise ValidationError("Both a token and a customer profile are required")
        self._generation += 1
        return self._commit(CustomerSession(token=token, customer=dict(customer)))

    def logout(self) -> CustomerSession:
        self._generation += 1
        return self._commit(CustomerSession())

    def refresh_customer(self) -> Optional[Dict[str, Any]]:
        """Re-fetch the profile with the current token.

        Returns the fresh profile, or None when there is no session, the server
        answered 401 (the session is logged out) or the session changed while
        the request was in flight. Other network failures propagate with the
        session left as it was.
        """
        session = self.snapshot
        if not session.token:
            return None
        if self._api is None:
            raise RuntimeError("CustomerSessionStore has no API client")

        generation = self._generation
        try:
            profile = self._api.get_profile(session.token)
        except NetworkError as exc:
            if exc.is_unauthorized and not self._stale(generation):
                logger.info("Profile refresh rejected with 401, logging out")
                self.logout()
                return None
            raise

        if self._stale(generation):
            logger.debug("Discarding profile refresh for a session that has changed")
            return None
        self._commit(CustomerSession(token=session.token, customer=profile))
        return profile

    def _stale(self, generation: int) -> bool:
        return self.closed or generation != self._generation
