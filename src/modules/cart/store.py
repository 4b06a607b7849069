"""Persist the cart in the Django session."""

from __future__ import annotations

from django.contrib.sessions.backends.base import SessionBase

from modules.cart.cart import Cart

SESSION_KEY = "cart"


class SessionCartStore:
    """Loads and saves one shopper's ``Cart`` in ``request.session``."""

    def __init__(self, session: SessionBase) -> None:
        self._session = session

    def load(self) -> Cart:
        return Cart.from_dict(self._session.get(SESSION_KEY))

    def save(self, cart: Cart) -> None:
        self._session[SESSION_KEY] = cart.to_dict()
        self._session.modified = True

    def clear(self) -> None:
        self._session.pop(SESSION_KEY, None)
        self._session.modified = True
