"""Exceptions raised by the checkout pricing module."""

from __future__ import annotations


class CheckoutError(Exception):
    """Base class for checkout pricing errors."""


class InvalidRuleConfiguration(CheckoutError, ValueError):
    """A promotion rule was constructed or configured with bad values."""


class InvalidItem(CheckoutError, ValueError):
    """An item is malformed or something other than an item was scanned."""


class CheckoutAlreadyFinalized(CheckoutError, RuntimeError):
    """The session was already totalled and accepts no more scans."""
