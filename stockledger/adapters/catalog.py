"""
Product validator loading.

STOCKLEDGER['PRODUCT_VALIDATOR'] is the dotted path of a class implementing
ProductValidator. It is imported and instantiated on first use and kept for
the life of the process; reset_product_validator() forgets it.
"""

import logging

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockledger.conf import stockledger_settings
from stockledger.protocols.product import ProductValidator

logger = logging.getLogger('stockledger')

_validator: ProductValidator | None = None


def get_product_validator() -> ProductValidator:
    """
    Return the configured product validator.

    Raises:
        ImproperlyConfigured: path unset, not importable, or the class does
            not implement ProductValidator
    """
    global _validator
    if _validator is None:
        _validator = _load(stockledger_settings.PRODUCT_VALIDATOR)
    return _validator


def _load(path: str) -> ProductValidator:
    if not path:
        raise ImproperlyConfigured(
            "STOCKLEDGER['PRODUCT_VALIDATOR'] must be set when VALIDATE_PRODUCTS is enabled"
        )
    try:
        validator = import_string(path)()
    except ImportError as e:
        raise ImproperlyConfigured(f"Cannot import product validator {path!r}: {e}") from e
    if not isinstance(validator, ProductValidator):
        raise ImproperlyConfigured(f"{path!r} does not implement ProductValidator")

    logger.debug("stock.validator.loaded", extra={"path": path})
    return validator


def reset_product_validator() -> None:
    """Forget the loaded validator (after a settings change, in tests)."""
    global _validator
    _validator = None
