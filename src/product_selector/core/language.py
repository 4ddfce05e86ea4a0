"""
Process-wide display language.

The language is used as the default when asking the backend for a
product license. An explicit override wins over the environment.
"""

import logging
import os

logger = logging.getLogger(__name__)


DEFAULT_LANGUAGE = "en_US"
LANGUAGE_ENV = "PRODUCT_SELECTOR_LANG"

_override: str | None = None


def current_language() -> str:
    """
    Return the currently configured display language.

    Precedence: set_language() override, $PRODUCT_SELECTOR_LANG, $LANG,
    then DEFAULT_LANGUAGE.
    """
    if _override:
        return _override

    for var in (LANGUAGE_ENV, "LANG"):
        lang = _normalize(os.environ.get(var, ""))
        if lang:
            return lang

    return DEFAULT_LANGUAGE


def set_language(lang: str | None) -> None:
    """Set the process-wide language. None clears the override."""
    global _override
    _override = _normalize(lang) if lang else None
    logger.debug(f"Display language set to {_override or current_language()}")


def _normalize(value: str) -> str | None:
    """Strip encoding and modifier: 'de_DE.UTF-8@euro' -> 'de_DE'."""
    lang = value.split(".")[0].split("@")[0].strip()
    if lang in ("", "C", "POSIX"):
        return None
    return lang
