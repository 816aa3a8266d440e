"""Catalog of known translation codes."""

from __future__ import annotations

from dataclasses import dataclass

from .error_codes import ErrorCode
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class TranslationSpec:
    """A translation the corpus may carry.

    ``served`` marks codes the default provider actually returns; the rest are
    kept in the catalog so they can be requested explicitly against a provider
    that serves them.
    """

    code: str
    name: str
    priority: int
    served: bool = True


BASE_TRANSLATION = "WEB"

TRANSLATIONS: tuple[TranslationSpec, ...] = (
    TranslationSpec("WEB", "World English Bible", 1),
    TranslationSpec("KJV", "King James Version", 2),
    TranslationSpec("ASV", "American Standard Version", 3),
    TranslationSpec("DARBY", "Darby Translation", 4),
    TranslationSpec("NIV", "New International Version", 5, served=False),
    TranslationSpec("AMP", "Amplified Bible", 6, served=False),
    TranslationSpec("ESV", "English Standard Version", 7, served=False),
    TranslationSpec("NLT", "New Living Translation", 8, served=False),
    TranslationSpec("NASB", "New American Standard Bible", 9, served=False),
)

_BY_CODE = {spec.code: spec for spec in TRANSLATIONS}


def get_translation(code: str) -> TranslationSpec | None:
    return _BY_CODE.get(code.upper())


def default_overlay_codes(base: str = BASE_TRANSLATION) -> list[str]:
    """Served catalog codes other than the base, in priority order."""
    return [
        spec.code
        for spec in sorted(TRANSLATIONS, key=lambda s: s.priority)
        if spec.served and spec.code != base.upper()
    ]


def normalize_codes(codes: list[str], allow_unknown: bool = False) -> list[str]:
    """Upper-case and de-duplicate codes, preserving order.

    Raises:
        ConfigurationError: If a code is not in the catalog and unknown codes
            are not allowed
    """
    normalized: list[str] = []
    for raw in codes:
        code = raw.strip().upper()
        if not code or code in normalized:
            continue
        if not allow_unknown and get_translation(code) is None:
            msg = f"Unknown translation code: {raw}"
            raise ConfigurationError(
                msg,
                suggestion=(
                    f"Use one of {', '.join(_BY_CODE)} or pass --allow-unknown"
                ),
                error_code=ErrorCode.CFG_UNKNOWN_TRANSLATION.value,
            )
        normalized.append(code)
    return normalized


__all__ = [
    "BASE_TRANSLATION",
    "TRANSLATIONS",
    "TranslationSpec",
    "default_overlay_codes",
    "get_translation",
    "normalize_codes",
]
