"""
English pluralization of collection names into REST resource names.
"""

from __future__ import annotations

from typing import Mapping, Optional

import inflection


class Pluralizer:
    """
    Pluralize collection names with English rules.

    Irregular resource names that the upstream API spells differently can be
    supplied through ``overrides`` (singular -> plural). Words that already
    appear as an override's plural are returned unchanged.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None) -> None:
        self._plurals = {key.lower(): value for key, value in (overrides or {}).items()}
        self._known_plurals = {value.lower() for value in self._plurals.values()}

    def pluralize(self, word: str) -> str:
        """
        Return the plural form of ``word``.

        Examples
        --------
        >>> Pluralizer().pluralize("widget")
        'widgets'
        >>> Pluralizer().pluralize("category")
        'categories'
        >>> Pluralizer({"person": "people-records"}).pluralize("person")
        'people-records'
        """

        lowered = word.lower()
        if lowered in self._known_plurals:
            return word
        if lowered in self._plurals:
            return self._plurals[lowered]
        return inflection.pluralize(word)
