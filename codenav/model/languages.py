"""Language identifiers, their families and dialect fallbacks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

JAVA = "JAVA"
KOTLIN = "kotlin"
PYTHON = "Python"
JAVASCRIPT = "JavaScript"
ECMASCRIPT_6 = "ECMAScript 6"
JSX_HARMONY = "JSX Harmony"
TYPESCRIPT = "TypeScript"
TYPESCRIPT_JSX = "TypeScript JSX"
GO = "go"


@dataclass(frozen=True)
class Language:
    """A language identifier as reported by the code model.

    ``family`` doubles as the plugin id the host is asked about; types only
    resolve against declarations of the same family.
    """

    id: str
    display_name: str
    family: str
    base: str | None = None


class LanguageCatalog:
    """Lookup table of known languages."""

    def __init__(self, languages: Iterable[Language]) -> None:
        self._by_id: dict[str, Language] = {}
        for language in languages:
            self._by_id[language.id] = language

    def base_of(self, language_id: str) -> str | None:
        """Declared base language of a dialect, if any."""
        language = self._by_id.get(language_id)
        return language.base if language else None

    def display_name(self, language_id: str) -> str:
        language = self._by_id.get(language_id)
        return language.display_name if language else language_id

    def family(self, language_id: str) -> str:
        language = self._by_id.get(language_id)
        return language.family if language else language_id


DEFAULT_CATALOG = LanguageCatalog(
    [
        Language(JAVA, "Java", "java"),
        Language(KOTLIN, "Kotlin", "java"),
        Language(PYTHON, "Python", "python"),
        Language(JAVASCRIPT, "JavaScript", "javascript"),
        Language(ECMASCRIPT_6, "JavaScript", "javascript", base=JAVASCRIPT),
        Language(JSX_HARMONY, "JavaScript", "javascript", base=JAVASCRIPT),
        Language(TYPESCRIPT, "TypeScript", "javascript", base=JAVASCRIPT),
        Language(TYPESCRIPT_JSX, "TypeScript", "javascript", base=TYPESCRIPT),
        Language(GO, "Go", "go"),
    ]
)
