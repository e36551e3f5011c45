"""Execution environments supported by the sandbox (Judge0 language ids)."""

from dataclasses import dataclass
from typing import Dict, List

from .errors import InvalidLanguage


@dataclass(frozen=True)
class Language:
    id: int
    name: str


LANGUAGES: List[Language] = [
    Language(71, "Python (3.8.1)"),
    Language(50, "C (GCC 9.2.0)"),
    Language(54, "C++ (GCC 9.2.0)"),
    Language(62, "Java (OpenJDK 13.0.1)"),
    Language(63, "JavaScript (Node.js 12.14.0)"),
    Language(82, "SQL (SQLite 3.27.2)"),
]

_BY_ID: Dict[int, Language] = {lang.id: lang for lang in LANGUAGES}

DEFAULT_LANGUAGE_ID = 71


def is_supported(language_id) -> bool:
    # bool là subclass của int, không chấp nhận True/False làm language id
    return isinstance(language_id, int) and not isinstance(language_id, bool) and language_id in _BY_ID


def ensure_supported(language_id) -> Language:
    if not is_supported(language_id):
        raise InvalidLanguage(language_id)
    return _BY_ID[language_id]
