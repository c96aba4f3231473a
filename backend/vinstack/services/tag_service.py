"""Rule-based tag suggestions for a piece of code."""
import re
from typing import Iterable

# (feature pattern, tags added when it matches); checked in order
FEATURE_TAGS: tuple[tuple[re.Pattern, tuple[str, ...]], ...] = (
    (re.compile(r"async|await|Promise"), ("async", "promises")),
    (re.compile(r"fetch|axios|api|endpoint"), ("api", "http", "rest")),
    (re.compile(r"sql|database|query|select|insert|update|delete"), ("database", "sql", "query")),
    (re.compile(r"react|jsx|component|useState|useEffect"), ("react", "frontend", "component")),
    (re.compile(r"require|module\.exports|express|app\."), ("nodejs", "backend", "server")),
    (re.compile(r"auth|login|password|token|jwt"), ("authentication", "security")),
    (re.compile(r"validate|schema|joi|yup"), ("validation", "forms")),
    (re.compile(r"test|spec|describe|it\(|expect"), ("testing", "unit-test")),
    (re.compile(r"util|helper|function|const|let"), ("utility", "helper")),
    (re.compile(r"use[A-Z]|hook"), ("hooks", "react-hooks")),
    (re.compile(r"state|setState|useState|redux"), ("state-management",)),
    (re.compile(r"form|input|submit|validation"), ("forms", "input")),
    (re.compile(r"animation|transition|motion|framer"), ("animation", "ui")),
    (re.compile(r"style|css|className|tailwind"), ("styling", "css")),
    (re.compile(r"performance|optimize|cache|memo"), ("performance", "optimization")),
)

LANGUAGE_TAGS: dict[str, tuple[str, ...]] = {
    "javascript": ("es6", "frontend"),
    "typescript": ("types", "frontend"),
    "python": ("backend", "scripting"),
    "css": ("styling", "frontend"),
    "html": ("markup", "frontend"),
}


def generate_tags(code: str, language: str, existing_tags: Iterable[str] = ()) -> list[str]:
    """Suggest tags for ``code``: the language first, then matched features.

    The result has no duplicates and leaves out anything in ``existing_tags``.
    Blank code gets no suggestions.
    """
    if not code.strip():
        return []

    language = language.strip().lower()
    candidates: list[str] = [language] if language else []
    for pattern, tags in FEATURE_TAGS:
        if pattern.search(code):
            candidates.extend(tags)
    candidates.extend(LANGUAGE_TAGS.get(language, ()))

    existing = set(existing_tags)
    seen: set[str] = set()
    suggestions = []
    for tag in candidates:
        if tag in seen or tag in existing:
            continue
        seen.add(tag)
        suggestions.append(tag)
    return suggestions
