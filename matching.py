from typing import Iterable, Protocol


class Matcher(Protocol):
    def matches(self, text: str, needle: str) -> bool:
        ...

    def matches_any(self, text: str, needles: Iterable[str]) -> bool:
        ...


class SubstringMatcher:
    """
    Case-insensitive "needle appears inside text" matching.

    Used for history, contraindication and search inputs, which are free
    text typed by users. Blank needles never match.
    """

    def matches(self, text: str, needle: str) -> bool:
        if not isinstance(text, str) or not isinstance(needle, str):
            return False
        needle = needle.strip().lower()
        if not needle:
            return False
        return needle in text.lower()

    def matches_any(self, text: str, needles: Iterable[str]) -> bool:
        return any(self.matches(text, n) for n in needles)
