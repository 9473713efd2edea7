"""Facial-expression emoji catalog, name search and the recently-used list."""

from __future__ import annotations

from typing import Iterable, Iterator

from interfaces import RecentEmojiStore
from models import EmojiSymbol

RECENT_LIMIT = 8

_NAMED = (
    ("😀", "Grinning"), ("😃", "Happy"), ("😄", "Smile"), ("😁", "Beaming"),
    ("😆", "Laughing"), ("😅", "Sweat Smile"), ("😂", "Joy"), ("🤣", "Rolling"),
    ("😊", "Blush"), ("😇", "Innocent"), ("🙂", "Slight Smile"), ("🙃", "Upside Down"),
    ("😉", "Wink"), ("😌", "Relieved"), ("😍", "Heart Eyes"), ("🥰", "Smiling Hearts"),
    ("😘", "Kiss"), ("😗", "Kissing"), ("😙", "Kiss Smile"), ("😚", "Kiss Closed"),
    ("😋", "Yum"), ("😛", "Tongue"), ("😝", "Tongue Wink"), ("😜", "Crazy"),
    ("🤪", "Zany"), ("🤨", "Raised Eyebrow"), ("🧐", "Monocle"), ("🤓", "Nerd"),
    ("😎", "Cool"), ("🤩", "Star Eyes"), ("🥳", "Party"), ("😏", "Smirk"),
    ("😒", "Unamused"), ("😞", "Disappointed"), ("😔", "Pensive"), ("😟", "Worried"),
    ("😕", "Confused"), ("🙁", "Frown"), ("☹️", "Sad"), ("😣", "Persevere"),
    ("😖", "Confounded"), ("😫", "Tired"), ("😩", "Weary"), ("🥺", "Pleading"),
    ("😢", "Cry"), ("😭", "Sob"), ("😤", "Triumph"), ("😠", "Angry"),
    ("😡", "Rage"), ("🤬", "Cursing"), ("🤯", "Exploding"), ("😳", "Flushed"),
    ("🥵", "Hot"), ("🥶", "Cold"), ("😱", "Scream"), ("😨", "Fearful"),
    ("😰", "Anxious"), ("😥", "Sad Sweat"), ("😓", "Sweat"), ("🤗", "Hug"),
    ("🤔", "Thinking"), ("🤭", "Hand Mouth"), ("🤫", "Shush"), ("🤥", "Lying"),
    ("😶", "No Mouth"), ("😐", "Neutral"), ("😑", "Expressionless"), ("😬", "Grimace"),
    ("🙄", "Eye Roll"), ("😯", "Hushed"), ("😦", "Frowning"), ("😧", "Anguished"),
    ("😮", "Open Mouth"), ("😲", "Astonished"), ("🥱", "Yawn"), ("😴", "Sleep"),
    ("🤤", "Drool"), ("😪", "Sleepy"), ("😵", "Dizzy"), ("🤐", "Zipper"),
    ("🥴", "Woozy"), ("🤢", "Nauseated"), ("🤮", "Vomit"), ("🤧", "Sneeze"),
    ("😷", "Mask"), ("🤒", "Thermometer"), ("🤕", "Bandage"), ("🤑", "Money"),
    ("🤠", "Cowboy"),
)

CATALOG: tuple[EmojiSymbol, ...] = tuple(EmojiSymbol(char, name) for char, name in _NAMED)
_NAMES = {symbol.char: symbol.name for symbol in CATALOG}


def emoji_name(char: str) -> str:
    return _NAMES.get(char, "Emoji")


class SearchResults:
    """Re-iterable view of the catalog filtered by display name."""

    def __init__(self, query: str = "", catalog: Iterable[EmojiSymbol] = CATALOG) -> None:
        self.query = query.strip().lower()
        self._catalog = tuple(catalog)

    def __iter__(self) -> Iterator[EmojiSymbol]:
        if not self.query:
            return iter(self._catalog)
        return (symbol for symbol in self._catalog if self.query in symbol.name.lower())


def search(query: str = "") -> SearchResults:
    return SearchResults(query)


class RecencyList:
    """Most-recent-first, deduplicated, capped list of chosen emoji.

    Loaded once from ``store`` on construction and written back on every
    ``record_use``.
    """

    def __init__(self, store: RecentEmojiStore, limit: int = RECENT_LIMIT) -> None:
        self._store = store
        self._limit = limit
        self._items = self._normalize(store.get_recent_emojis())

    @property
    def items(self) -> tuple[str, ...]:
        return tuple(self._items)

    def record_use(self, char: str) -> tuple[str, ...]:
        self._items = self._normalize([char, *self._items])
        self._store.set_recent_emojis(list(self._items))
        return self.items

    def _normalize(self, values: Iterable[object]) -> list[str]:
        seen: list[str] = []
        for value in values:
            if not isinstance(value, str) or not value or value in seen:
                continue
            seen.append(value)
            if len(seen) == self._limit:
                break
        return seen
