from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

ALLOWED_COUNTRIES = frozenset({"US", "GB", "CA", "AU", "IE", "NZ"})

NEWS_TYPES = ("news", "talk show")
SPORTS_TYPES = ("sports",)

NEWS_KEYWORDS = (
    "news",
    "late show",
    "late night",
    "tonight show",
    "good morning america",
    "meet the press",
    "face the nation",
    "press briefing",
)

SPORTS_KEYWORDS = (
    # Bare "nfl" and "nba" sit inside ordinary words ("conflict", "unbalanced").
    "nfl game",
    "nfl sunday",
    "nba finals",
    "nba playoffs",
    "gameday",
    "mlb",
    "nhl",
    "ufc",
    "wwe",
    "aew",
    "premier league",
    "champions league",
    "football",
    "soccer",
    "basketball",
    "baseball",
    "hockey",
    "cricket",
    "golf",
    "tennis",
    "formula 1",
    "nascar",
    "grand prix",
    "boxing",
    "wrestling",
    "olympics",
    "match of the day",
)

SPORTS_NETWORKS = (
    "espn",
    "fox sports",
    "fs1",
    "fs2",
    "nbc sports",
    "cbs sports",
    "sky sports",
    "tnt sports",
    "bt sport",
    "dazn",
    "bein sports",
    "eurosport",
    "nfl network",
    "nba tv",
    "mlb network",
    "nhl network",
    "golf channel",
    "tennis channel",
    "big ten network",
    "sec network",
    "acc network",
    "willow",
)


def _lower(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def show_type(show: Mapping[str, Any]) -> str:
    return _lower(show.get("type"))


def show_genres(show: Mapping[str, Any]) -> list[str]:
    genres = show.get("genres")
    if not isinstance(genres, list):
        return []
    return [_lower(g) for g in genres if isinstance(g, str)]


def show_name(show: Mapping[str, Any]) -> str:
    return _lower(show.get("name"))


def _broadcasters(show: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    return [b for b in (show.get("network"), show.get("webChannel")) if isinstance(b, Mapping)]


def broadcaster_names(show: Mapping[str, Any]) -> list[str]:
    return [name for name in (_lower(b.get("name")) for b in _broadcasters(show)) if name]


def broadcaster_country(show: Mapping[str, Any]) -> str | None:
    """Country code from `network`, else from `webChannel`, else None."""

    for broadcaster in _broadcasters(show):
        country = broadcaster.get("country")
        if isinstance(country, Mapping):
            code = country.get("code")
            if isinstance(code, str) and code.strip():
                return code.strip().upper()
    return None


def is_web_only(show: Mapping[str, Any]) -> bool:
    return not isinstance(show.get("network"), Mapping) and isinstance(show.get("webChannel"), Mapping)


FIELD_GETTERS: dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "type": show_type,
    "genres": show_genres,
    "name": show_name,
    "broadcaster": broadcaster_names,
    "show": lambda show: show,
}


def equals_any(values: Iterable[str]) -> Callable[[Any], bool]:
    wanted = frozenset(v.lower() for v in values)

    def predicate(value: Any) -> bool:
        if isinstance(value, list):
            return any(item in wanted for item in value)
        return value in wanted

    return predicate


def substring_any(fragments: Iterable[str]) -> Callable[[Any], bool]:
    """Match when any fragment occurs anywhere in the (already lowercased) value."""

    parts = [f.lower() for f in fragments if f and f.strip()]

    def predicate(value: Any) -> bool:
        items = value if isinstance(value, list) else [value]
        return any(isinstance(item, str) and part in item for item in items for part in parts)

    return predicate


def foreign_origin(
    *,
    allowed_countries: Iterable[str] = ALLOWED_COUNTRIES,
    conservative: bool = False,
) -> Callable[[Any], bool]:
    allowed = frozenset(c.upper() for c in allowed_countries)

    def predicate(show: Any) -> bool:
        country = broadcaster_country(show)
        if country is not None:
            return country not in allowed
        if is_web_only(show) and _lower(show.get("language")) == "english":
            return False
        return conservative

    return predicate


@dataclass(frozen=True)
class ClassifierRule:
    category: str
    field: str
    predicate: Callable[[Any], bool]

    def matches(self, show: Mapping[str, Any]) -> bool:
        return bool(self.predicate(FIELD_GETTERS[self.field](show)))


def default_rules(
    *,
    conservative_geography: bool = False,
    allowed_countries: Iterable[str] = ALLOWED_COUNTRIES,
    blocked_broadcasters: Iterable[str] = (),
    blocked_broadcaster_substrings: Iterable[str] = (),
) -> list[ClassifierRule]:
    rules = [
        ClassifierRule("news", "type", equals_any(NEWS_TYPES)),
        ClassifierRule("news", "genres", equals_any(NEWS_TYPES)),
        ClassifierRule("news", "name", substring_any(NEWS_KEYWORDS)),
        ClassifierRule("sports", "type", equals_any(SPORTS_TYPES)),
        ClassifierRule("sports", "genres", equals_any(SPORTS_TYPES)),
        ClassifierRule("sports", "name", substring_any(SPORTS_KEYWORDS)),
        ClassifierRule("sports", "broadcaster", substring_any(SPORTS_NETWORKS)),
        ClassifierRule(
            "geography",
            "show",
            foreign_origin(allowed_countries=allowed_countries, conservative=conservative_geography),
        ),
    ]
    blocked = [b for b in blocked_broadcasters if b and b.strip()]
    if blocked:
        rules.append(ClassifierRule("broadcaster", "broadcaster", equals_any(b.strip() for b in blocked)))
    fragments = [f for f in blocked_broadcaster_substrings if f and f.strip()]
    if fragments:
        rules.append(ClassifierRule("broadcaster", "broadcaster", substring_any(f.strip() for f in fragments)))
    return rules


class ContentClassifier:
    """
    Decides whether a show is kept out of the catalog.

    A show is excluded when any rule in the table matches it. Rules are plain
    `(category, field, predicate)` entries so new ones can be appended without
    touching this class.
    """

    def __init__(self, rules: Iterable[ClassifierRule] | None = None) -> None:
        self._rules = list(rules) if rules is not None else default_rules()

    @property
    def rules(self) -> list[ClassifierRule]:
        return list(self._rules)

    def exclusion_reason(self, show: Mapping[str, Any] | None) -> str | None:
        if not isinstance(show, Mapping):
            return "invalid"
        for rule in self._rules:
            if rule.matches(show):
                return rule.category
        return None

    def is_excluded(self, show: Mapping[str, Any] | None) -> bool:
        return self.exclusion_reason(show) is not None
