from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from rapidfuzz import fuzz

from linkshelf.panel.entities import Link

INDEXED_FIELDS = ("display_name", "name", "description", "url")
DEFAULT_THRESHOLD = 70

_OR_SPLIT = re.compile(r"\s+\|\s+")


@dataclass(frozen=True)
class QueryTerm:
    operator: str
    text: str

    @property
    def inverse(self) -> bool:
        return self.operator.startswith("not_")


def _safe(value: str | None) -> str:
    return (value or "").strip().lower()


def _parse_term(token: str) -> QueryTerm | None:
    if token.startswith("!^"):
        operator, text = "not_prefix", token[2:]
    elif token.startswith("!") and token.endswith("$"):
        operator, text = "not_suffix", token[1:-1]
    elif token.startswith("!"):
        operator, text = "not_include", token[1:]
    elif token.startswith("^"):
        operator, text = "prefix", token[1:]
    elif token.startswith("="):
        operator, text = "exact", token[1:]
    elif token.startswith("'"):
        operator, text = "include", token[1:]
    elif token.endswith("$") and len(token) > 1:
        operator, text = "suffix", token[:-1]
    else:
        operator, text = "fuzzy", token
    text = text.lower()
    if not text:
        return None
    return QueryTerm(operator, text)


def parse_query(query: str) -> list[list[QueryTerm]]:
    """Split an extended query into OR-groups of AND-ed terms.

    Whitespace separates AND terms and `` | `` separates OR groups. Term
    prefixes: ``=`` exact, ``'`` includes, ``^`` prefix, ``!`` negation;
    a trailing ``$`` anchors a suffix. Anything else is a fuzzy term.
    """
    groups: list[list[QueryTerm]] = []
    for chunk in _OR_SPLIT.split(query.strip()):
        terms = [term for term in map(_parse_term, chunk.split()) if term]
        if terms:
            groups.append(terms)
    return groups


def _field_matches(term: QueryTerm, value: str) -> bool:
    operator = term.operator.removeprefix("not_")
    if operator == "exact":
        return value == term.text
    if operator == "include":
        return term.text in value
    if operator == "prefix":
        return value.startswith(term.text)
    if operator == "suffix":
        return value.endswith(term.text)
    raise ValueError(f"unknown operator: {term.operator}")


class SearchIndex:
    """Fuzzy index over one loaded page of links.

    The index is immutable; a new one is built whenever the page changes.
    """

    def __init__(self, links: Sequence[Link], threshold: int = DEFAULT_THRESHOLD):
        self.threshold = threshold
        self._links = list(links)
        self._fields = [
            {field: _safe(getattr(link, field, None)) for field in INDEXED_FIELDS}
            for link in self._links
        ]

    def __len__(self) -> int:
        return len(self._links)

    def _score_term(self, term: QueryTerm, fields: dict[str, str]):
        if term.inverse:
            if any(value and _field_matches(term, value) for value in fields.values()):
                return None
            return 100.0, []

        best = 0.0
        matched: list[str] = []
        for field, value in fields.items():
            if not value:
                continue
            if term.operator == "fuzzy":
                score = fuzz.partial_ratio(term.text, value)
                if score < self.threshold:
                    continue
            elif _field_matches(term, value):
                score = 100.0
            else:
                continue
            matched.append(field)
            best = max(best, score)
        if not matched:
            return None
        return best, matched

    def _score_group(self, terms: list[QueryTerm], fields: dict[str, str]):
        total = 0.0
        reasons: list[str] = []
        for term in terms:
            result = self._score_term(term, fields)
            if result is None:
                return None
            score, matched = result
            total += score
            reasons.extend(field for field in matched if field not in reasons)
        return total / len(terms), reasons

    def rank(self, keyword: str) -> list[dict]:
        groups = parse_query(keyword or "")
        if not groups:
            return []

        ranked = []
        for link, fields in zip(self._links, self._fields):
            best = None
            for terms in groups:
                result = self._score_group(terms, fields)
                if result and (best is None or result[0] > best[0]):
                    best = result
            if best is not None:
                ranked.append(
                    {"link": link, "score": round(best[0], 2), "reasons": best[1]}
                )

        ranked.sort(key=lambda item: item["score"], reverse=True)
        return ranked

    def search(self, keyword: str | None) -> list[Link]:
        if not keyword or not keyword.strip():
            return list(self._links)
        return [row["link"] for row in self.rank(keyword)]
