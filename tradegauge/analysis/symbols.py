from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional

MAX_RESULTS = 20
FUZZY_MIN_QUERY = 4

# Units, warrants, rights and preferred share classes.
_UNIT_LIKE = re.compile(r"\.(U|WS|W|R|P|A|B|C)(\.|$)?$", re.I)


def rank_symbols(
    matches: Iterable[Mapping[str, Optional[str]]],
    query: str,
    limit: int = MAX_RESULTS,
) -> List[Dict[str, Optional[str]]]:
    """Order ticker search hits for the autocomplete list.

    Hits are de-duplicated by symbol and filtered to those starting with the
    query; a substring match is accepted only when nothing starts with a long
    query. Exact matches come first, then shorter symbols, then alphabetical.
    """

    needle = query.strip().upper()
    show_units = "." in needle

    unique: Dict[str, Dict[str, Optional[str]]] = {}
    for match in matches:
        symbol = str(match.get("symbol") or "").strip()
        if not symbol or symbol in unique:
            continue
        if not show_units and _UNIT_LIKE.search(symbol):
            continue
        unique[symbol] = {"symbol": symbol, "name": match.get("name")}

    candidates = [item for item in unique.values() if item["symbol"].upper().startswith(needle)]
    if not candidates and len(needle) >= FUZZY_MIN_QUERY:
        candidates = [item for item in unique.values() if needle in item["symbol"].upper()]

    candidates.sort(
        key=lambda item: (
            item["symbol"].upper() != needle,
            len(item["symbol"]),
            item["symbol"].upper(),
        )
    )
    return candidates[:limit]


__all__ = ["rank_symbols"]
