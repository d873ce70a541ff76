"""
Split a raw ingredient label into top-level ingredient tokens.
- Commas inside parentheses do not split ("Flavoring (INS 627, 631)" is one token).
- Parenthetical content is dropped from each token, nested parentheses included.
"""
import re
import logging
from typing import List

logger = logging.getLogger(__name__)


def _split_top_level(text: str) -> List[str]:
    """
    Split on commas at parenthesis depth 0.
    'Flour (Wheat, Iron), Salt' -> ['Flour (Wheat, Iron)', ' Salt']
    An unmatched ')' is ignored rather than driving depth negative.
    """
    out: List[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            if depth > 0:
                depth -= 1
        elif ch == "," and depth == 0:
            out.append(text[start:i])
            start = i + 1
    out.append(text[start:])
    return out


def _strip_parenthetical(token: str) -> str:
    """Remove every (...) group, nested or unclosed, keeping the text outside."""
    kept: List[str] = []
    depth = 0
    for ch in token:
        if ch == "(":
            depth += 1
        elif ch == ")":
            if depth > 0:
                depth -= 1
        elif depth == 0:
            kept.append(ch)
    return re.sub(r"\s+", " ", "".join(kept)).strip()


def parse_ingredients(raw_str) -> List[str]:
    """
    Parse a comma-separated ingredient label into ordered ingredient names.
    Empty or non-string input yields [].
    """
    if not raw_str or not isinstance(raw_str, str):
        return []
    tokens = []
    for chunk in _split_top_level(raw_str):
        name = _strip_parenthetical(chunk)
        if name:
            tokens.append(name)
    logger.debug("PARSE ingredients raw_len=%d tokens=%d", len(raw_str), len(tokens))
    return tokens
