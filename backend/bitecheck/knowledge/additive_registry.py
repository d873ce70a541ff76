"""
Additive knowledge base. Loads the INS additive table from knowledge/data/additives.json.
Lookup by code, then exact name/alias, then a bounded substring match in table order.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional
import json
import re
import logging

from .additive_schema import Additive
from bitecheck.config import get_additives_path

logger = logging.getLogger(__name__)

# "INS 211", "ins211", "E211", "e-211" -> "211"
_CODE_PREFIX = re.compile(r"^(?:ins|e)[\s\-]*")


def _normalize_query(text: str) -> str:
    return re.sub(r"\s+", " ", str(text).strip().lower())


def _contains_word(haystack: str, needle: str) -> bool:
    """Needle occurs in haystack not glued to other letters/digits ('msg' not inside 'msgx')."""
    return bool(re.search(r"(?<![a-z0-9])" + re.escape(needle) + r"(?![a-z0-9])", haystack))


class AdditiveRegistry:
    """
    O(1) lookup by code or lower-cased name/alias.
    Name index keeps table order (canonical name first, then aliases) so partial
    matching is deterministic: first hit in that order wins.
    """

    def __init__(self, additives_path: Optional[Path] = None):
        self._path = additives_path or get_additives_path()
        self._additives: list[Additive] = []
        self._by_code: dict[str, Additive] = {}
        self._by_name: dict[str, Additive] = {}
        self._version: str = "0"
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning("Additive table not found at %s; registry empty.", self._path)
            return
        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)
        self._version = data.get("additives_version", "0")
        for item in data.get("additives", []):
            self.add(Additive.from_dict(item))
        logger.info(
            "Loaded %d additives (%d name keys) from %s",
            len(self._additives), len(self._by_name), self._path,
        )

    def add(self, additive: Additive) -> None:
        self._additives.append(additive)
        self._by_code[additive.code] = additive
        for key in [additive.name] + list(additive.aliases):
            k = _normalize_query(key)
            if k:
                self._by_name[k] = additive

    def get_by_code(self, code: str) -> Optional[Additive]:
        return self._by_code.get(_normalize_query(code))

    def lookup(self, query: str) -> Optional[Additive]:
        """
        Resolve an ingredient token to an additive.
        1) code (INS/E prefix stripped) 2) exact name/alias 3) partial match.
        Partial: alias appears as a whole word inside the query, or the query
        appears inside an alias and covers at least half of it.
        """
        if not query:
            return None
        q = _normalize_query(query)
        if not q:
            return None

        code = _CODE_PREFIX.sub("", q)
        if code in self._by_code:
            return self._by_code[code]

        if q in self._by_name:
            return self._by_name[q]

        # Whole word, or at least half the alias; a bare substring would let "salt" adopt "saltpetre".
        for key, additive in self._by_name.items():
            if _contains_word(q, key):
                logger.debug("ADDITIVE partial match query=%s alias=%s code=%s", q, key, additive.code)
                return additive
            if q in key and len(q) * 2 >= len(key):
                logger.debug("ADDITIVE partial match query=%s alias=%s code=%s", q, key, additive.code)
                return additive
        return None

    def all_additives(self) -> list[Additive]:
        return list(self._additives)

    def get_version(self) -> str:
        return self._version

    def __len__(self) -> int:
        return len(self._additives)


@lru_cache(maxsize=1)
def get_default_registry() -> AdditiveRegistry:
    """Process-wide registry built from the configured table (read-only after load)."""
    return AdditiveRegistry()
