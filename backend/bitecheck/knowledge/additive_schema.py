"""
Strict contract for a known food additive.
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Additive:
    code: str  # INS number without prefix, e.g. "211", "150a"
    name: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    # 0 = good, 1 = neutral, 2 = concerning, 3 = harmful
    risk: int = 1
    category: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "aliases": list(self.aliases),
            "risk": self.risk,
            "category": self.category,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Additive":
        risk = int(d.get("risk", 1))
        if risk not in (0, 1, 2, 3):
            raise ValueError(f"additive {d.get('code')} has invalid risk {risk}")
        return cls(
            code=str(d["code"]).strip().lower(),
            name=d["name"],
            aliases=tuple(d.get("aliases", []) or []),
            risk=risk,
            category=d.get("category", "") or "",
            description=d.get("description", "") or "",
        )
