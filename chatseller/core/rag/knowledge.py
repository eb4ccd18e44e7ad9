"""
Static beauty knowledge: ingredients, skin problems, hair types and hair problems.
Loaded once per process from the JSON files in chatseller/data/knowledge.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from chatseller.config import settings

logger = logging.getLogger(__name__)


# Block headers by knowledge family
FAMILY_HEADERS = {
    "african": "🌍 INGRÉDIENT AFRICAIN",
    "cosmetic": "💄 INGRÉDIENT COSMÉTIQUE",
    "problem": "🎯 PROBLÉMATIQUE",
    "hair_problem": "💇 PROBLÉMATIQUE CAPILLAIRE",
    "hair_type": "💇 TYPE DE CHEVEUX",
}

# Families are matched in this order
FAMILY_ORDER = ["african", "cosmetic", "problem", "hair_problem", "hair_type"]

# Words that make a message about hair
HAIR_TRIGGERS = [
    "cheveux", "cheveu", "capillaire", "4a", "4b", "4c", "crépu", "frisé",
    "tresse", "chute", "casse", "cassant", "alopécie", "perte",
]

# Aliases this short are matched as whole words only ("ah" must not hit "cachet")
SHORT_ALIAS_LENGTH = 3


@dataclass(frozen=True)
class KnowledgeEntry:
    """One curated fact sheet."""
    key: str
    category: str                      # ingredient, problem, hairType
    family: str
    display_names: tuple[str, ...]
    aliases: tuple[str, ...]
    properties: dict = field(default_factory=dict, hash=False, compare=False)
    contraindications: str = ""
    recommended_for: tuple[str, ...] = ()
    hair_only: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "KnowledgeEntry":
        """Build an entry from its JSON form."""
        display_names = tuple(data.get("display_names") or [data["key"]])
        aliases = data.get("aliases") or [data["key"].replace("_", " "), display_names[0]]
        return cls(
            key=data["key"],
            category=data["category"],
            family=data.get("family", data["category"]),
            display_names=display_names,
            aliases=tuple(alias.lower() for alias in aliases),
            properties={k: list(v) for k, v in (data.get("properties") or {}).items()},
            contraindications=data.get("contraindications", ""),
            recommended_for=tuple(data.get("recommended_for") or []),
            hair_only=bool(data.get("hair_only", False)),
        )

    def matches(self, message_lower: str) -> bool:
        """Check if any alias appears in the lowercased message."""
        return any(_contains(message_lower, alias) for alias in self.aliases)

    def format(self) -> str:
        """Format the entry as a context block."""
        header = FAMILY_HEADERS.get(self.family, "📌 INFORMATION")
        lines = [f"{header} : {self.display_names[0]}"]

        if len(self.display_names) > 1:
            lines.append(f"Autres noms : {', '.join(self.display_names[1:])}")

        for label, values in self.properties.items():
            if not values:
                continue
            if len(values) == 1:
                lines.append(f"{label} : {values[0]}")
            else:
                lines.append(f"{label} :")
                lines.extend(f"  • {value}" for value in values)

        if self.contraindications:
            lines.append(f"Contre-indications : {self.contraindications}")
        if self.recommended_for:
            lines.append(f"Recommandé pour : {', '.join(self.recommended_for)}")

        return "\n".join(lines)


def _contains(message_lower: str, alias: str) -> bool:
    if len(alias) <= SHORT_ALIAS_LENGTH:
        return re.search(rf"(?<!\w){re.escape(alias)}(?!\w)", message_lower) is not None
    return alias in message_lower


def is_hair_related(message_lower: str) -> bool:
    """Check if the message talks about hair."""
    return any(_contains(message_lower, trigger) for trigger in HAIR_TRIGGERS)


class KnowledgeBase:
    """Immutable set of knowledge entries with alias matching."""

    def __init__(self, entries: list[KnowledgeEntry]):
        rank = {family: i for i, family in enumerate(FAMILY_ORDER)}
        # Stable sort keeps the file order inside a family
        self.entries = tuple(
            sorted(entries, key=lambda e: rank.get(e.family, len(FAMILY_ORDER)))
        )

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, message: str) -> list[KnowledgeEntry]:
        """
        Find every entry whose aliases appear in the message.

        Hair entries only match when the message is about hair.
        """
        message_lower = message.lower()
        hair = is_hair_related(message_lower)
        return [
            entry for entry in self.entries
            if (hair or not entry.hair_only) and entry.matches(message_lower)
        ]

    @classmethod
    def from_directory(cls, directory: Path) -> "KnowledgeBase":
        """Load every *.json file of a directory, in file name order."""
        entries: list[KnowledgeEntry] = []
        for path in sorted(directory.glob("*.json")):
            with path.open(encoding="utf-8") as f:
                raw = json.load(f)
            entries.extend(KnowledgeEntry.from_dict(item) for item in raw)
            logger.debug(f"Loaded {len(raw)} knowledge entries from {path.name}")

        logger.info(f"Knowledge base loaded: {len(entries)} entries from {directory}")
        return cls(entries)


@lru_cache(maxsize=1)
def get_knowledge_base(directory: Optional[Path] = None) -> KnowledgeBase:
    """Get cached knowledge base."""
    return KnowledgeBase.from_directory(directory or settings.knowledge_dir)
