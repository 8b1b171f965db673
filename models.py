"""Pydantic models for Notion pages and per-team challenge sequences."""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ── Collections ───────────────────────────────────────────────────────────────

class Collection(str, Enum):
    TEAMS = "teams"
    CHALLENGES = "challenges"


# ── Notion page / property values ─────────────────────────────────────────────

class RichTextFragment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plain_text: str = ""


class RelationRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str


class PropertyValue(BaseModel):
    """One typed property on a page. Only the kinds the resolver reads are modeled."""

    model_config = ConfigDict(extra="ignore")

    type: str
    title: Optional[List[RichTextFragment]] = None
    rich_text: Optional[List[RichTextFragment]] = None
    number: Optional[float] = None
    relation: Optional[List[RelationRef]] = None

    def first_text(self) -> Optional[str]:
        """Plain text of the first fragment of a title or rich-text value."""
        if self.type == "title":
            fragments = self.title
        elif self.type == "rich_text":
            fragments = self.rich_text
        else:
            return None
        if not fragments:
            return None
        return fragments[0].plain_text

    def number_value(self) -> Optional[float]:
        if self.type != "number":
            return None
        return self.number

    def relation_ids(self) -> List[str]:
        if self.type != "relation" or not self.relation:
            return []
        return [ref.id for ref in self.relation]


class Page(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)

    def title(self) -> Optional[str]:
        """First fragment of the page's title property, whatever it is named."""
        for prop in self.properties.values():
            if prop.type == "title" and prop.title:
                return prop.title[0].plain_text
        return None

    def __repr__(self):
        return f"<Page {self.id}>"


# ── Challenge sequence ────────────────────────────────────────────────────────

class SequenceSlot(BaseModel):
    """Outcome of reading one ``Challenge<N>`` relation.

    A slot is resolved when ``challenge_id`` is set. Otherwise ``error``
    says why the linked challenge yielded nothing.
    """

    position: int
    page_id: str
    challenge_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.challenge_id is not None


class ChallengeSequence:
    """A team's challenge path, ordered by ascending position."""

    def __init__(self, slots=()):
        self.slots: List[SequenceSlot] = sorted(slots, key=lambda s: s.position)

    def items(self) -> Iterator[Tuple[int, str]]:
        for slot in self.slots:
            if slot.resolved:
                yield slot.position, slot.challenge_id

    def as_dict(self) -> Dict[int, str]:
        return dict(self.items())

    def missing(self) -> List[SequenceSlot]:
        return [slot for slot in self.slots if not slot.resolved]

    def get(self, position: int) -> Optional[str]:
        for pos, challenge_id in self.items():
            if pos == position:
                return challenge_id
        return None

    def position_of(self, challenge_id: str) -> Optional[int]:
        """First position holding ``challenge_id``, lowest position wins."""
        for pos, value in self.items():
            if value == challenge_id:
                return pos
        return None

    def __len__(self):
        return sum(1 for _ in self.items())

    def __contains__(self, position):
        return self.get(position) is not None

    def __repr__(self):
        return f"<ChallengeSequence {self.as_dict()}>"
