"""
Next-challenge resolution
=========================
A team's path through the event is stored on its Notion page as relation
properties ``Challenge1``, ``Challenge2``, ... each linking one challenge
page. Challenge pages carry a numeric ``id`` (or ``ID``) that players see.

Given a team name and the numeric id of the challenge just completed:

  resolve_team            name -> team page id
  extract_sequence        team page id -> ChallengeSequence
  next_challenge_id       sequence + current id -> next numeric id
  locate_challenge        numeric id -> public challenge URL

Nothing is cached; every call goes back to Notion.
"""

import re
from enum import Enum
from typing import Dict, Optional

from loguru import logger
from pydantic import BaseModel

from models import ChallengeSequence, Collection, Page, SequenceSlot
from notion_store import StoreError

# The title property has no fixed name across databases, so several are tried.
TITLE_PROPERTY_CANDIDATES = ("Name", "Team", "Title", "title")
CHALLENGE_ID_PROPERTIES = ("id", "ID")

# Position assumed when the current challenge is not on the team's path;
# the team is sent to Challenge1.
FALLBACK_START_POSITION = 0

_CHALLENGE_PROPERTY = re.compile(r"^Challenge([0-9]+)$")


class TeamNotFound(Exception):
    pass


def format_challenge_number(value: float) -> str:
    """Render a Notion number as the integer string players see (7.0 -> "7")."""
    return f"{value:.0f}"


def challenge_position(property_name: str) -> Optional[int]:
    match = _CHALLENGE_PROPERTY.match(property_name)
    if not match:
        return None
    position = int(match.group(1))
    return position if position >= 1 else None


def read_challenge_number(page: Page) -> Optional[str]:
    for name in CHALLENGE_ID_PROPERTIES:
        prop = page.properties.get(name)
        if prop is None:
            continue
        number = prop.number_value()
        if number is not None:
            return format_challenge_number(number)
    return None


# ── Team lookup ───────────────────────────────────────────────────────────────

def resolve_team(store, name: str, scan_page_size: int = 100) -> str:
    """Return the page id of the team called ``name``.

    Filtered queries on each candidate title property come first; a query
    against a property the database lacks errors, and that just moves on to
    the next candidate. Failing those, the first ``scan_page_size`` teams are
    scanned for a title or rich-text value equal to ``name`` (exact,
    case-sensitive). A StoreError during that scan propagates.
    """
    for prop in TITLE_PROPERTY_CANDIDATES:
        try:
            results = store.query_by_filter(Collection.TEAMS, prop, name)
        except StoreError as exc:
            logger.debug(f"Team filter on {prop!r} failed: {exc}")
            continue
        if results:
            return results[0].id

    for page in store.query_all(Collection.TEAMS, scan_page_size):
        for prop in page.properties.values():
            if prop.first_text() == name:
                return page.id

    raise TeamNotFound(name)


def list_team_names(store, page_size: int = 100) -> list:
    """Alphabetical titles of the first ``page_size`` teams."""
    names = []
    for page in store.query_all(Collection.TEAMS, page_size):
        title = page.title()
        if title:
            names.append(title)
    return sorted(names)


# ── Sequence ──────────────────────────────────────────────────────────────────

def _resolve_slot(store, position: int, page_id: str) -> SequenceSlot:
    try:
        challenge_page = store.get_by_id(page_id)
    except StoreError as exc:
        logger.warning(f"Challenge{position} ({page_id}) could not be fetched: {exc}")
        return SequenceSlot(position=position, page_id=page_id, error=str(exc))

    number = read_challenge_number(challenge_page)
    if number is None:
        return SequenceSlot(position=position, page_id=page_id, error="challenge page has no numeric id")
    return SequenceSlot(position=position, page_id=page_id, challenge_id=number)


def extract_sequence(store, team_id: str) -> ChallengeSequence:
    """Rebuild the team's challenge path from its ``Challenge<N>`` relations.

    Only the first linked page of each relation counts. When two non-empty
    relations share a position (``Challenge1`` and ``Challenge01``) the name
    sorting first wins. Positions whose challenge cannot be read end up as
    unresolved slots rather than failing the whole sequence. A failure to
    fetch the team page itself propagates.
    """
    team_page = store.get_by_id(team_id)

    slots = []
    seen = set()
    for prop_name, prop in sorted(team_page.properties.items()):
        position = challenge_position(prop_name)
        if position is None or position in seen:
            continue
        linked = prop.relation_ids()
        if not linked:
            continue
        seen.add(position)
        slots.append(_resolve_slot(store, position, linked[0]))

    return ChallengeSequence(slots)


def next_challenge_id(sequence: ChallengeSequence, current_id: str) -> Optional[str]:
    """Numeric id following ``current_id``, or None when the path is exhausted.

    An id that is not on the path counts as FALLBACK_START_POSITION.
    """
    current_pos = sequence.position_of(current_id)
    if current_pos is None:
        current_pos = FALLBACK_START_POSITION
    return sequence.get(current_pos + 1)


# ── Locator ───────────────────────────────────────────────────────────────────

def challenge_url(base_url: str, page_id: str) -> str:
    return base_url + page_id.replace("-", "")


def locate_challenge(store, challenge_number: str, base_url: str) -> Optional[str]:
    """Public URL of the challenge whose numeric id is ``challenge_number``."""
    try:
        value = float(challenge_number)
    except ValueError:
        logger.warning(f"Challenge id {challenge_number!r} is not a number")
        return None

    for prop in CHALLENGE_ID_PROPERTIES:
        try:
            results = store.query_by_filter(Collection.CHALLENGES, prop, value)
        except StoreError as exc:
            logger.debug(f"Challenge filter on {prop!r} failed: {exc}")
            continue
        if results:
            return challenge_url(base_url, results[0].id)
    return None


# ── Full request ──────────────────────────────────────────────────────────────

class Outcome(str, Enum):
    REDIRECT = "redirect"
    FINISHED = "finished"
    TEAM_NOT_FOUND = "team_not_found"
    ERROR = "error"


class Resolution(BaseModel):
    outcome: Outcome
    team_name: str
    team_id: Optional[str] = None
    sequence: Optional[Dict[int, str]] = None
    next_id: Optional[str] = None
    url: Optional[str] = None
    message: Optional[str] = None


def find_next_challenge_url(
    store,
    team_name: str,
    current_id: str,
    base_url: str,
    scan_page_size: int = 100,
) -> Resolution:
    """Run the whole lookup for one form submission."""
    logger.info(f"Looking up team {team_name!r} after challenge {current_id}")

    try:
        team_id = resolve_team(store, team_name, scan_page_size)
    except TeamNotFound:
        logger.info(f"Team not found: {team_name!r}")
        return Resolution(outcome=Outcome.TEAM_NOT_FOUND, team_name=team_name, message="Team not found")
    except StoreError as exc:
        logger.error(f"Team lookup for {team_name!r} failed: {exc}")
        return Resolution(outcome=Outcome.ERROR, team_name=team_name, message=f"Could not look up the team: {exc}")

    logger.info(f"Team page found: {team_id}")

    try:
        sequence = extract_sequence(store, team_id)
    except StoreError as exc:
        logger.error(f"Reading challenges of team {team_id} failed: {exc}")
        return Resolution(
            outcome=Outcome.ERROR,
            team_name=team_name,
            team_id=team_id,
            message=f"Could not load the team's challenges: {exc}",
        )

    logger.info(f"Challenges found: {sequence.as_dict()}")
    for slot in sequence.missing():
        logger.warning(f"Challenge{slot.position} skipped: {slot.error}")

    next_id = next_challenge_id(sequence, current_id)
    url = locate_challenge(store, next_id, base_url) if next_id is not None else None

    if url is None:
        logger.info(f"No further challenge after id {current_id} for {team_name!r}")
        return Resolution(
            outcome=Outcome.FINISHED,
            team_name=team_name,
            team_id=team_id,
            sequence=sequence.as_dict(),
            next_id=next_id,
        )

    logger.info(f"Next challenge URL: {url}")
    return Resolution(
        outcome=Outcome.REDIRECT,
        team_name=team_name,
        team_id=team_id,
        sequence=sequence.as_dict(),
        next_id=next_id,
        url=url,
    )
