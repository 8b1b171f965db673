"""Test configuration and fixtures for the challenge relay."""

import pytest

from tests.notion_fixtures import FakeStore, make_page, number_prop, relation_prop, title_prop


# ── Fixtures ─────────────────────────────────────────────────────────────────

@pytest.fixture
def rockets_store():
    """Team "Rockets" with a three-challenge path (ids 1, 2, 3)."""
    challenges = [
        make_page("c1c1c1c1-0000-0000-0000-000000000001", Name=title_prop("Bridge"), id=number_prop(1.0)),
        make_page("c2c2c2c2-0000-0000-0000-000000000002", Name=title_prop("Fountain"), id=number_prop(2.0)),
        make_page("c3c3c3c3-0000-0000-0000-000000000003", Name=title_prop("Tower"), id=number_prop(3.0)),
    ]
    teams = [
        make_page(
            "team-rockets",
            Name=title_prop("Rockets"),
            Challenge1=relation_prop(challenges[0].id),
            Challenge2=relation_prop(challenges[1].id),
            Challenge3=relation_prop(challenges[2].id),
        ),
        make_page(
            "team-comets",
            Name=title_prop("Comets"),
            Challenge1=relation_prop(challenges[2].id),
            Challenge2=relation_prop(challenges[0].id),
        ),
    ]
    return FakeStore(teams=teams, challenges=challenges)
