"""Challenge relay routes (team form and next-challenge redirect)."""

from fastapi import APIRouter, Form, Request
from fastapi.responses import PlainTextResponse
from loguru import logger

from config import CHALLENGE_BASE_URL, TEAM_SCAN_PAGE_SIZE
from deps import get_store, render
from notion_store import StoreError
from resolver import Outcome, find_next_challenge_url, list_team_names

router = APIRouter(tags=["challenges"])


@router.get("/next/{challenge_id}", name="challenges.team_form")
def team_form(request: Request, challenge_id: str):
    store = get_store(request)
    try:
        team_names = list_team_names(store, TEAM_SCAN_PAGE_SIZE)
    except StoreError as exc:
        logger.error(f"Loading team names failed: {exc}")
        return PlainTextResponse(f"Could not load the team list: {exc}", 500)

    if not team_names:
        logger.error("Team database returned no team names")
        return PlainTextResponse("Could not load the team list: no teams found in the database", 500)

    return render("teamform.html", request, challenge_id=challenge_id, teams=team_names)


@router.post("/next/{challenge_id}", name="challenges.next_challenge")
def next_challenge(request: Request, challenge_id: str, team: str = Form("")):
    if not team:
        return PlainTextResponse("Team name required", 400)

    resolution = find_next_challenge_url(
        get_store(request),
        team,
        challenge_id,
        base_url=CHALLENGE_BASE_URL,
        scan_page_size=TEAM_SCAN_PAGE_SIZE,
    )

    if resolution.outcome == Outcome.REDIRECT:
        return render("redirect.html", request, url=resolution.url, team=team)
    if resolution.outcome == Outcome.FINISHED:
        return render("finished.html", request, team=team)
    if resolution.outcome == Outcome.TEAM_NOT_FOUND:
        return render("error.html", request, status_code=404, error=resolution.message)
    return render("error.html", request, status_code=502, error=resolution.message)
