"""Session endpoints: lifecycle commands and read-only observers."""

from fastapi import APIRouter, HTTPException, Request

from overseer.controller import TurnController

from .models import AutonomousBody, StartCampaignBody, UpdateCharacter, UserInputBody

router = APIRouter(prefix="/session")


def _controller(request: Request) -> TurnController:
    return request.app.state.controller


@router.get("")
async def get_session(request: Request):
    """Current phase, busy flag, mode, setting and scene."""
    return _controller(request).status()


@router.get("/chronicle")
async def get_chronicle(request: Request):
    """The full chronicle, oldest first."""
    return [m.model_dump(mode="json") for m in _controller(request).chronicle]


@router.get("/characters")
async def get_characters(request: Request):
    """The party roster with current stats and memories."""
    return _controller(request).roster()


@router.patch("/characters/{character_id}")
async def update_character(character_id: str, body: UpdateCharacter, request: Request):
    """Edit a party member (only before the campaign starts)."""
    controller = _controller(request)
    if controller.started:
        raise HTTPException(409, "Campaign already started")
    try:
        controller.configure_character(character_id, **body.model_dump(exclude_none=True))
    except KeyError:
        raise HTTPException(404, "Character not found")
    except ValueError as e:
        raise HTTPException(400, str(e))
    return controller.view.characters[character_id].model_dump(mode="json")


@router.get("/world")
async def get_world(request: Request):
    """Inventory, gold, almanac, combat and shared memories."""
    return _controller(request).world.model_dump(mode="json")


@router.post("/start")
async def start_campaign(body: StartCampaignBody, request: Request):
    """Start the campaign and return the director's introduction."""
    controller = _controller(request)
    if controller.started:
        raise HTTPException(409, "Campaign already started")
    try:
        intro = await controller.start_campaign(body.setting)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return intro.model_dump(mode="json")


@router.post("/input")
async def submit_input(body: UserInputBody, request: Request):
    """Queue user text; in manual mode this also runs a cycle."""
    controller = _controller(request)
    if not controller.started:
        raise HTTPException(409, "Campaign not started")
    if not await controller.submit_user_input(body.text):
        raise HTTPException(400, "Input must not be empty")
    return controller.status()


@router.post("/advance")
async def advance(request: Request):
    """Run one cycle (manual mode). 409 if a cycle is already running."""
    controller = _controller(request)
    if not controller.started:
        raise HTTPException(409, "Campaign not started")
    if not await controller.advance():
        raise HTTPException(409, "A cycle is already running")
    return controller.status()


@router.put("/autonomous")
async def set_autonomous(body: AutonomousBody, request: Request):
    """Toggle autonomous mode."""
    controller = _controller(request)
    controller.set_autonomous_mode(body.enabled)
    return controller.status()


@router.post("/summary")
async def summarize(request: Request):
    """Condense the recent chronicle into prose."""
    return {"summary": await _controller(request).summarize()}
