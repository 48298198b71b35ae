"""Pydantic request models for API endpoints."""

from pydantic import BaseModel


class StartCampaignBody(BaseModel):
    setting: str


class UserInputBody(BaseModel):
    text: str


class AutonomousBody(BaseModel):
    enabled: bool


class UpdateCharacter(BaseModel):
    name: str | None = None
    race: str | None = None
    char_class: str | None = None
    age: int | None = None
    persona: str | None = None
    system_message: str | None = None
    visual_description: str | None = None
    hp: int | None = None
    max_hp: int | None = None
    mp: int | None = None
    max_mp: int | None = None
    ac: int | None = None
    level: int | None = None
    xp: int | None = None
    spells: list[str] | None = None
    abilities: list[str] | None = None
