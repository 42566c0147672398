"""
Gemini assistant routes: chat, trip planning, recommendations and
place descriptions. All require a signed-in user.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.deps import get_current_user
from db import SessionLocal
from domain.models import User
from services.ai_assistant import AIAssistant

router = APIRouter()
assistant = AIAssistant()


class ChatTurn(BaseModel):
    role: str
    text: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    conversationHistory: List[ChatTurn] = Field(default_factory=list)


class TripPlanRequest(BaseModel):
    destination: Optional[str] = None
    days: int = Field(default=3, ge=1, le=30)
    budget: Optional[str] = None
    preferences: List[str] = Field(default_factory=list)


class DescriptionRequest(BaseModel):
    placeName: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None


@router.post("/chat")
def chat(payload: ChatRequest, user: User = Depends(get_current_user)):
    history = [turn.model_dump() for turn in payload.conversationHistory]
    with SessionLocal() as session:
        return assistant.chat(session, user.id, payload.message or "", history)


@router.post("/trip-planner")
def trip_planner(payload: TripPlanRequest, user: User = Depends(get_current_user)):
    with SessionLocal() as session:
        return assistant.trip_plan(
            session,
            user.id,
            payload.destination or "",
            days=payload.days,
            budget=payload.budget,
            preferences=payload.preferences,
        )


@router.post("/recommendations")
def recommendations(user: User = Depends(get_current_user)):
    with SessionLocal() as session:
        return assistant.recommendations(session, user.id)


@router.post("/generate-description")
def generate_description(payload: DescriptionRequest, user: User = Depends(get_current_user)):
    return assistant.generate_description(payload.placeName, payload.location, payload.category)
