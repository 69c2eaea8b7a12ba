"""Schemas for stored conversations (GET /agent/history/{conversation_id})."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class Conversation(BaseModel):
    """History of one conversation. Messages are only ever appended."""

    id: str
    messages: list[Message] = Field(default_factory=list)
    start_time: datetime

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "3f9c1a2e-1b7d-4c55-9a0e-2f4d8a6b1c11",
                    "messages": [
                        {"role": "user", "content": "What are the KYC requirements?", "timestamp": "2026-01-05T10:00:00Z"},
                        {"role": "assistant", "content": "Merchants must provide ...", "timestamp": "2026-01-05T10:00:00Z"},
                    ],
                    "start_time": "2026-01-05T10:00:00Z",
                }
            ]
        }
    }
