from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from typing import List, Literal, Optional


# Rows
class Room(BaseModel):
    id: str
    type: Literal["direct", "group"] = "direct"
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    pair_key: Optional[str] = None


class Message(BaseModel):
    id: str
    room_id: str
    sender_id: str
    content: str
    created_at: datetime
    sender_name: Optional[str] = None


# View state
class ActiveChat(BaseModel):
    room_id: str
    friend_id: str
    name: str


# Start chat
class StartChatModel(BaseModel):
    friend_id: UUID


class StartChatResponseModel(BaseModel):
    room_id: str
    name: str


# Send message
class SendMessageModel(BaseModel):
    content: str = Field(max_length=4000)


# Get messages
class GetMessagesResponseModel(BaseModel):
    messages: List[Message]
