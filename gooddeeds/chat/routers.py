import logging
from typing import Optional
from uuid import UUID

import jwt
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
)

from gooddeeds.core.dependencies import UserContext, decode_token, verify_token
from gooddeeds.core.errors import BackendError
from gooddeeds.core.supabase_client import get_supabase
from gooddeeds.friendship.routers import get_friendship_store
from gooddeeds.friendship.store import FriendshipStore
from gooddeeds.profiles.schemas import ANONYMOUS

from .backend import ChatBackend, SupabaseChatBackend
from .messages import MessageStore
from .resolver import RoomResolver
from .session import ChatSession
from .schemas import (
    GetMessagesResponseModel,
    Message,
    SendMessageModel,
    StartChatModel,
    StartChatResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()

WS_POLICY_VIOLATION = 4003


async def get_chat_backend() -> ChatBackend:
    return SupabaseChatBackend(await get_supabase())


async def require_participant(backend: ChatBackend, room_id: str, user_id: str):
    try:
        is_member = await backend.is_participant(room_id, user_id)
    except BackendError:
        raise HTTPException(status_code=500, detail="Failed to check room membership.")

    if not is_member:
        raise HTTPException(status_code=403, detail="You are not a participant in this room.")


@router.post(
    "/rooms/direct",
    response_model=StartChatResponseModel,
    status_code=200,
)
async def start_direct_chat(
    data: StartChatModel,
    user: UserContext = Depends(verify_token),
    backend: ChatBackend = Depends(get_chat_backend),
    friendships: FriendshipStore = Depends(get_friendship_store),
):
    """
    Get or create the direct room between the caller and a friend.

    Used when a friend is picked in the chat sidebar. If both users already
    share a direct room it is returned, otherwise one is created with both
    users as participants.

    **Input**
    - `friend_id`: id of the friend to chat with

    **Returns**
    - `room_id`: the direct room
    - `name`: the friend's display name

    **Errors**
    - 400: Chat with yourself
    - 401: Unauthorized
    - 403: Users are not friends
    - 500: Backend error
    """
    friend_id = str(data.friend_id)

    if friend_id == user.user_id:
        raise HTTPException(status_code=400, detail="Cannot start a chat with yourself.")

    try:
        relationship = await friendships.get_relationship(user.user_id, friend_id)
    except BackendError:
        raise HTTPException(status_code=500, detail="Failed to start chat.")

    if not relationship or relationship["status"] != "accepted":
        raise HTTPException(
            status_code=403,
            detail="You can only message users you are friends with.",
        )

    try:
        room_id = await RoomResolver(backend).resolve(user.user_id, friend_id)
        profiles = await backend.get_profiles([friend_id])
    except BackendError as e:
        logger.error(f"start_chat_failed user_id={user.user_id} friend_id={friend_id} error={e}")
        raise HTTPException(status_code=500, detail="Failed to start chat.")

    friend = profiles.get(friend_id)
    return {"room_id": room_id, "name": friend.full_name if friend else ANONYMOUS}


@router.get(
    "/rooms/{room_id}/messages",
    response_model=GetMessagesResponseModel,
    status_code=200,
)
async def get_messages(
    room_id: UUID,
    user: UserContext = Depends(verify_token),
    backend: ChatBackend = Depends(get_chat_backend),
):
    """
    Retrieve all messages of a room, oldest first, each with `sender_name`.

    **Errors**
    - 401: Invalid or expired token
    - 403: Caller is not a participant of the room
    - 500: Backend error
    """
    room_id = str(room_id)
    await require_participant(backend, room_id, user.user_id)

    try:
        messages = await MessageStore(backend).fetch_messages(room_id)
    except BackendError:
        raise HTTPException(status_code=500, detail="Failed to retrieve messages.")

    return {"messages": messages}


@router.post(
    "/rooms/{room_id}/messages",
    response_model=Optional[Message],
    status_code=201,
)
async def send_message(
    room_id: UUID,
    data: SendMessageModel,
    user: UserContext = Depends(verify_token),
    backend: ChatBackend = Depends(get_chat_backend),
):
    """
    Send a message to a room the caller participates in.

    The content is trimmed; blank content is accepted and ignored (204).
    Viewers attached over the websocket receive the refreshed list.

    **Errors**
    - 401: Unauthorized
    - 403: Caller is not a participant of the room
    - 500: Backend error
    """
    room_id = str(room_id)
    await require_participant(backend, room_id, user.user_id)

    try:
        message = await MessageStore(backend).send_message(room_id, user.user_id, data.content)
    except BackendError:
        raise HTTPException(status_code=500, detail="Failed to send message.")

    if message is None:
        return Response(status_code=204)

    return message


@router.websocket("/ws/{room_id}")
async def room_websocket(
    websocket: WebSocket,
    room_id: UUID,
    token: Optional[str] = Query(None),
    backend: ChatBackend = Depends(get_chat_backend),
):
    """
    Live view of a room.

    On connect the full message list is pushed as
    `{"type": "messages", "data": [...]}`, and pushed again after every new
    message in the room. Clients may send `{"type": "send", "content": "..."}`.
    Closes with 4003 when the token is invalid or the user is not a participant.
    """
    room_id = str(room_id)

    try:
        user = decode_token(token or "")
    except jwt.InvalidTokenError as e:
        logger.warning(f"ws_auth_failed room_id={room_id} error={e}")
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    try:
        allowed = await backend.is_participant(room_id, user.user_id)
    except BackendError:
        allowed = False

    if not allowed:
        logger.warning(f"ws_not_participant room_id={room_id} user_id={user.user_id}")
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    await websocket.accept()

    async def push(messages):
        await websocket.send_json(
            {"type": "messages", "data": [m.model_dump(mode="json") for m in messages]}
        )

    async with ChatSession(user, backend, on_messages=push) as session:
        await session.open_room(room_id)
        logger.info(f"ws_connected room_id={room_id} user_id={user.user_id}")
        if session.notice:
            await websocket.send_json({"type": "error", "detail": session.notice})

        try:
            while True:
                try:
                    data = await websocket.receive_json()
                except ValueError:
                    logger.warning(f"ws_bad_frame room_id={room_id} user_id={user.user_id}")
                    await websocket.send_json({"type": "error", "detail": "Invalid message."})
                    continue

                if not isinstance(data, dict) or data.get("type") != "send":
                    continue

                content = str(data.get("content") or "")
                if not content.strip():
                    continue

                message = await session.send_message(content)
                if message is None and session.notice:
                    await websocket.send_json({"type": "error", "detail": session.notice})

        except WebSocketDisconnect:
            logger.info(f"ws_disconnected room_id={room_id} user_id={user.user_id}")
