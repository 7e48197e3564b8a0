import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Depends

from gooddeeds.core.dependencies import UserContext, verify_token
from gooddeeds.core.errors import BackendError
from gooddeeds.core.supabase_client import get_supabase
from gooddeeds.profiles.lookup import search_profiles

from .store import FriendshipStore
from .schemas import (
    FriendsResponseModel,
    PendingRequestsResponseModel,
    FriendsSearchResponseModel,
    FriendRequestModel,
    FriendRequestResponseModel,
    AcceptFriendRequestModel,
    AcceptFriendRequestResponseModel,
    RejectFriendRequestResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


async def get_friendship_store() -> FriendshipStore:
    return FriendshipStore(await get_supabase())


@router.get("", response_model=FriendsResponseModel, status_code=200)
async def list_friends(
    user: UserContext = Depends(verify_token),
    store: FriendshipStore = Depends(get_friendship_store),
):
    """
    List the caller's accepted friends, whichever side sent the request.

    **Errors**
    - `401`: Invalid or expired token.
    - `500`: Database error.
    """
    try:
        return {"friends": await store.list_friends(user.user_id)}
    except BackendError:
        raise HTTPException(status_code=500, detail="Failed to load friends.")


@router.get("/requests", response_model=PendingRequestsResponseModel, status_code=200)
async def list_pending_requests(
    user: UserContext = Depends(verify_token),
    store: FriendshipStore = Depends(get_friendship_store),
):
    """List users who sent the caller a friend request that is still pending."""
    try:
        return {"requests": await store.list_pending_requests(user.user_id)}
    except BackendError:
        raise HTTPException(status_code=500, detail="Failed to load friend requests.")


@router.get("/search/{term}", response_model=FriendsSearchResponseModel, status_code=200)
async def search_users(
    term: str,
    user: UserContext = Depends(verify_token),
    store: FriendshipStore = Depends(get_friendship_store),
):
    """
    Search other users by display name (case-insensitive, substring match).

    Returns up to 10 profiles; the caller is never included. A blank search
    term returns an empty list.
    """
    if not term.strip():
        return {"users": []}

    try:
        users = await search_profiles(store.client, term.strip(), exclude_user_id=user.user_id)
    except BackendError:
        raise HTTPException(status_code=500, detail="Server/Database error.")

    return {"users": users}


@router.post("/request", response_model=FriendRequestResponseModel, status_code=201)
async def send_friend_request(
    data: FriendRequestModel,
    user: UserContext = Depends(verify_token),
    store: FriendshipStore = Depends(get_friendship_store),
):
    """
    Send a friend request to another user.

    **Process**
    1. Prevent self friend requests.
    2. Prevent a request when the two users are already linked
       (pending in either direction, accepted, or blocked).
    3. Create a new `pending` row.

    **Errors**
    - `405`: Attempt to send a friend request to yourself.
    - `409`: Duplicate request or already friends.
    - `500`: Database error.
    """
    friend_id = str(data.friend_id)

    if friend_id == user.user_id:
        raise HTTPException(405, detail="Cannot send friend request to yourself.")

    try:
        existing = await store.get_relationship(user.user_id, friend_id)
    except BackendError:
        raise HTTPException(500, detail="Database error while checking friendship.")

    if existing:
        if existing["status"] == "accepted":
            raise HTTPException(409, detail="Already friends with this user.")
        raise HTTPException(
            409,
            detail="Friend request already sent (or already pending from the other user).",
        )

    try:
        created = await store.send_request(user.user_id, friend_id)
    except BackendError:
        raise HTTPException(500, detail="Database error while creating request.")

    return {"message": "Friend request sent.", "request": created}


@router.post(
    "/request/accept", response_model=AcceptFriendRequestResponseModel, status_code=201
)
async def accept_friend_request(
    data: AcceptFriendRequestModel,
    user: UserContext = Depends(verify_token),
    store: FriendshipStore = Depends(get_friendship_store),
):
    """
    Accept a pending friend request sent to the caller.

    The request row becomes `accepted` and the mirrored row is added, so the
    friendship shows up for both users.

    **Errors**
    - `404`: No pending request from that user.
    - `500`: Database error.
    """
    try:
        accepted = await store.accept_request(user.user_id, str(data.requester_id))
    except BackendError:
        raise HTTPException(500, detail="Database error while updating friendship.")

    if not accepted:
        raise HTTPException(404, detail="No pending friend request found.")

    return {"friendship_accept": True}


@router.delete(
    "/request/{requester_id}",
    response_model=RejectFriendRequestResponseModel,
    status_code=200,
)
async def reject_friend_request(
    requester_id: UUID,
    user: UserContext = Depends(verify_token),
    store: FriendshipStore = Depends(get_friendship_store),
):
    """
    Reject (delete) a pending friend request sent to the caller by `requester_id`.

    **Errors**
    - `404`: No pending request from that user.
    - `500`: Database error.
    """
    try:
        rejected = await store.reject_request(user.user_id, str(requester_id))
    except BackendError:
        raise HTTPException(500, detail="Database error while rejecting request.")

    if not rejected:
        raise HTTPException(status_code=404, detail="No pending friend request found.")

    return {"request_rejected": True}
