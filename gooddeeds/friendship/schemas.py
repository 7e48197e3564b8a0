from pydantic import BaseModel
from typing import List, Literal
from uuid import UUID

from gooddeeds.profiles.schemas import Profile


# Friend lists
class FriendsResponseModel(BaseModel):
    friends: List[Profile]


class PendingRequestsResponseModel(BaseModel):
    requests: List[Profile]


# Friend search
class FriendsSearchResponseModel(BaseModel):
    users: List[Profile]


# friend request
class FriendRequestModel(BaseModel):
    friend_id: UUID


class FriendRequestDetail(BaseModel):
    user_id: str
    friend_id: str
    status: Literal["pending", "accepted", "blocked"]


class FriendRequestResponseModel(BaseModel):
    message: str
    request: FriendRequestDetail


# accept / reject
class AcceptFriendRequestModel(BaseModel):
    requester_id: UUID


class AcceptFriendRequestResponseModel(BaseModel):
    friendship_accept: bool


class RejectFriendRequestResponseModel(BaseModel):
    request_rejected: bool
