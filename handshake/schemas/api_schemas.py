"""
API Request/Response Schemas using Pydantic.

Structure of HTTP requests and responses for the Handshake API.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from handshake.domain.entities import Profile, SearchResult, SearchStats

# Profile schemas
class ProfileSchema(BaseModel):
    steamid: str = Field(..., description="SteamID64 of the user")
    personaname: str = Field("", description="Display name")
    avatar: str = Field("", description="32px avatar URL")
    avatarmedium: str = Field("", description="64px avatar URL")
    avatarfull: str = Field("", description="184px avatar URL")
    profileurl: str = Field("", description="Steam community profile URL")
    communityvisibilitystate: Optional[int] = Field(None, description="3 when the profile is public")
    personastate: Optional[int] = Field(None, description="Online presence state")

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSchema":
        return cls(**profile.to_dict())

class ProfilesResponse(BaseModel):
    users: List[ProfileSchema] = Field(default_factory=list, description="Profiles that could be resolved")
    count: int = Field(..., description="Number of profiles returned")

# Handshake schemas
class HandshakeRequest(BaseModel):
    source: str = Field(..., min_length=1, description="Source SteamID64, legacy id, profile URL or vanity name")
    target: str = Field(..., min_length=1, description="Target SteamID64, legacy id, profile URL or vanity name")

class SearchStatsSchema(BaseModel):
    search_time_ms: int = Field(0, description="Wall time spent on the search")
    nodes_explored: int = Field(0, description="Friend lists expanded by the BFS")
    cache_hits: int = Field(0, description="1 when the whole result came from cache")
    dropped_ids: int = Field(0, description="Path members left out because their profile was unavailable")

    @classmethod
    def from_stats(cls, stats: SearchStats) -> "SearchStatsSchema":
        return cls(**stats.to_dict())

class HandshakeResponse(BaseModel):
    success: bool = Field(..., description="Whether a chain of friends was found")
    degree: Optional[int] = Field(None, description="Number of hops in the chain")
    path: List[ProfileSchema] = Field(default_factory=list, description="Users from source to target")
    error_message: Optional[str] = Field(None, description="Failure classification")
    error_detail: Optional[str] = Field(None, description="Human readable failure description")
    stats: Optional[SearchStatsSchema] = Field(None, description="Search statistics")
    search_id: str = Field(..., description="Identifier for sharing the result")
    requester_user: Optional[ProfileSchema] = Field(None, description="Resolved source profile")
    target_user: Optional[ProfileSchema] = Field(None, description="Resolved target profile")

    @classmethod
    def from_result(cls, result: SearchResult, search_id: str,
                    requester: Optional[Profile], target: Optional[Profile]) -> "HandshakeResponse":
        return cls(
            success=result.success,
            degree=result.degree,
            path=[ProfileSchema.from_profile(profile) for profile in result.path],
            error_message=result.error_message.value if result.error_message else None,
            error_detail=result.error_detail,
            stats=SearchStatsSchema.from_stats(result.stats) if result.stats else None,
            search_id=search_id,
            requester_user=ProfileSchema.from_profile(requester) if requester else None,
            target_user=ProfileSchema.from_profile(target) if target else None,
        )

# History schemas
class TopTarget(BaseModel):
    steamid: str = Field(..., description="SteamID64 of the searched user")
    search_count: int = Field(..., description="How many searches targeted this user")

class TopTargetsResponse(BaseModel):
    targets: List[TopTarget] = Field(default_factory=list, description="Most searched users, most searched first")

class CleanupResponse(BaseModel):
    success: bool = Field(default=True, description="Whether the cleanup ran")
    deleted_searches: int = Field(..., description="Failed searches older than 30 days removed")
    deleted_old_searches: int = Field(..., description="Searches older than 90 days removed")
    timestamp: str = Field(..., description="ISO timestamp the retention windows were computed from")

class SearchRecord(BaseModel):
    id: str = Field(..., description="Search record ID")
    requester_id: str = Field(..., description="SteamID64 the search started from")
    target_id: str = Field(..., description="SteamID64 that was searched for")
    success: bool = Field(..., description="Whether a chain was found")
    degree: Optional[int] = Field(None, description="Number of hops in the chain")
    path: List[str] = Field(default_factory=list, description="SteamID64s from requester to target")
    error_message: Optional[str] = Field(None, description="Failure classification")
    created_at: datetime = Field(..., description="When the search ran (UTC)")

    model_config = {"from_attributes": True}

class RecentSearchesResponse(BaseModel):
    searches: List[SearchRecord] = Field(default_factory=list, description="Newest first")
