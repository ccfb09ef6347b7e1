from fastapi import APIRouter, Depends, Query

from handshake.config import settings
from handshake.schemas.api_schemas import ProfileSchema, ProfilesResponse
from handshake.dependencies import get_directory_client
from handshake.services.directory import SteamDirectoryClient
from handshake.domain.errors import ValidationError

router = APIRouter()

@router.get("/profile", response_model=ProfilesResponse)
async def get_profiles(
    ids: str = Query(..., min_length=1, description="Comma separated SteamID64s"),
    directory: SteamDirectoryClient = Depends(get_directory_client),
):
    """
    Look up several Steam profiles at once.
    Unknown ids are left out of the response.
    """
    steam_ids = [steam_id.strip() for steam_id in ids.split(",") if steam_id.strip()]
    if not steam_ids:
        raise ValidationError("At least one Steam ID is required")
    if len(steam_ids) > settings.PROFILE_BATCH_LIMIT:
        raise ValidationError(f"Maximum {settings.PROFILE_BATCH_LIMIT} Steam IDs allowed per request")

    profiles = {profile.steamid: profile for profile in await directory.get_profiles(steam_ids)}
    users = [ProfileSchema.from_profile(profiles[steam_id]) for steam_id in steam_ids if steam_id in profiles]

    return ProfilesResponse(users=users, count=len(users))
