from fastapi import APIRouter, Depends

from handshake.schemas.api_schemas import HandshakeRequest, HandshakeResponse
from handshake.dependencies import get_search_service
from handshake.application.search_service import HandshakeSearchService

router = APIRouter()

@router.post("/handshake", response_model=HandshakeResponse)
async def find_handshake(
    request: HandshakeRequest,
    search_svc: HandshakeSearchService = Depends(get_search_service),
):
    """
    Find the shortest chain of Steam friends between two users.

    Both sides accept a SteamID64, a STEAM_X:Y:Z or [U:1:Z] id, a community
    profile URL, or a vanity name. Failed searches are still a 200 with
    success=false and a classification in error_message.
    """
    outcome = await search_svc.search(request.source, request.target)

    return HandshakeResponse.from_result(
        outcome.result,
        search_id=outcome.search_id,
        requester=outcome.requester_user,
        target=outcome.target_user,
    )
