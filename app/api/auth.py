from fastapi import APIRouter, Depends
from app.core.audit import write_audit_log
from app.core.dependencies import get_token_claims, get_current_user
from app.models.participant import Participant
from app.repositories import Repositories, get_repositories
from app.schemas.participant import ParticipantSync, ParticipantResponse
from app.services.participant import sync_participant

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/sync", response_model=ParticipantResponse)
def sync_profile(
    profile: ParticipantSync,
    claims: dict = Depends(get_token_claims),
    repos: Repositories = Depends(get_repositories)
):
    """Create or refresh the local profile for the signed-in identity."""
    email = claims.get("email") or f"{claims['sub']}@unknown"
    preferred_name = profile.preferred_name or (claims.get("user_metadata") or {}).get("preferred_name")
    participant = sync_participant(
        repos,
        participant_id=claims["sub"],
        email=email,
        preferred_name=preferred_name,
    )
    write_audit_log(
        actor_name=participant.preferred_name or participant.email,
        actor_role=participant.role.value,
        action="Sign in",
        details=f"email={participant.email}",
    )
    return participant


@router.get("/me", response_model=ParticipantResponse)
def get_current_user_info(current_user: Participant = Depends(get_current_user)):
    """Get current participant profile including role."""
    return current_user
