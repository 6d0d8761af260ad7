from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.models.participant import Participant, ParticipantRole, ParticipantStatus

from app.core.security import decode_access_token

# Tokens are issued by the hosted auth provider; tokenUrl is only documentation.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


async def get_token_claims(token: str = Depends(oauth2_scheme)) -> dict:
    """Verified JWT claims; ``sub`` is the participant id."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    participant_id = payload.get("sub")
    if not participant_id:
        raise credentials_exception

    return payload


async def get_current_user(
    claims: dict = Depends(get_token_claims),
    db: Session = Depends(get_db)
) -> Participant:
    """Get the signed-in participant's profile."""
    participant = db.query(Participant).filter(Participant.id == claims["sub"]).first()
    if participant is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found; sync the profile first",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return participant


async def get_current_active_user(
    current_user: Participant = Depends(get_current_user)
) -> Participant:
    """Get current participant, rejecting disabled accounts."""
    if current_user.status != ParticipantStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled"
        )
    return current_user


def require_role(role: ParticipantRole):
    """Dependency factory for requiring a specific role."""
    async def role_checker(
        current_user: Participant = Depends(get_current_active_user)
    ) -> Participant:
        if current_user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User does not have required role: {role.value}"
            )
        return current_user
    return role_checker


# Role-specific dependencies
require_admin = require_role(ParticipantRole.ADMIN)
