import logging
from typing import List, Optional

from app.core.exceptions import NotFoundError
from app.models.participant import Participant, ParticipantRole, ParticipantStatus
from app.repositories import Repositories

logger = logging.getLogger(__name__)


def sync_participant(
    repos: Repositories,
    participant_id: str,
    email: str,
    preferred_name: Optional[str] = None,
    role: Optional[ParticipantRole] = None
) -> Participant:
    """Create or update the local profile for an identity-provider subject.

    New profiles start active with the participant role. Existing profiles
    keep their role and status; only contact details are refreshed.
    """
    try:
        participant = repos.participants.get(participant_id)
        if participant is None:
            participant = repos.participants.add(Participant(
                id=participant_id,
                email=email,
                preferred_name=(preferred_name or email.split("@")[0]).strip(),
                role=role or ParticipantRole.PARTICIPANT,
                status=ParticipantStatus.ACTIVE,
            ))
            logger.info("Created participant profile %s (%s)", participant_id, email)
        else:
            participant.email = email
            if preferred_name:
                participant.preferred_name = preferred_name.strip()
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    return participant


def get_participant(repos: Repositories, participant_id: str) -> Participant:
    participant = repos.participants.get(participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    return participant


def list_active_participants(repos: Repositories) -> List[Participant]:
    return repos.participants.list_active()


def set_participant_status(
    repos: Repositories,
    participant_id: str,
    status: ParticipantStatus,
    changed_by: str
) -> Participant:
    """Enable or disable a participant account."""
    try:
        participant = get_participant(repos, participant_id)
        old_status = participant.status
        participant.status = status
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info(
        "Participant %s status %s -> %s by %s",
        participant_id, old_status.value, status.value, changed_by
    )
    return participant


def update_participant_notes(
    repos: Repositories,
    participant_id: str,
    notes: Optional[str]
) -> Participant:
    try:
        participant = get_participant(repos, participant_id)
        participant.notes = notes.strip() if notes else None
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    return participant
