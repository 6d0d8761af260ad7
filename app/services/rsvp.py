import logging
from datetime import date, datetime
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError

from app.core.clock import Clock, utc_now
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.rsvp import UWSRsvp
from app.repositories import Repositories
from app.utils.dates import is_rsvp_window_open, normalize_week_date

logger = logging.getLogger(__name__)


def get_rsvp(
    repos: Repositories,
    participant_id: str,
    week_date: Union[date, datetime]
) -> Optional[UWSRsvp]:
    return repos.rsvps.get(participant_id, normalize_week_date(week_date))


def _update_existing_rsvp(
    repos: Repositories,
    participant_id: str,
    week: date,
    attending: bool,
    now: datetime
) -> UWSRsvp:
    try:
        rsvp = repos.rsvps.get(participant_id, week)
        if rsvp is None:
            raise NotFoundError("RSVP not found")
        rsvp.attending = attending
        rsvp.rsvp_at = now
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    return rsvp


def set_rsvp(
    repos: Repositories,
    participant_id: str,
    week_date: Union[date, datetime],
    attending: bool,
    clock: Clock = utc_now,
    enforce_window: bool = False
) -> UWSRsvp:
    """Upsert the participant's RSVP for one Saturday.

    A second call for the same week updates ``attending`` and ``rsvp_at`` on
    the existing row. Participant self-service passes ``enforce_window`` so
    the Wednesday-night cutoff applies.
    """
    now = clock()
    if enforce_window and not is_rsvp_window_open(now, settings.PROGRAM_TIMEZONE):
        raise ValidationError("The RSVP window for this week is closed")

    week = normalize_week_date(week_date)
    try:
        rsvp = repos.rsvps.get(participant_id, week)
        if rsvp is not None:
            rsvp.attending = attending
            rsvp.rsvp_at = now
        else:
            rsvp = repos.rsvps.add(UWSRsvp(
                participant_id=participant_id,
                week_date=week,
                attending=attending,
                rsvp_at=now,
            ))
        repos.commit()
    except IntegrityError:
        # Another request inserted this week first; update its row instead.
        repos.rollback()
        rsvp = _update_existing_rsvp(repos, participant_id, week, attending, now)
    except Exception:
        repos.rollback()
        raise
    logger.info("RSVP for %s on %s set to %s", participant_id, week.isoformat(), attending)
    return rsvp


def add_rsvp(
    repos: Repositories,
    participant_id: str,
    week_date: Union[date, datetime],
    attending: bool,
    clock: Clock = utc_now
) -> UWSRsvp:
    """Admin entry of an RSVP; the week must not already have one."""
    if repos.participants.get(participant_id) is None:
        raise NotFoundError("Participant not found")
    week = normalize_week_date(week_date)
    try:
        rsvp = repos.rsvps.add(UWSRsvp(
            participant_id=participant_id,
            week_date=week,
            attending=attending,
            rsvp_at=clock(),
        ))
        repos.commit()
    except IntegrityError:
        repos.rollback()
        raise ValidationError("An RSVP already exists for this participant and week")
    except Exception:
        repos.rollback()
        raise
    return rsvp


def delete_rsvp(repos: Repositories, rsvp_id: int) -> None:
    try:
        rsvp = repos.rsvps.get_by_id(rsvp_id)
        if rsvp is None:
            raise NotFoundError("RSVP not found")
        repos.rsvps.delete(rsvp)
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info("RSVP %s deleted", rsvp_id)


def list_rsvps(repos: Repositories, week_date: Optional[Union[date, datetime]] = None) -> List[UWSRsvp]:
    week = normalize_week_date(week_date) if week_date is not None else None
    return repos.rsvps.list(week)
