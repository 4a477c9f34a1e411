"""Transaction helpers and the persistence seam for challenge participants."""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from scout_backend.errors import NotFoundError, translate_integrity_error
from scout_backend.models import ChallengeParticipant, ParticipantStatus, ProgressLog

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session, conflict_message="Resource already exists",
                 missing_message="Referenced resource not found"):
    """Commit everything done inside the block, or nothing.

    Constraint violations are rolled back and re-raised as Conflict/NotFound
    errors; any other exception rolls back and propagates unchanged.
    """
    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Constraint violation rolled back: %s", exc.orig)
        raise translate_integrity_error(exc, conflict_message, missing_message) from exc
    except Exception:
        session.rollback()
        raise


@dataclass
class ProgressChange:
    """What one progress update writes: the new progress, the completion time
    when the update completes the challenge, and the log row to append."""
    progress: float
    completed_at: Optional[datetime]
    log: ProgressLog


class ParticipantStore:
    def __init__(self, session):
        self.session = session

    def get(self, participant_id, for_update=False):
        query = self.session.query(ChallengeParticipant).filter(
            ChallengeParticipant.id == participant_id
        )
        if for_update:
            query = query.with_for_update()
        return query.one_or_none()

    def get_or_404(self, participant_id, for_update=False):
        participant = self.get(participant_id, for_update=for_update)
        if participant is None:
            raise NotFoundError("Participant not found")
        return participant

    def find(self, challenge_id, user_id):
        return (
            self.session.query(ChallengeParticipant)
            .filter_by(challenge_id=challenge_id, user_id=user_id)
            .one_or_none()
        )

    def record_progress_atomically(
        self,
        participant_id: int,
        plan: Callable[[ChallengeParticipant], ProgressChange],
    ):
        """Lock the participant row, let ``plan`` decide the change, then write
        the participant update and its log row in a single transaction.

        ``plan`` may raise to abort; nothing is written in that case. Holding
        the row lock for the whole read-modify-write keeps concurrent updates
        to the same participant from overwriting each other.
        """
        with unit_of_work(self.session):
            participant = self.get_or_404(participant_id, for_update=True)
            change = plan(participant)

            participant.progress = change.progress
            if change.completed_at is not None:
                participant.status = ParticipantStatus.COMPLETED
                participant.completed_at = change.completed_at

            change.log.participant = participant
            self.session.add(change.log)
        return participant, change.log
