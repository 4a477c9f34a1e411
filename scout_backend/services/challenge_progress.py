"""Challenge participation and progress tracking.

``ChallengeProgressEngine`` owns the participant lifecycle (join, progress
updates, completion, status changes), the append-only progress log, and the
derived views built on top of it (completed list, leaderboard, per-user
overview, challenge statistics). It works against the session it is given;
callers decide which session that is.
"""
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from scout_backend.errors import ConflictError, NotFoundError, ValidationError
from scout_backend.models import (
    Challenge, ChallengeParticipant, ParticipantStatus, ProgressLog, User
)
from scout_backend.services.store import ParticipantStore, ProgressChange, unit_of_work
from scout_backend.utils.formatting import days_between, format_percentage, round_average

logger = logging.getLogger(__name__)

COMPLETED_MESSAGE = "Congratulations! Challenge completed!"
UPDATED_MESSAGE = "Progress updated"
ALREADY_JOINED_MESSAGE = "User already joined this challenge."


@dataclass
class ProgressUpdate:
    participant: ChallengeParticipant
    log: ProgressLog
    recent_logs: List[ProgressLog]
    completed: bool

    @property
    def message(self):
        return COMPLETED_MESSAGE if self.completed else UPDATED_MESSAGE


@dataclass
class ProgressSummary:
    current_progress: float
    target_progress: float
    remaining: float
    status: ParticipantStatus
    total_logs: int
    joined_at: datetime
    completed_at: Optional[datetime]


@dataclass
class ParticipantProgress:
    participant: ChallengeParticipant
    logs: List[ProgressLog]
    summary: ProgressSummary


@dataclass
class CompletedEntry:
    rank: int
    participant_id: int
    user: User
    progress: float
    joined_at: datetime
    completed_at: Optional[datetime]
    time_to_complete: Optional[int]


@dataclass
class LeaderboardEntry:
    rank: int
    participant_id: int
    user: User
    progress: float
    status: ParticipantStatus
    completed_at: Optional[datetime]
    total_activities: int


@dataclass
class UserChallengeEntry:
    participant_id: int
    challenge: Challenge
    progress: float
    status: ParticipantStatus
    joined_at: datetime
    completed_at: Optional[datetime]
    total_activities: int


@dataclass
class UserProgressStats:
    total: int = 0
    completed: int = 0
    active: int = 0
    dropped: int = 0
    paused: int = 0
    average_progress: float = 0


@dataclass
class UserProgress:
    user_id: int
    stats: UserProgressStats
    challenges: List[UserChallengeEntry] = field(default_factory=list)


@dataclass
class FastestCompletion:
    user_id: int
    participant_id: int
    days: int


@dataclass
class ChallengeStatistics:
    total_participants: int
    completed_count: int
    completion_rate: str
    average_progress: float
    status_breakdown: Dict[str, int]
    fastest_completion: Optional[FastestCompletion]


def parse_status(value: Any) -> ParticipantStatus:
    """Resolve ``value`` to a ParticipantStatus or raise a ValidationError
    naming the allowed values."""
    if isinstance(value, ParticipantStatus):
        return value
    if isinstance(value, str) and value in ParticipantStatus.values():
        return ParticipantStatus(value)
    raise ValidationError(
        f"Invalid status. Must be one of: {', '.join(ParticipantStatus.values())}"
    )


class ChallengeProgressEngine:
    def __init__(self, session, clock=datetime.utcnow, progress_cap=100.0,
                 default_target=100.0, leaderboard_limit=10, recent_logs_limit=5):
        self.session = session
        self.store = ParticipantStore(session)
        self.clock = clock
        self.progress_cap = progress_cap
        self.default_target = default_target
        self.leaderboard_limit = leaderboard_limit
        self.recent_logs_limit = recent_logs_limit

    # ------------------------------------------------------------------
    # Participant lifecycle
    # ------------------------------------------------------------------

    def join_challenge(self, challenge_id, user_id):
        if challenge_id is None or user_id is None:
            raise ValidationError("challengeId and userId are required")

        challenge = self.session.get(Challenge, challenge_id)
        if challenge is None:
            raise NotFoundError("Challenge not found")
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if self.store.find(challenge_id, user_id) is not None:
            raise ConflictError(ALREADY_JOINED_MESSAGE)

        participant = ChallengeParticipant(
            challenge=challenge,
            user=user,
            progress=0.0,
            status=ParticipantStatus.ACTIVE,
            joined_at=self.clock(),
        )
        with unit_of_work(self.session, conflict_message=ALREADY_JOINED_MESSAGE,
                          missing_message="User or Challenge not found"):
            self.session.add(participant)

        logger.info("User %s joined challenge %s as participant %s", user_id, challenge_id, participant.id)
        return participant

    def record_progress(self, participant_id, progress_delta, description, task_id=None):
        delta = self._coerce_delta(progress_delta)
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("progressDelta and description are required")
        description = description.strip()

        def plan(participant):
            if participant.is_completed:
                raise ConflictError("Challenge already completed")

            now = self.clock()
            new_progress = max(0.0, min(participant.progress + delta, self.progress_cap))
            target = participant.challenge.target_progress or self.default_target
            return ProgressChange(
                progress=new_progress,
                completed_at=now if new_progress >= target else None,
                log=ProgressLog(
                    task_id=task_id,
                    description=description,
                    progress_delta=delta,
                    created_at=now,
                ),
            )

        participant, log = self.store.record_progress_atomically(participant_id, plan)
        completed = participant.is_completed
        if completed:
            logger.info("Participant %s completed challenge %s", participant.id, participant.challenge_id)
        else:
            logger.debug("Participant %s progress now %s", participant.id, participant.progress)

        return ProgressUpdate(
            participant=participant,
            log=log,
            recent_logs=participant.recent_logs(self.recent_logs_limit),
            completed=completed,
        )

    def update_status(self, participant_id, status):
        new_status = parse_status(status)

        with unit_of_work(self.session):
            participant = self.store.get_or_404(participant_id, for_update=True)
            # completedAt tracks the COMPLETED status in both directions
            if new_status == ParticipantStatus.COMPLETED:
                if participant.completed_at is None:
                    participant.completed_at = self.clock()
            else:
                participant.completed_at = None
            previous = participant.status
            participant.status = new_status

        logger.info("Participant %s status %s -> %s", participant_id, previous.value, new_status.value)
        return participant

    # ------------------------------------------------------------------
    # Participant administration
    # ------------------------------------------------------------------

    def get_participant(self, participant_id):
        return self.store.get_or_404(participant_id)

    def list_participants(self):
        return (
            self.session.query(ChallengeParticipant)
            .options(selectinload(ChallengeParticipant.user), selectinload(ChallengeParticipant.challenge))
            .order_by(ChallengeParticipant.id)
            .all()
        )

    def participants_for_challenge(self, challenge_id):
        return (
            self.session.query(ChallengeParticipant)
            .options(selectinload(ChallengeParticipant.user))
            .filter(ChallengeParticipant.challenge_id == challenge_id)
            .order_by(ChallengeParticipant.id)
            .all()
        )

    def participations_for_user(self, user_id):
        return (
            self.session.query(ChallengeParticipant)
            .options(selectinload(ChallengeParticipant.challenge))
            .filter(ChallengeParticipant.user_id == user_id)
            .order_by(ChallengeParticipant.id)
            .all()
        )

    def update_participant(self, participant_id, challenge_id=None, user_id=None):
        participant = self.store.get_or_404(participant_id)
        if challenge_id is not None and self.session.get(Challenge, challenge_id) is None:
            raise NotFoundError("Challenge not found")
        if user_id is not None and self.session.get(User, user_id) is None:
            raise NotFoundError("User not found")

        target_challenge = challenge_id if challenge_id is not None else participant.challenge_id
        target_user = user_id if user_id is not None else participant.user_id
        existing = self.store.find(target_challenge, target_user)
        if existing is not None and existing.id != participant.id:
            raise ConflictError("This user is already registered for the challenge.")

        with unit_of_work(self.session, conflict_message="This user is already registered for the challenge."):
            participant.challenge_id = target_challenge
            participant.user_id = target_user
        return participant

    def remove_participant(self, participant_id):
        participant = self.store.get_or_404(participant_id)
        with unit_of_work(self.session):
            self.session.delete(participant)
        logger.info("Participant %s removed", participant_id)

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------

    def get_participant_progress(self, participant_id):
        participant = self.store.get_or_404(participant_id)
        logs = participant.progress_logs.all()
        target = participant.challenge.target_progress or self.default_target
        summary = ProgressSummary(
            current_progress=participant.progress,
            target_progress=target,
            remaining=max(0.0, target - participant.progress),
            status=participant.status,
            total_logs=len(logs),
            joined_at=participant.joined_at,
            completed_at=participant.completed_at,
        )
        return ParticipantProgress(participant=participant, logs=logs, summary=summary)

    def list_completed(self, challenge_id, sort_by="completedAt"):
        query = (
            self.session.query(ChallengeParticipant)
            .options(selectinload(ChallengeParticipant.user))
            .filter(
                ChallengeParticipant.challenge_id == challenge_id,
                ChallengeParticipant.status == ParticipantStatus.COMPLETED,
            )
        )
        if sort_by == "progress":
            query = query.order_by(ChallengeParticipant.progress.desc(), ChallengeParticipant.id)
        else:
            # earliest finishers first
            query = query.order_by(ChallengeParticipant.completed_at.asc(), ChallengeParticipant.id)

        return [
            CompletedEntry(
                rank=index,
                participant_id=p.id,
                user=p.user,
                progress=p.progress,
                joined_at=p.joined_at,
                completed_at=p.completed_at,
                time_to_complete=days_between(p.joined_at, p.completed_at),
            )
            for index, p in enumerate(query.all(), start=1)
        ]

    def leaderboard(self, challenge_id, limit=None, status="all"):
        if limit is None:
            limit = self.leaderboard_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit must be a positive integer")

        log_count = func.count(ProgressLog.id)
        query = (
            self.session.query(ChallengeParticipant, log_count)
            .outerjoin(ProgressLog, ProgressLog.participant_id == ChallengeParticipant.id)
            .options(selectinload(ChallengeParticipant.user))
            .filter(ChallengeParticipant.challenge_id == challenge_id)
        )
        if status and str(status).lower() != "all":
            query = query.filter(ChallengeParticipant.status == parse_status(str(status).upper()))

        rows = (
            query.group_by(ChallengeParticipant.id)
            .order_by(
                ChallengeParticipant.progress.desc(),
                # on equal progress the earlier finisher wins; unfinished rows go last
                ChallengeParticipant.completed_at.is_(None),
                ChallengeParticipant.completed_at.asc(),
                ChallengeParticipant.id.asc(),
            )
            .limit(limit)
            .all()
        )
        return [
            LeaderboardEntry(
                rank=index,
                participant_id=p.id,
                user=p.user,
                progress=p.progress,
                status=p.status,
                completed_at=p.completed_at,
                total_activities=count,
            )
            for index, (p, count) in enumerate(rows, start=1)
        ]

    def user_progress(self, user_id):
        rows = (
            self.session.query(ChallengeParticipant, func.count(ProgressLog.id))
            .outerjoin(ProgressLog, ProgressLog.participant_id == ChallengeParticipant.id)
            .options(selectinload(ChallengeParticipant.challenge))
            .filter(ChallengeParticipant.user_id == user_id)
            .group_by(ChallengeParticipant.id)
            .order_by(ChallengeParticipant.joined_at.desc(), ChallengeParticipant.id.desc())
            .all()
        )

        counts = Counter(p.status for p, _ in rows)
        stats = UserProgressStats(
            total=len(rows),
            completed=counts[ParticipantStatus.COMPLETED],
            active=counts[ParticipantStatus.ACTIVE],
            dropped=counts[ParticipantStatus.DROPPED],
            paused=counts[ParticipantStatus.PAUSED],
            average_progress=round_average(
                sum(p.progress for p, _ in rows) / len(rows) if rows else None
            ),
        )
        challenges = [
            UserChallengeEntry(
                participant_id=p.id,
                challenge=p.challenge,
                progress=p.progress,
                status=p.status,
                joined_at=p.joined_at,
                completed_at=p.completed_at,
                total_activities=count,
            )
            for p, count in rows
        ]
        return UserProgress(user_id=user_id, stats=stats, challenges=challenges)

    def challenge_statistics(self, challenge_id):
        challenge = self.session.get(Challenge, challenge_id)
        if challenge is None:
            raise NotFoundError("Challenge not found")

        participants = (
            self.session.query(ChallengeParticipant)
            .filter(ChallengeParticipant.challenge_id == challenge_id)
            .order_by(ChallengeParticipant.id)
            .all()
        )
        completed_count = (
            self.session.query(func.count(ChallengeParticipant.id))
            .filter(
                ChallengeParticipant.challenge_id == challenge_id,
                ChallengeParticipant.status == ParticipantStatus.COMPLETED,
            )
            .scalar()
        )
        average = (
            self.session.query(func.avg(ChallengeParticipant.progress))
            .filter(ChallengeParticipant.challenge_id == challenge_id)
            .scalar()
        )

        finishers = [
            FastestCompletion(
                user_id=p.user_id,
                participant_id=p.id,
                days=days_between(p.joined_at, p.completed_at),
            )
            for p in participants
            if p.completed_at is not None
        ]
        statistics = ChallengeStatistics(
            total_participants=len(participants),
            completed_count=completed_count,
            completion_rate=format_percentage(completed_count, len(participants)),
            average_progress=round_average(average),
            status_breakdown=dict(Counter(p.status.value for p in participants)),
            fastest_completion=min(finishers, key=lambda f: f.days) if finishers else None,
        )
        return challenge, statistics

    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_delta(value):
        if value is None or isinstance(value, bool):
            raise ValidationError("progressDelta and description are required")
        try:
            delta = float(value)
        except (TypeError, ValueError):
            raise ValidationError("progressDelta must be a number")
        if not math.isfinite(delta):
            raise ValidationError("progressDelta must be a finite number")
        return delta
