from .user import User, UserRole
from .challenge import Challenge
from .challenge_participant import ChallengeParticipant, ParticipantStatus
from .progress_log import ProgressLog

__all__ = [
    "User", "UserRole",
    "Challenge",
    "ChallengeParticipant", "ParticipantStatus",
    "ProgressLog",
]
