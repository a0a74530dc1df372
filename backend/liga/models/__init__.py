from liga.models.user import User, UserRole
from liga.models.team import Team, TeamMember, TeamPlatform
from liga.models.league import League, LeagueParticipant
from liga.models.tournament import Tournament, TournamentParticipant, TournamentPhase
from liga.models.match import Match, MatchStatus
from liga.models.notification import Notification, NotificationType
from liga.models.invitation import TeamInvitation, InvitationStatus
from liga.models.captain_request import CaptainRequest, CaptainRequestStatus

__all__ = [
    "User",
    "UserRole",
    "Team",
    "TeamMember",
    "TeamPlatform",
    "League",
    "LeagueParticipant",
    "Tournament",
    "TournamentParticipant",
    "TournamentPhase",
    "Match",
    "MatchStatus",
    "Notification",
    "NotificationType",
    "TeamInvitation",
    "InvitationStatus",
    "CaptainRequest",
    "CaptainRequestStatus",
]
