from liga.schemas.user import (
    UserSchema,
    DiscordLoginSchema,
    AdminLoginSchema,
    UpdateRoleSchema,
)
from liga.schemas.team import TeamSchema, CreateTeamSchema, UpdateTeamSchema, InviteSchema
from liga.schemas.league import (
    LeagueSchema,
    LeagueParticipantSchema,
    CreateLeagueSchema,
    UpdateLeagueSchema,
    JoinLeagueSchema,
    StandingSchema,
)
from liga.schemas.tournament import (
    TournamentSchema,
    CreateTournamentSchema,
    UpdateTournamentSchema,
    JoinTournamentSchema,
)
from liga.schemas.match import (
    MatchSchema,
    CreateMatchSchema,
    MatchResultSchema,
    UpdateMatchSchema,
)
from liga.schemas.notification import (
    NotificationSchema,
    InvitationSchema,
    RespondInvitationSchema,
    CaptainRequestSchema,
    CreateCaptainRequestSchema,
    ReviewCaptainRequestSchema,
)

__all__ = [
    "UserSchema",
    "DiscordLoginSchema",
    "AdminLoginSchema",
    "UpdateRoleSchema",
    "TeamSchema",
    "CreateTeamSchema",
    "UpdateTeamSchema",
    "InviteSchema",
    "LeagueSchema",
    "LeagueParticipantSchema",
    "CreateLeagueSchema",
    "UpdateLeagueSchema",
    "JoinLeagueSchema",
    "StandingSchema",
    "TournamentSchema",
    "CreateTournamentSchema",
    "UpdateTournamentSchema",
    "JoinTournamentSchema",
    "MatchSchema",
    "CreateMatchSchema",
    "MatchResultSchema",
    "UpdateMatchSchema",
    "NotificationSchema",
    "InvitationSchema",
    "RespondInvitationSchema",
    "CaptainRequestSchema",
    "CreateCaptainRequestSchema",
    "ReviewCaptainRequestSchema",
]
