from sqlalchemy.exc import IntegrityError

from liga.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from liga.extensions import db
from liga.models.invitation import InvitationStatus, TeamInvitation
from liga.models.notification import NotificationType
from liga.models.team import Team, TeamMember, TeamPlatform
from liga.models.user import User
from liga.services.notification_service import notify_users


def get_team_or_404(team_id):
    team = db.session.get(Team, team_id)
    if not team:
        raise NotFoundError("Team not found")
    return team


def _require_manager(team, principal):
    if principal.is_admin or team.captain_id == principal.user_id:
        return
    raise AuthorizationError("Only the team captain can manage this team")


def _name_taken(name, exclude_id=None):
    query = Team.query.filter(db.func.lower(Team.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Team.id != exclude_id)
    return query.first() is not None


def is_member(team_id, user_id):
    return TeamMember.query.filter_by(team_id=team_id, user_id=user_id).first() is not None


def create_team(data, principal):
    """Captain creates a team and becomes its first member."""
    if not principal.is_captain:
        raise AuthorizationError("Captain role required to create a team")

    if _name_taken(data["name"]):
        raise ConflictError("A team with this name already exists")

    team = Team(
        name=data["name"],
        description=data.get("description"),
        platform=TeamPlatform(data["platform"]),
        image_url=data.get("image_url"),
        captain_id=principal.user_id,
    )
    db.session.add(team)
    try:
        db.session.flush()
        db.session.add(TeamMember(team_id=team.id, user_id=principal.user_id))
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent create of the same name
        db.session.rollback()
        raise ConflictError("A team with this name already exists")
    return team


def update_team(team_id, data, principal):
    team = get_team_or_404(team_id)
    _require_manager(team, principal)

    if "name" in data and data["name"] != team.name:
        if _name_taken(data["name"], exclude_id=team.id):
            raise ConflictError("A team with this name already exists")
        team.name = data["name"]
    if "description" in data:
        team.description = data["description"]
    if "platform" in data:
        team.platform = TeamPlatform(data["platform"])
    if "image_url" in data:
        team.image_url = data["image_url"]

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("A team with this name already exists")
    return team


def deactivate_team(team_id, principal):
    """Soft delete; league history stays attached to the team."""
    team = get_team_or_404(team_id)
    _require_manager(team, principal)

    team.is_active = False
    db.session.commit()
    return team


def get_members(team_id):
    get_team_or_404(team_id)
    return (
        User.query.join(TeamMember, TeamMember.user_id == User.id)
        .filter(TeamMember.team_id == team_id)
        .order_by(TeamMember.joined_at)
        .all()
    )


def remove_member(team_id, user_id, principal):
    team = get_team_or_404(team_id)
    _require_manager(team, principal)

    if user_id == team.captain_id:
        raise ValidationError("The captain cannot be removed from the team")

    member = TeamMember.query.filter_by(team_id=team_id, user_id=user_id).first()
    if not member:
        raise NotFoundError("User is not a member of this team")

    db.session.delete(member)
    db.session.commit()
    return team


def teams_for_user(user_id):
    return (
        Team.query.join(TeamMember)
        .filter(TeamMember.user_id == user_id, Team.is_active.is_(True))
        .order_by(Team.name)
        .all()
    )


# ── Invitations ──────────────────────────────────────────────────────────


def invite_user(team_id, user_id, principal):
    team = get_team_or_404(team_id)
    _require_manager(team, principal)

    if not team.is_active:
        raise ValidationError("Team is not active")

    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        raise NotFoundError("User not found")

    if is_member(team.id, user.id):
        raise ConflictError("User is already a member of this team")

    pending = TeamInvitation.query.filter_by(
        team_id=team.id, user_id=user.id, status=InvitationStatus.PENDING
    ).first()
    if pending:
        raise ConflictError("User already has a pending invitation to this team")

    invitation = TeamInvitation(
        team_id=team.id,
        user_id=user.id,
        invited_by_id=principal.user_id,
        status=InvitationStatus.PENDING,
    )
    db.session.add(invitation)
    db.session.commit()

    notify_users(
        [user.id],
        NotificationType.TEAM_INVITATION,
        "Team invitation",
        f"You have been invited to join {team.name}",
        {"team_id": team.id, "invitation_id": invitation.id},
    )
    return invitation


def pending_invitations(user_id):
    return (
        TeamInvitation.query.filter_by(user_id=user_id, status=InvitationStatus.PENDING)
        .order_by(TeamInvitation.created_at.desc())
        .all()
    )


def respond_to_invitation(invitation_id, accept, principal):
    """Invitee accepts or rejects. Accepting adds them to the roster."""
    invitation = db.session.get(TeamInvitation, invitation_id)

    if not invitation or invitation.user_id != principal.user_id:
        raise NotFoundError("Invitation not found")

    if invitation.status != InvitationStatus.PENDING:
        raise ConflictError("Invitation has already been answered")

    if accept:
        if not invitation.team.is_active:
            raise ValidationError("Team is no longer active")
        invitation.status = InvitationStatus.ACCEPTED
        if not is_member(invitation.team_id, invitation.user_id):
            db.session.add(TeamMember(team_id=invitation.team_id, user_id=invitation.user_id))
    else:
        invitation.status = InvitationStatus.REJECTED

    db.session.commit()
    return invitation
