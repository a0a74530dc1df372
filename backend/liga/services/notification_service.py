import logging

from sqlalchemy.exc import SQLAlchemyError

from liga.errors import NotFoundError
from liga.events import event_bus
from liga.extensions import db
from liga.models.notification import Notification, NotificationType
from liga.models.team import TeamMember

logger = logging.getLogger(__name__)


def _payload(notification):
    return {
        "id": notification.id,
        "type": notification.type.value,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data,
        "created_at": notification.created_at.isoformat(),
    }


def roster_user_ids(*team_ids):
    """Distinct member ids across the given teams."""
    rows = (
        db.session.query(TeamMember.user_id)
        .filter(TeamMember.team_id.in_(team_ids))
        .distinct()
        .all()
    )
    return sorted(r.user_id for r in rows)


def notify_users(user_ids, type_, title, message, data=None):
    """Best-effort notification fan-out.

    Called after the triggering operation has committed. A failure here is
    logged and swallowed; it never undoes the caller's work.
    """
    if not user_ids:
        return []

    try:
        notifications = [
            Notification(
                user_id=user_id,
                type=NotificationType(type_),
                title=title,
                message=message,
                data=data,
            )
            for user_id in user_ids
        ]
        db.session.add_all(notifications)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning(
            "Failed to create %s notifications for %d users",
            NotificationType(type_).value,
            len(user_ids),
            exc_info=True,
        )
        return []

    for notification in notifications:
        event_bus.publish("notification", _payload(notification), user_id=notification.user_id)

    return notifications


def notify_teams(team_ids, type_, title, message, data=None):
    try:
        user_ids = roster_user_ids(*team_ids)
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning("Failed to load rosters for teams %s", team_ids, exc_info=True)
        return []
    return notify_users(user_ids, type_, title, message, data)


def get_notifications(user_id):
    return (
        Notification.query.filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def unread_count(user_id):
    return Notification.query.filter_by(user_id=user_id, is_read=False).count()


def mark_as_read(notification_id, principal):
    notification = db.session.get(Notification, notification_id)

    # Someone else's notification is reported as missing
    if not notification or notification.user_id != principal.user_id:
        raise NotFoundError("Notification not found")

    notification.is_read = True
    db.session.commit()
    return notification
