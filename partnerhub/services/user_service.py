from flask import current_app

from partnerhub.errors import NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import User, user_blocks


class UserService:
    @staticmethod
    def block_user(user, target_user_id):
        try:
            target = db.session.get(User, int(target_user_id))
        except (TypeError, ValueError):
            target = None
        if not target:
            raise NotFoundError("User not found.")
        if target.id == user.id:
            raise ValidationError("You cannot block yourself.")
        if user.has_blocked(target.id):
            raise StateConflictError("User is already blocked.")

        db.session.execute(user_blocks.insert().values(blocker_id=user.id, blocked_id=target.id))
        db.session.commit()
        current_app.logger.info("User %s blocked user %s", user.id, target.id)
        return target
