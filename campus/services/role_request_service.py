"""Role upgrade request workflow."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from campus.domain import role_request_state
from campus.domain.role_request_state import apply_role_request_action
from campus.models.user import User
from campus.services.audit_service import audit_service
from campus.utils.validators import utcnow

logger = logging.getLogger(__name__)

ELIGIBLE_ROLES = ("student", "teacher", "participant")


class RoleRequestService:
    """Participants asking to become organizers, and admins deciding."""

    async def submit(
        self,
        db: AsyncSession,
        user: User,
        requested_role: str = "organizer",
        organization_name: str | None = None,
    ) -> User:
        """Open a role request for ``user``.

        Raises:
            ConflictError: A request is already pending, or the user already
                holds the role
            AuthorizationError: Admins have nothing to request
        """
        if user.role == requested_role:
            raise ConflictError(f"You already have the {requested_role} role")
        if user.role not in ELIGIBLE_ROLES:
            raise AuthorizationError(f"Users with role {user.role} cannot request a role upgrade")
        if user.role_request_status == role_request_state.PENDING:
            raise ConflictError("You already have a pending role request")

        user.role_request_status = apply_role_request_action(
            user.role_request_status, role_request_state.SUBMIT
        )
        user.requested_role = requested_role
        user.role_rejection_reason = None
        user.role_requested_at = utcnow()
        user.role_decided_at = None
        if organization_name:
            user.organization_name = organization_name
        await db.flush()

        logger.info(f"User {user.id} requested role {requested_role}")
        return user

    async def list_pending(self, db: AsyncSession) -> list[User]:
        result = await db.execute(
            select(User)
            .where(User.role_request_status == role_request_state.PENDING)
            .order_by(User.role_requested_at.desc())
        )
        return list(result.scalars().all())

    async def decide(
        self,
        db: AsyncSession,
        admin: User,
        user_id: UUID,
        action: str,
        rejection_reason: str | None = None,
    ) -> User:
        """Approve or reject a pending role request.

        Raises:
            NotFoundError: Unknown user
            ConflictError: No pending request
        """
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        new_status = apply_role_request_action(user.role_request_status, action)
        old_role = user.role
        reason = rejection_reason.strip() if rejection_reason else None

        user.role_request_status = new_status
        user.role_decided_at = utcnow()
        if action == role_request_state.APPROVE:
            user.role = user.requested_role or "organizer"
            user.role_rejection_reason = None
        else:
            user.role_rejection_reason = reason

        await audit_service.log_role_request_action(
            db,
            user_id=admin.id,
            action=action,
            target_user_id=user.id,
            old_role=old_role,
            new_role=user.role,
            reason=reason,
        )
        await db.flush()

        logger.info(
            f"Role request of user {user.id} {new_status} by admin {admin.id}: "
            f"{old_role} -> {user.role}"
        )
        return user


role_request_service = RoleRequestService()
