"""Append-only audit trail of booking transitions and role decisions.

Rows are added to the caller's session and committed with the change they
describe, so a rolled back transition leaves no audit entry behind.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from campus.models.admin import AuditLog


def _compact(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value not in (None, "")}


class AuditService:
    async def log_action(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Stage one audit row; ``user_id`` is None when Razorpay drove the change."""
        entry = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
        )
        db.add(entry)
        return entry

    async def log_booking_action(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        action: str,
        booking_id: UUID,
        old_status: str,
        new_status: str,
        payment_status: str | None = None,
        amount: int | None = None,
        reason: str | None = None,
    ) -> AuditLog:
        return await self.log_action(
            db,
            user_id,
            f"booking_{action}",
            "booking",
            booking_id,
            old_values={"status": old_status},
            new_values=_compact(
                status=new_status, payment_status=payment_status, amount=amount or None, reason=reason
            ),
        )

    async def log_role_request_action(
        self,
        db: AsyncSession,
        user_id: UUID,
        action: str,
        target_user_id: UUID,
        old_role: str,
        new_role: str,
        reason: str | None = None,
    ) -> AuditLog:
        return await self.log_action(
            db,
            user_id,
            f"role_request_{action}",
            "user",
            target_user_id,
            old_values={"role": old_role},
            new_values=_compact(role=new_role, decision=action, reason=reason),
        )


audit_service = AuditService()
