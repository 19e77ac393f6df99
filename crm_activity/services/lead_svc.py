"""Lead service - rejection and conversion."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.account import Account
from ..models.lead import Lead
from ..models.opportunity import Opportunity
from . import subject_svc


@dataclass
class Conversion:
    lead: Lead
    account: Account
    opportunity: Opportunity | None


async def reject_lead(
    db: AsyncSession, actor_id: uuid.UUID, lead_id: uuid.UUID
) -> Lead | None:
    """Set status to rejected; records a ``rejected`` activity, not a view."""
    return await subject_svc.update_subject(db, actor_id, "lead", lead_id, status="rejected")


async def convert_lead(
    db: AsyncSession,
    actor_id: uuid.UUID,
    lead_id: uuid.UUID,
    *,
    account_name: str | None = None,
    opportunity_name: str | None = None,
    amount: float | None = None,
) -> Conversion | None:
    """Turn a lead into an account (plus an optional opportunity).

    The new records inherit the lead's access level and share list. All
    writes commit together; a failure leaves the lead untouched.
    """
    lead = await subject_svc.get_subject(db, "lead", lead_id)
    if lead is None:
        return None
    permissions = await subject_svc.shared_with(db, "lead", lead.id)
    try:
        account = await subject_svc.create_subject(
            db, actor_id, "account",
            name=account_name or lead.company or lead.full_name,
            email=lead.email,
            phone=lead.phone,
            access=lead.access,
            permissions=permissions,
            commit=False,
        )
        opportunity = None
        if opportunity_name:
            opportunity = await subject_svc.create_subject(
                db, actor_id, "opportunity",
                name=opportunity_name,
                account_id=account.id,
                amount=amount,
                access=lead.access,
                permissions=permissions,
                commit=False,
            )
        lead = await subject_svc.update_subject(
            db, actor_id, "lead", lead_id,
            status="converted", permissions=permissions, commit=False,
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    converted = [r for r in (lead, account, opportunity) if r is not None]
    for record in converted:
        await db.refresh(record)
    return Conversion(lead=lead, account=account, opportunity=opportunity)
