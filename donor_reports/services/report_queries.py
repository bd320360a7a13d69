"""
Database queries used by the report engine.

Every lookup that depends on a list of ids is one bulk ``IN (...)`` query,
never a query per row.
"""
import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from donor_reports.models.donation import Donation
from donor_reports.models.donor import Donor
from donor_reports.models.donor_contact import ContactType, DonorContact
from donor_reports.models.payment import Payment
from donor_reports.models.place import DonorPlace, Place
from donor_reports.schemas.report import DonorDetails

logger = logging.getLogger(__name__)


async def query_donations(
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
    include_relations: bool = True
) -> list[Donation]:
    """
    Donations dated within [start, end] (both inclusive, both optional),
    oldest first.
    """
    query = select(Donation)
    if start is not None:
        query = query.where(Donation.donation_date >= start)
    if end is not None:
        query = query.where(Donation.donation_date <= end)

    if include_relations:
        query = query.options(
            selectinload(Donation.donor).selectinload(Donor.fundraiser),
            selectinload(Donation.campaign),
            selectinload(Donation.donation_method),
        )

    query = query.order_by(Donation.donation_date, Donation.id)

    result = await db.execute(query)
    donations = list(result.scalars().all())
    logger.debug(f"Loaded {len(donations)} donations between {start} and {end}")
    return donations


async def query_payments(
    db: AsyncSession,
    donation_ids: Iterable[str],
    active_only: bool = True
) -> list[Payment]:
    """Ledger payments of the given donations."""
    donation_ids = list(set(donation_ids))
    if not donation_ids:
        return []

    query = select(Payment).where(Payment.donation_id.in_(donation_ids))
    if active_only:
        query = query.where(Payment.is_active.is_(True))
    query = query.order_by(Payment.payment_date, Payment.id)

    result = await db.execute(query)
    return list(result.scalars().all())


async def query_donation_dates(db: AsyncSession) -> list[date]:
    """Distinct donation dates, used to list the years that have data."""
    result = await db.execute(select(Donation.donation_date).distinct())
    return list(result.scalars().all())


async def load_donors(db: AsyncSession, donor_ids: Iterable[str]) -> dict[str, Donor]:
    """Donors by id (missing ids are simply absent from the result)."""
    donor_ids = list(set(donor_ids))
    if not donor_ids:
        return {}

    result = await db.execute(select(Donor).where(Donor.id.in_(donor_ids)))
    return {donor.id: donor for donor in result.scalars().all()}


async def load_donor_details(
    db: AsyncSession,
    donor_ids: Iterable[str]
) -> dict[str, DonorDetails]:
    """
    Address, phones and emails for each donor, in two bulk queries.

    The address is the donor's active primary place (any active place when
    none is flagged primary). Contacts are active ones, primary first.
    Donors without data get empty details.
    """
    donor_ids = list(set(donor_ids))
    if not donor_ids:
        return {}

    details = {donor_id: DonorDetails() for donor_id in donor_ids}

    result = await db.execute(
        select(DonorPlace.donor_id, Place)
        .join(Place, DonorPlace.place_id == Place.id)
        .where(
            DonorPlace.donor_id.in_(donor_ids),
            DonorPlace.is_active.is_(True)
        )
        .order_by(DonorPlace.donor_id, DonorPlace.is_primary.desc(), DonorPlace.created)
    )
    for donor_id, place in result.all():
        if not details[donor_id].address:
            details[donor_id].address = place.short_address

    result = await db.execute(
        select(DonorContact)
        .where(
            DonorContact.donor_id.in_(donor_ids),
            DonorContact.is_active.is_(True)
        )
        .order_by(DonorContact.donor_id, DonorContact.is_primary.desc(), DonorContact.created)
    )
    for contact in result.scalars().all():
        entry = details[contact.donor_id]
        if contact.type == ContactType.PHONE and contact.phone_number:
            entry.phones.append(contact.phone_number)
        elif contact.type == ContactType.EMAIL and contact.email:
            entry.emails.append(contact.email)

    return details
