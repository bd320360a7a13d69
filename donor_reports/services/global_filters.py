"""
Global filter resolution.

A user's persisted ``GlobalFilters`` narrow the donor universe of every
report. Each active dimension yields a set of donor ids; dimensions are
OR-ed internally and intersected with each other. The result is tagged so
that "no filter is active" cannot be confused with "nothing matched".
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from donor_reports.core.exceptions import InvalidReportFilter
from donor_reports.models.campaign import Campaign
from donor_reports.models.donation import Donation
from donor_reports.models.donor import Donor
from donor_reports.models.place import DonorPlace, Place
from donor_reports.models.target_audience import TargetAudience
from donor_reports.models.user import User
from donor_reports.schemas.report import GlobalFilters, TriStateFilter

logger = logging.getLogger(__name__)

GLOBAL_FILTERS_SETTINGS_KEY = "global_filters"


@dataclass(frozen=True)
class NoConstraint:
    """No global filter dimension is active: keep every donor."""


@dataclass(frozen=True)
class Matches:
    """Donors allowed by the active dimensions (possibly none)."""
    donor_ids: frozenset

    def __contains__(self, donor_id: object) -> bool:
        return donor_id in self.donor_ids

    def __len__(self) -> int:
        return len(self.donor_ids)


NO_CONSTRAINT = NoConstraint()

ResolvedDonors = Union[NoConstraint, Matches]


def allows(resolved: ResolvedDonors, donor_id: Optional[str]) -> bool:
    """True when ``donor_id`` passes the resolved global filters."""
    if isinstance(resolved, NoConstraint):
        return True
    return donor_id in resolved


class GlobalFilterResolver:
    """Resolve ``GlobalFilters`` to the set of donor ids they allow."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, filters: Optional[GlobalFilters]) -> ResolvedDonors:
        if filters is None:
            return NO_CONSTRAINT

        dimensions = (
            ("place", self.donors_by_place),
            ("audience", self.donors_by_audience),
            ("campaign", self.donors_by_campaign),
            ("amount", self.donors_by_amount),
            ("affiliation", self.donors_by_affiliation),
        )

        result: Optional[set[str]] = None
        for name, resolve_dimension in dimensions:
            donor_ids = await resolve_dimension(filters)
            if donor_ids is None:
                continue

            result = donor_ids if result is None else result & donor_ids
            logger.debug(f"Global filter '{name}' leaves {len(result)} donors")
            if not result:
                return Matches(frozenset())

        if result is None:
            return NO_CONSTRAINT
        return Matches(frozenset(result))

    async def donors_by_place(self, filters: GlobalFilters) -> Optional[set[str]]:
        conditions = []
        if filters.country_ids:
            conditions.append(Place.country_id.in_(filters.country_ids))
        if filters.city_ids:
            conditions.append(Place.city.in_(filters.city_ids))
        if filters.neighborhood_ids:
            conditions.append(Place.neighborhood.in_(filters.neighborhood_ids))
        if not conditions:
            return None

        result = await self.db.execute(
            select(DonorPlace.donor_id)
            .join(Place, DonorPlace.place_id == Place.id)
            .where(DonorPlace.is_active.is_(True), or_(*conditions))
        )
        return set(result.scalars().all())

    async def donors_by_audience(self, filters: GlobalFilters) -> Optional[set[str]]:
        if not filters.target_audience_ids:
            return None

        result = await self.db.execute(
            select(TargetAudience.donor_ids).where(
                TargetAudience.id.in_(filters.target_audience_ids)
            )
        )
        donor_ids: set[str] = set()
        for ids in result.scalars().all():
            donor_ids.update(ids or [])
        return donor_ids

    async def donors_by_campaign(self, filters: GlobalFilters) -> Optional[set[str]]:
        if not filters.campaign_ids:
            return None

        result = await self.db.execute(
            select(Donation.donor_id)
            .where(Donation.campaign_id.in_(filters.campaign_ids))
            .distinct()
        )
        donor_ids = set(result.scalars().all())

        result = await self.db.execute(
            select(Campaign.invited_donor_ids).where(Campaign.id.in_(filters.campaign_ids))
        )
        for ids in result.scalars().all():
            donor_ids.update(ids or [])
        return donor_ids

    async def donors_by_amount(self, filters: GlobalFilters) -> Optional[set[str]]:
        if filters.amount_min is None and filters.amount_max is None:
            return None

        query = select(Donation.donor_id).distinct()
        if filters.amount_min is not None:
            query = query.where(Donation.amount >= filters.amount_min)
        if filters.amount_max is not None:
            query = query.where(Donation.amount <= filters.amount_max)

        result = await self.db.execute(query)
        return set(result.scalars().all())

    async def donors_by_affiliation(self, filters: GlobalFilters) -> Optional[set[str]]:
        conditions = []
        for selection, column in (
            (filters.is_anash, Donor.is_anash),
            (filters.is_alumni, Donor.is_alumni),
        ):
            if selection == TriStateFilter.YES:
                conditions.append(column.is_(True))
            elif selection == TriStateFilter.NO:
                conditions.append(column.is_not(True))
        if not conditions:
            return None

        result = await self.db.execute(select(Donor.id).where(*conditions))
        return set(result.scalars().all())


async def load_user_global_filters(
    db: AsyncSession,
    user_id: Optional[str]
) -> Optional[GlobalFilters]:
    """
    Read the global filters persisted in the user's settings.

    Returns None when the user has none. Malformed stored filters raise
    InvalidReportFilter rather than silently matching everything.
    """
    if not user_id:
        return None

    result = await db.execute(select(User.settings).where(User.id == user_id))
    user_settings = result.scalar_one_or_none()
    raw = (user_settings or {}).get(GLOBAL_FILTERS_SETTINGS_KEY)
    if not raw:
        return None

    try:
        return GlobalFilters.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Stored global filters of user {user_id} are invalid: {e}")
        raise InvalidReportFilter(
            f"Stored global filters are invalid: {e.errors()[0]['msg']}",
            field="global_filters"
        ) from e


async def save_user_global_filters(
    db: AsyncSession,
    user: User,
    filters: Optional[GlobalFilters]
) -> Optional[GlobalFilters]:
    """Replace the user's persisted global filters (None clears them)."""
    user_settings = dict(user.settings or {})
    if filters is None:
        user_settings.pop(GLOBAL_FILTERS_SETTINGS_KEY, None)
    else:
        user_settings[GLOBAL_FILTERS_SETTINGS_KEY] = filters.model_dump(mode="json", exclude_none=True)

    # Reassign so the JSON column is flagged dirty
    user.settings = user_settings
    await db.flush()
    logger.info(f"Updated global filters for user {user.id}")
    return filters
