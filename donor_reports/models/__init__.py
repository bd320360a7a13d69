"""
SQLAlchemy models for the donor reports service.
"""
from donor_reports.models.user import User
from donor_reports.models.donor import Donor
from donor_reports.models.campaign import Campaign
from donor_reports.models.donation_method import DonationMethod, DonationMethodType, StandingOrderKind
from donor_reports.models.donation import Donation, DonationType, PaymentFrequency
from donor_reports.models.payment import Payment
from donor_reports.models.place import Country, Place, DonorPlace
from donor_reports.models.donor_contact import DonorContact, ContactType
from donor_reports.models.target_audience import TargetAudience

__all__ = [
    "User",
    "Donor",
    "Campaign",
    "DonationMethod",
    "DonationMethodType",
    "StandingOrderKind",
    "Donation",
    "DonationType",
    "PaymentFrequency",
    "Payment",
    "Country",
    "Place",
    "DonorPlace",
    "DonorContact",
    "ContactType",
    "TargetAudience",
]
