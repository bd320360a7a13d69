"""
Donor reports service: donation reporting and effective-amount aggregation.
"""
__version__ = "1.0.0"
