"""
Subscription domain types
"""
from enum import Enum


class SubscriptionPeriod(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class SubscriptionType(str, Enum):
    DEFAULT = "DEFAULT"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
