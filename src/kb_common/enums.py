"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class TransactionType(str, Enum):
    PURCHASE = "purchase"
    PAYMENT = "payment"


class InterestTimeUnit(str, Enum):
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"


class ProductUnit(str, Enum):
    KG = "kg"
    LITER = "liter"
    PIECE = "piece"
    GRAM = "gram"
    ML = "ml"


class Language(str, Enum):
    EN = "en"
    HI = "hi"


class NotificationChannel(str, Enum):
    SMS = "sms"
    EMAIL = "email"
