"""
Enumerations shared by ORM models and Pydantic schemas.

Values are stored as plain upper-case text columns; schemas accept any casing.
"""
from __future__ import annotations

from enum import Enum


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class CatalogStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DRAFT = "DRAFT"


class Visibility(str, Enum):
    PRIVATE = "PRIVATE"
    SHARED = "SHARED"
    PUBLIC = "PUBLIC"


class ProgramKind(str, Enum):
    ACADEMIC = "ACADEMIC"
    WORKSHEET = "WORKSHEET"
    BIRTHDAY_PARTY = "BIRTHDAY_PARTY"
    STEM_CAMP = "STEM_CAMP"
    VOCATIONAL = "VOCATIONAL"
    CERTIFICATION = "CERTIFICATION"
    WORKSHOP = "WORKSHOP"


class PricingModel(str, Enum):
    PER_COURSE = "PER_COURSE"
    PER_MONTH = "PER_MONTH"
    PER_SESSION = "PER_SESSION"
    SUBSCRIPTION = "SUBSCRIPTION"
    PROGRAM_PRICE = "PROGRAM_PRICE"
    ONE_TIME = "ONE_TIME"
    INSTALLMENTS = "INSTALLMENTS"


class StudentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    GRADUATED = "GRADUATED"
    SUSPENDED = "SUSPENDED"


class TeacherStatus(str, Enum):
    PROCESS = "PROCESS"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class LearningGroupStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class StockStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class StockDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"


class StockReason(str, Enum):
    STOCK_RECEIPT = "stock_receipt"
    STUDENT_ASSIGNMENT = "student_assignment"
    ORDER_FULFILLMENT = "order_fulfillment"
    MANUAL_ADJUSTMENT = "manual_adjustment"
