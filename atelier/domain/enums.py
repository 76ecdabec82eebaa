# atelier/domain/enums.py
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class FurnitureCategory(str, Enum):
    TABLES = "TABLES"
    CHAIRS = "CHAIRS"
    SOFAS = "SOFAS"
    BEDS = "BEDS"
    STORAGE = "STORAGE"
    LIGHTING = "LIGHTING"
    OUTDOOR = "OUTDOOR"
    ACCESSORIES = "ACCESSORIES"


class ModelFormat(str, Enum):
    GLB = "GLB"
    GLTF = "GLTF"
    FBX = "FBX"
    OBJ = "OBJ"
    USDZ = "USDZ"


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    CONFIRMED = "CONFIRMED"
    IN_PRODUCTION = "IN_PRODUCTION"
    READY_FOR_SHIPPING = "READY_FOR_SHIPPING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentPlan(str, Enum):
    FULL = "FULL"
    SPLIT_70_30 = "SPLIT_70_30"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    CRYPTO = "CRYPTO"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"
