from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class BusinessType(str, Enum):
    SEED_SUPPLIER = "Seed Supplier"
    FERTILIZER_SUPPLIER = "Fertilizer Supplier"
    EQUIPMENT_SUPPLIER = "Equipment Supplier"
    CHEMICAL_SUPPLIER = "Chemical Supplier"
    GENERAL_SUPPLIER = "General Supplier"
    OTHER = "Other"


class PaymentTerms(str, Enum):
    NET_30 = "Net 30"
    NET_60 = "Net 60"
    NET_90 = "Net 90"
    CASH_ON_DELIVERY = "Cash on Delivery"
    ADVANCE_PAYMENT = "Advance Payment"


class InventoryCategory(str, Enum):
    SEEDS = "Seeds"
    FERTILIZERS = "Fertilizers"
    PESTICIDES = "Pesticides"
    EQUIPMENT = "Equipment"
    TOOLS = "Tools"
    MACHINERY_PARTS = "Machinery Parts"
    IRRIGATION = "Irrigation"
    PACKAGING = "Packaging"
    OTHER = "Other"


class UnitOfMeasure(str, Enum):
    KG = "kg"
    LBS = "lbs"
    PIECES = "pieces"
    LITERS = "liters"
    GALLONS = "gallons"
    BAGS = "bags"
    BOXES = "boxes"
    UNITS = "units"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out-of-stock"
    LOW_STOCK = "low-stock"
    OVERSTOCKED = "overstocked"
    NORMAL = "normal"

