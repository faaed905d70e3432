from .generated import (
    Base,
    metadata,
    ProviderSettings,
    AvailabilityRules,
    AvailabilityBlocks,
    Appointments,
    SessionCredits,
    Products,
    Orders,
)

__all__ = [
    "Base",
    "metadata",
    "ProviderSettings",
    "AvailabilityRules",
    "AvailabilityBlocks",
    "Appointments",
    "SessionCredits",
    "Products",
    "Orders",
]
