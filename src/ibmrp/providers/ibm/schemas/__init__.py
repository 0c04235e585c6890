"""Resource schemas."""
from .database_schema import DATABASE_SCHEMA
from .en_destination_schema import EN_DESTINATION_SCHEMA
from .en_subscription_schema import EN_SUBSCRIPTION_SCHEMA

__all__ = ["DATABASE_SCHEMA", "EN_DESTINATION_SCHEMA", "EN_SUBSCRIPTION_SCHEMA"]
