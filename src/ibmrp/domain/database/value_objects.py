# src/ibmrp/domain/database/value_objects.py
from __future__ import annotations

from enum import Enum
from typing import Optional

from ibmrp.domain.core.exceptions import ValidationError


class InstanceStatus(str, Enum):
    """Resource controller instance states."""
    PROVISIONING = "provisioning"
    IN_PROGRESS = "in progress"
    ACTIVE = "active"
    INACTIVE = "inactive"
    FAILED = "failed"
    REMOVED = "removed"
    PENDING_RECLAMATION = "pending_reclamation"

    @classmethod
    def is_gone(cls, state: Optional[str]) -> bool:
        """Whether a state means the instance has been deleted."""
        if not state:
            return False
        return cls.REMOVED.value in state or cls.PENDING_RECLAMATION.value in state


class TaskStatus(str, Enum):
    """ICD asynchronous task states."""
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    COMPLETE = "complete"
    FAILED = "failed"

    @classmethod
    def is_success(cls, status: Optional[str]) -> bool:
        # An empty status is reported once the task record is finalised.
        return status in (None, "", cls.COMPLETED.value, cls.COMPLETE.value)

    @classmethod
    def is_pending(cls, status: Optional[str]) -> bool:
        return status in (cls.QUEUED.value, cls.RUNNING.value)


class DatabaseService(str, Enum):
    """Supported ICD service offerings."""
    ETCD = "databases-for-etcd"
    POSTGRESQL = "databases-for-postgresql"
    REDIS = "databases-for-redis"
    ELASTICSEARCH = "databases-for-elasticsearch"
    MONGODB = "databases-for-mongodb"
    RABBITMQ = "messages-for-rabbitmq"
    MYSQL = "databases-for-mysql"
    CASSANDRA = "databases-for-cassandra"
    ENTERPRISEDB = "databases-for-enterprisedb"

    @classmethod
    def validate(cls, value: str) -> None:
        if value not in [e.value for e in cls]:
            raise ValidationError(f"Invalid database service: {value}")


SUPPORTED_SERVICES = [s.value for s in DatabaseService]
SUPPORTED_PLANS = ["standard", "enterprise"]
SERVICE_ENDPOINTS = ["public", "private", "public-and-private"]

# Services whose scaling values are checked against group defaults at diff time.
PLAN_VALIDATED_SERVICES = frozenset({
    DatabaseService.POSTGRESQL.value,
    DatabaseService.ELASTICSEARCH.value,
    DatabaseService.CASSANDRA.value,
    DatabaseService.ENTERPRISEDB.value,
})

# Services accepting a configuration document on update.
CONFIGURABLE_SERVICES = frozenset({
    DatabaseService.POSTGRESQL.value,
    DatabaseService.REDIS.value,
    DatabaseService.ENTERPRISEDB.value,
})

# Key of the connection object returned for each service.
CONNECTION_KEYS = {
    DatabaseService.POSTGRESQL.value: "postgres",
    DatabaseService.ENTERPRISEDB.value: "postgres",
    DatabaseService.REDIS.value: "rediss",
    DatabaseService.MONGODB.value: "mongodb",
    DatabaseService.ELASTICSEARCH.value: "https",
    DatabaseService.ETCD.value: "grpc",
    DatabaseService.RABBITMQ.value: "amqps",
    DatabaseService.MYSQL.value: "mysql",
    DatabaseService.CASSANDRA.value: "secure",
}

SCALING_GROUP_ID = "member"
ADMIN_USER_TYPE = "database"


def database_type(service: str) -> str:
    """
    Map a service name to the ICD deployment type.

    Args:
        service: Service name, e.g. databases-for-postgresql

    Returns:
        Deployment type, e.g. postgresql
    """
    if service == DatabaseService.CASSANDRA.value:
        return "datastax_enterprise_full"
    if service.startswith("messages-for-"):
        return service[len("messages-for-"):]
    if service.startswith("databases-for-"):
        return service[len("databases-for-"):]
    raise ValidationError(f"Cannot derive database type from service: {service}")


def default_node_count(service: str) -> int:
    """Initial member count used when group defaults are not consulted."""
    if service in (DatabaseService.ELASTICSEARCH.value, DatabaseService.CASSANDRA.value):
        return 3
    return 2
