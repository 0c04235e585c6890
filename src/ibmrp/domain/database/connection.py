# src/ibmrp/domain/database/connection.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ibmrp.domain.core.exceptions import ValidationError


@dataclass(frozen=True)
class ConnectionHost:
    hostname: str
    port: str

    def to_dict(self) -> Dict[str, str]:
        return {"hostname": self.hostname, "port": self.port}


@dataclass(frozen=True)
class ConnectionString:
    """Connection details of one database user. The password is never kept."""
    name: str
    composed: str = ""
    scheme: str = ""
    certname: str = ""
    certbase64: str = ""
    bundlename: str = ""
    bundlebase64: str = ""
    queryoptions: str = ""
    path: str = ""
    database: str = ""
    hosts: List[ConnectionHost] = field(default_factory=list)
    password: str = ""

    @classmethod
    def from_api(cls, user_name: str, connection: Dict[str, Any]) -> "ConnectionString":
        """
        Build a connection string from one service section of a connection response.

        Args:
            user_name: User the connection belongs to
            connection: Service section, e.g. response["connection"]["postgres"]

        Raises:
            ValidationError: If the database field has an unexpected type
        """
        composed = connection.get("composed") or []
        certificate = connection.get("certificate") or {}
        bundle = connection.get("bundle") or {}
        query_options = connection.get("query_options")

        return cls(
            name=user_name,
            composed=composed[0] if composed else "",
            scheme=connection.get("scheme", "") or "",
            certname=certificate.get("name", "") or "",
            certbase64=certificate.get("certificate_base64", "") or "",
            bundlename=bundle.get("name", "") or "",
            bundlebase64=bundle.get("bundle_base64", "") or "",
            queryoptions=json.dumps(query_options, sort_keys=True) if query_options else "",
            path=connection.get("path", "") or "",
            database=_database_name(connection.get("database")),
            hosts=[
                ConnectionHost(hostname=str(h.get("hostname", "")), port=str(h.get("port", "")))
                for h in connection.get("hosts") or []
            ],
            password="",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "password": self.password,
            "composed": self.composed,
            "scheme": self.scheme,
            "certname": self.certname,
            "certbase64": self.certbase64,
            "bundlename": self.bundlename,
            "bundlebase64": self.bundlebase64,
            "queryoptions": self.queryoptions,
            "path": self.path,
            "database": self.database,
            "hosts": [h.to_dict() for h in self.hosts],
        }


def _database_name(value: Any) -> str:
    # PostgreSQL reports a name, Redis a numeric index, other services nothing.
    if value is None:
        return ""
    if isinstance(value, bool):
        raise ValidationError(f"Unexpected data type for database: {type(value).__name__}")
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise ValidationError(f"Unexpected data type for database: {type(value).__name__}")
