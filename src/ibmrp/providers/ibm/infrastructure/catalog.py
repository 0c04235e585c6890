"""Global catalog lookups for service offerings, plans and deployments."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ibmrp.domain.core.exceptions import ValidationError
from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.providers.ibm.exceptions import IBMResourceNotFoundError
from ibmrp.providers.ibm.infrastructure.api_errors import call_api

logger = get_logger(__name__)


@dataclass(frozen=True)
class ServiceTarget:
    """Where a new instance is provisioned."""
    service_id: str
    plan_id: str
    target_crn: str


def filter_database_deployments(deployments: List[Dict[str, Any]],
                                location: str) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Keep the resource-controller compatible deployments in a location.

    Args:
        deployments: Deployment catalog entries of a plan
        location: Requested location, e.g. us-south

    Returns:
        (matching deployments, every location offered by a compatible deployment)
    """
    matching = []
    supported = set()
    for deployment in deployments:
        metadata = deployment.get("metadata") or {}
        if not metadata.get("rc_compatible"):
            continue
        deployment_location = (metadata.get("deployment") or {}).get("location", "")
        supported.add(deployment_location)
        if deployment_location == location:
            matching.append(deployment)
    return matching, sorted(supported)


class CatalogResolver:
    """Resolves service, plan and deployment catalog entries."""

    def __init__(self, catalog_client: Any):
        """
        Args:
            catalog_client: GlobalCatalogV1 client
        """
        self._client = catalog_client

    def find_service(self, service_name: str) -> Dict[str, Any]:
        """
        Find the catalog entry of a service by name.

        Raises:
            IBMResourceNotFoundError: If no entry has that name
        """
        result = call_api(
            "retrieving service offering",
            self._client.list_catalog_entries,
            q=f"name:{service_name}",
            complete=True,
        )
        for entry in result.get("resources") or []:
            if entry.get("name") == service_name:
                return entry
        raise IBMResourceNotFoundError(f"Service offering {service_name} not found in the catalog", status_code=404)

    def find_plan(self, service_id: str, plan_name: str) -> Dict[str, Any]:
        """
        Find a plan of a service by name.

        Raises:
            IBMResourceNotFoundError: If the service has no such plan
        """
        result = call_api(
            "retrieving plan",
            self._client.get_child_objects,
            id=service_id,
            kind="plan",
            complete=True,
        )
        for entry in result.get("resources") or []:
            if entry.get("name") == plan_name:
                return entry
        raise IBMResourceNotFoundError(f"Plan {plan_name} not found for service {service_id}", status_code=404)

    def list_deployments(self, plan_id: str) -> List[Dict[str, Any]]:
        result = call_api(
            "retrieving deployments",
            self._client.get_child_objects,
            id=plan_id,
            kind="deployment",
            complete=True,
        )
        return result.get("resources") or []

    def resolve_target(self, service_name: str, plan_name: str, location: str) -> ServiceTarget:
        """
        Resolve the plan and deployment an instance is created from.

        Raises:
            IBMResourceNotFoundError: If the service or plan does not exist
            ValidationError: If the plan has no deployment in the location
        """
        service = self.find_service(service_name)
        plan = self.find_plan(service["id"], plan_name)
        deployments = self.list_deployments(plan["id"])
        if not deployments:
            raise ValidationError(f"No deployment found for service plan : {plan_name}")

        matching, supported = filter_database_deployments(deployments, location)
        if not matching:
            raise ValidationError(
                f"No deployment found for service plan {plan_name} at location {location}.\n"
                f"Valid location(s) are: {supported}",
                {"location": location, "supported_locations": supported},
            )
        deployment = matching[0]
        target = deployment.get("catalog_crn") or deployment.get("id")
        logger.debug(f"Resolved {service_name}/{plan_name} in {location} to {target}")
        return ServiceTarget(service_id=service["id"], plan_id=plan["id"], target_crn=target)

    def entry_name(self, entry_id: str) -> Optional[str]:
        """Name of a catalog entry, used to map instance service and plan IDs back to names."""
        result = call_api("retrieving catalog entry", self._client.get_catalog_entry, id=entry_id)
        return result.get("name")
