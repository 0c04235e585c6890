"""IBM Cloud Databases instance handler.

This module provides the handler managing ibm_database resources: ICD
deployments provisioned through the resource controller and configured
through the Cloud Databases API.

Every mutating Cloud Databases call returns an asynchronous task which is
polled to completion before the next call is made. Instance creation and
updates made through the resource controller are followed by a wait for the
deployment to be served by the ICD API and for the instance to become
active.

Classes:
    DatabaseInstanceHandler: Create, read, update, delete and exists for
        database instances

Note:
    ICD has no API listing users, so connection strings are read for the
    configured users and the admin user only.
"""
import json
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from ibmrp.config.schemas.polling_schema import PollingConfig
from ibmrp.domain.base.resource_data import ResourceData
from ibmrp.domain.core.exceptions import ValidationError
from ibmrp.domain.database.connection import ConnectionString
from ibmrp.domain.database.value_objects import (
    ADMIN_USER_TYPE,
    CONFIGURABLE_SERVICES,
    CONNECTION_KEYS,
    SCALING_GROUP_ID,
    InstanceStatus,
    default_node_count,
)
from ibmrp.providers.ibm.exceptions import (
    IBMCloudError,
    IBMResourceGoneError,
    IBMResourceNotFoundError,
)
from ibmrp.providers.ibm.ibm_client import IBMClientSession
from ibmrp.providers.ibm.infrastructure.catalog import CatalogResolver
from ibmrp.providers.ibm.infrastructure.handlers.base_handler import IBMResourceHandler
from ibmrp.providers.ibm.infrastructure.handlers.components.allowlist import (
    effective_allowlist,
    expand_allowlist,
    flatten_allowlist,
)
from ibmrp.providers.ibm.infrastructure.handlers.components.autoscaling import (
    expand_autoscaling,
    expand_autoscaling_group,
    flatten_autoscaling,
    get_group_record,
)
from ibmrp.providers.ibm.infrastructure.handlers.components.groups import (
    flatten_groups,
    member_allocations,
)
from ibmrp.providers.ibm.infrastructure.handlers.components.users import diff_users, expand_user
from ibmrp.providers.ibm.infrastructure.handlers.database_diff import (
    customize_diff,
    get_database_service_defaults,
)
from ibmrp.providers.ibm.infrastructure.handlers.database_waiters import (
    REGION_NOT_FOUND_MESSAGE,
    DatabaseWaiters,
)
from ibmrp.providers.ibm.infrastructure.resource_groups import default_resource_group_id
from ibmrp.providers.ibm.infrastructure.tagging import TagManager
from ibmrp.providers.ibm.schemas.database_schema import DATABASE_SCHEMA

# attribute -> resource instance parameter
_CREATE_PARAMETERS = {
    "version": "version",
    "key_protect_key": "disk_encryption_key_crn",
    "key_protect_instance": "disk_encryption_instance_crn",
    "backup_id": "backup-id",
    "backup_encryption_key_crn": "backup_encryption_key_crn",
    "remote_leader_id": "remote_leader_id",
    "point_in_time_recovery_deployment_id": "point_in_time_recovery_deployment_id",
    "point_in_time_recovery_time": "point_in_time_recovery_time",
}

# scaling resource -> (members attribute, node attribute, payload field)
_SCALING_RESOURCES = {
    "memory": ("members_memory_allocation_mb", "node_memory_allocation_mb", "allocation_mb"),
    "disk": ("members_disk_allocation_mb", "node_disk_allocation_mb", "allocation_mb"),
    "cpu": ("members_cpu_allocation_count", "node_cpu_allocation_count", "allocation_count"),
}


def _record_changed(old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]) -> bool:
    # Unset fields keep the value read from the API.
    if not new:
        return False
    old = old or {}
    return any(value is not None and old.get(key) != value for key, value in new.items())


class DatabaseInstanceHandler(IBMResourceHandler):
    """Handler for ibm_database resources."""

    def __init__(self, session: IBMClientSession, polling: Optional[PollingConfig] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the database instance handler.

        Args:
            session: IBM Cloud SDK client session
            polling: Poll intervals and retry settings
            sleep: Sleep function used by pollers
            clock: Monotonic clock used by pollers
        """
        super().__init__(session, DATABASE_SCHEMA, sleep=sleep, clock=clock)
        self._polling = polling or PollingConfig()

    @property
    def _rc(self) -> Any:
        return self.session.resource_controller()

    @property
    def _icd(self) -> Any:
        return self.session.cloud_databases()

    def _waiters(self) -> DatabaseWaiters:
        return DatabaseWaiters(
            self._rc, self._icd, polling=self._polling, sleep=self._sleep, clock=self._clock
        )

    def _tags(self) -> TagManager:
        return TagManager(self.session.global_tagging(), env_tags=self.session.config.env_tags)

    def _wait_for_task(self, result: Dict[str, Any], timeout: float) -> None:
        task_id = (result.get("task") or {}).get("id")
        if not task_id:
            raise IBMCloudError("Database API response did not include a task", details=result)
        self._waiters().wait_for_task(task_id, timeout)

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create(self, data: ResourceData) -> None:
        """
        Provision a database instance and apply its configuration.

        Raises:
            ValidationError: If the configuration or a scaling value is invalid
            IBMCloudError: For API, task and wait errors
        """
        self.validate(data)
        service = data.get("service")
        plan = data.get("plan")
        location = data.get("location")

        defaults = None
        if data.get("plan_validation", True):
            defaults = get_database_service_defaults(service, self._icd)
        customize_diff(data, self._icd, defaults)

        target = CatalogResolver(self.session.global_catalog()).resolve_target(service, plan, location)
        resource_group = data.get("resource_group_id") or default_resource_group_id(
            self.session.resource_manager()
        )

        if defaults is not None:
            initial_node_count = int((defaults.get("members") or {}).get("minimum_count") or 0)
        else:
            initial_node_count = default_node_count(service)
        parameters = self._create_parameters(data, initial_node_count)

        self._logger.info(f"Creating {service} instance {data.get('name')} in {location}")
        instance = self._call(
            "creating database instance",
            self._rc.create_resource_instance,
            name=data.get("name"),
            target=target.target_crn,
            resource_group=resource_group,
            resource_plan_id=target.plan_id,
            parameters=parameters,
        )
        instance_id = instance["id"]
        data.set_id(instance_id)

        self._waiters().wait_for_instance_create(instance_id, data.timeout("create"))
        self._logger.info(f"Database instance {instance_id} is active")

        node_count, ok = data.get_ok("node_count")
        if ok and node_count != initial_node_count:
            self._horizontal_scale(data, data.timeout("update"))

        tags, tags_set = data.get_ok("tags")
        if tags_set or self.session.config.env_tags:
            try:
                self._tags().update_tags_using_crn(None, tags, instance["crn"])
            except IBMCloudError as e:
                self._logger.error(f"Error on create of ibm database ({instance_id}) tags: {e}")

        password, ok = data.get_ok("adminpassword")
        if ok:
            admin_user = self._deployment_info(instance_id).get("admin_usernames", {}).get(ADMIN_USER_TYPE)
            self._change_password(instance_id, ADMIN_USER_TYPE, admin_user, password, data.timeout("update"))

        allowlist = effective_allowlist(data.get("allowlist"), data.get("whitelist"))
        if allowlist:
            self._set_allowlist(instance_id, allowlist, data.timeout("create"))

        autoscaling = expand_autoscaling(data.config.get("auto_scaling"))
        if autoscaling:
            self._set_autoscaling(instance_id, autoscaling, data.timeout("create"))

        for user in data.get("users", []):
            self._logger.debug(f"Creating database user {user.get('name')}")
            result = self._call(
                "creating database user",
                self._icd.create_database_user,
                id=instance_id,
                user_type=user["user_type"],
                user=expand_user(user),
            )
            self._wait_for_task(result, data.timeout("create"))

        self.read(data)

    def _create_parameters(self, data: ResourceData, initial_node_count: int) -> Dict[str, Any]:
        parameters: Dict[str, Any] = {}
        for members_attr, node_attr, _ in _SCALING_RESOURCES.values():
            members_value, members_set = data.get_ok(members_attr)
            if members_set:
                parameters[members_attr] = members_value
            node_value, node_set = data.get_ok(node_attr)
            if node_set:
                parameters[members_attr] = node_value * initial_node_count

        for attribute, parameter in _CREATE_PARAMETERS.items():
            value, ok = data.get_ok(attribute)
            if ok:
                parameters[parameter] = value

        parameters["service-endpoints"] = data.get("service_endpoints")
        return parameters

    # ------------------------------------------------------------------
    # read
    # ------------------------------------------------------------------

    def read(self, data: ResourceData) -> None:
        """
        Refresh all attributes of a database instance.

        The ID is cleared when the instance is not found or has been removed.
        """
        instance_id = data.id
        try:
            instance = self._call(
                "retrieving resource instance", self._rc.get_resource_instance, id=instance_id
            )
        except IBMResourceNotFoundError:
            self._logger.warning(f"Removing {instance_id} from state because it's not found via the API")
            data.set_id("")
            return

        state = instance.get("state") or ""
        if InstanceStatus.REMOVED.value in state:
            self._logger.warning(f"Removing {instance_id} from state because it's now in removed state")
            data.set_id("")
            return

        crn = instance.get("crn") or ""
        try:
            data.set("tags", self._tags().get_tags_using_crn(crn))
        except IBMCloudError as e:
            self._logger.error(f"Error on get of ibm Database tags ({instance_id}) tags: {e}")

        data.set("name", instance.get("name"))
        data.set("status", state)
        data.set("resource_group_id", instance.get("resource_group_id"))
        crn_parts = crn.split(":")
        if len(crn_parts) > 5:
            data.set("location", crn_parts[5])
        data.set("guid", instance.get("guid"))

        endpoint_type = "public"
        parameters = instance.get("parameters") or {}
        if "service-endpoints" in parameters:
            if parameters["service-endpoints"] == "private":
                endpoint_type = "private"
            data.set("service_endpoints", parameters["service-endpoints"])

        data.set("resource_name", instance.get("name"))
        data.set("resource_crn", crn)
        data.set("resource_status", state)
        data.set("resource_group_name", instance.get("resource_group_crn"))
        data.set(
            "resource_controller_url",
            f"{self.session.config.console_url}/services/{quote(crn, safe='')}",
        )

        catalog = CatalogResolver(self.session.global_catalog())
        service = catalog.entry_name(instance.get("resource_id"))
        data.set("service", service)
        data.set("plan", catalog.entry_name(instance.get("resource_plan_id")))

        deployment = self._deployment_info(instance_id)
        admin_user = (deployment.get("admin_usernames") or {}).get(ADMIN_USER_TYPE)
        data.set("adminuser", admin_user)
        data.set("version", deployment.get("version"))

        groups = self._call(
            "getting database groups", self._icd.list_deployment_scaling_groups, id=instance_id
        )
        data.set("groups", flatten_groups(groups))
        for attribute, value in (member_allocations(groups) or {}).items():
            data.set(attribute, value)

        autoscaling = self._call(
            "getting database autoscaling groups",
            self._icd.get_autoscaling_conditions,
            id=instance_id,
            group_id=SCALING_GROUP_ID,
        )
        data.set("auto_scaling", flatten_autoscaling(autoscaling))

        allowlist = self._call("getting database allowlist", self._icd.get_allowlist, id=instance_id)
        data.set("allowlist", flatten_allowlist(allowlist))

        users = [(u["name"], u["user_type"]) for u in data.get("users", [])]
        if admin_user:
            users.append((admin_user, ADMIN_USER_TYPE))
        data.set("connectionstrings", [
            self._connection_string(instance_id, service, name, user_type, endpoint_type).to_dict()
            for name, user_type in users
        ])

    def _deployment_info(self, instance_id: str) -> Dict[str, Any]:
        try:
            result = self._call(
                "getting database deployment info", self._icd.get_deployment_info, id=instance_id
            )
        except IBMResourceNotFoundError as e:
            raise IBMResourceNotFoundError(f"{REGION_NOT_FOUND_MESSAGE} {e}", status_code=404) from e
        return result.get("deployment") or {}

    def _connection_string(self, instance_id: str, service: str, user_name: str,
                           user_type: str, endpoint_type: str) -> ConnectionString:
        key = CONNECTION_KEYS.get(service)
        if key is None:
            raise ValidationError(
                f"Unrecognised database type during connection string lookup: {service}",
                {"service": service},
            )
        result = self._call(
            "getting database user connection string",
            self._icd.get_connection,
            id=instance_id,
            user_type=user_type,
            user_id=user_name,
            endpoint_type=endpoint_type,
        )
        connection = (result.get("connection") or {}).get(key) or {}
        return ConnectionString.from_api(user_name, connection)

    # ------------------------------------------------------------------
    # update
    # ------------------------------------------------------------------

    def update(self, data: ResourceData) -> None:
        """
        Apply configuration changes to a database instance.

        Raises:
            ValidationError: If the configuration or a scaling value is invalid
            IBMCloudError: For API, task and wait errors
        """
        self.validate(data)
        customize_diff(data, self._icd)
        instance_id = data.id
        update_timeout = data.timeout("update")

        changes: Dict[str, Any] = {}
        if data.has_change("name"):
            changes["name"] = data.get("name")
        if data.has_change("service_endpoints"):
            changes["parameters"] = {"service-endpoints": data.get("service_endpoints")}
        if changes:
            self._logger.info(f"Updating resource instance {instance_id}: {sorted(changes)}")
            self._call(
                "updating resource instance", self._rc.update_resource_instance, id=instance_id, **changes
            )
            self._waiters().wait_for_instance_update(instance_id, update_timeout)

        if data.has_change("tags"):
            old_tags, new_tags = data.get_change("tags")
            try:
                self._tags().update_tags_using_crn(old_tags, new_tags, data.get("resource_crn"))
            except IBMCloudError as e:
                self._logger.error(f"Error on update of Database ({instance_id}) tags: {e}")

        if data.has_change("node_count"):
            self._horizontal_scale(data, update_timeout)

        if data.has_change("configuration"):
            self._update_configuration(data, update_timeout)

        self._update_scaling_group(data, update_timeout)

        for group in ("cpu", "disk", "memory"):
            old_record = get_group_record(data.get_change("auto_scaling")[0], group)
            new_record = get_group_record(data.config.get("auto_scaling"), group)
            if _record_changed(old_record, new_record):
                payload = expand_autoscaling_group(group, new_record)
                if payload:
                    self._set_autoscaling(instance_id, {group: payload}, update_timeout)

        if data.has_change("adminpassword"):
            self._change_password(
                instance_id, ADMIN_USER_TYPE, data.get("adminuser"), data.get("adminpassword"), update_timeout
            )

        if data.has_changes("allowlist", "whitelist"):
            allowlist = effective_allowlist(data.get("allowlist"), data.get("whitelist"))
            self._set_allowlist(instance_id, allowlist or [], data.timeout("create"))

        if data.has_change("users"):
            self._update_users(data, update_timeout)

        self.read(data)

    def _horizontal_scale(self, data: ResourceData, timeout: float) -> None:
        node_count = data.get("node_count")
        self._logger.info(f"Scaling database {data.id} to {node_count} members")
        result = self._call(
            "horizontally scaling",
            self._icd.set_deployment_scaling_group,
            id=data.id,
            group_id=SCALING_GROUP_ID,
            group={"members": {"allocation_count": node_count}},
        )
        self._wait_for_task(result, timeout)

    def _update_configuration(self, data: ResourceData, timeout: float) -> None:
        service = data.get("service")
        if service not in CONFIGURABLE_SERVICES:
            raise ValidationError(f"given database type {service} is not configurable", {"service": service})
        configuration, ok = data.get_ok("configuration")
        if not ok:
            return
        try:
            document = json.loads(configuration)
        except ValueError as e:
            raise ValidationError(f"Error parsing database ({data.id}) configuration: {e}") from e
        result = self._call(
            "updating database configuration",
            self._icd.update_database_configuration,
            id=data.id,
            configuration=document,
        )
        self._wait_for_task(result, timeout)

    def _update_scaling_group(self, data: ResourceData, timeout: float) -> None:
        attributes = [a for resource in _SCALING_RESOURCES.values() for a in resource[:2]]
        if not data.has_changes(*attributes):
            return

        node_count = data.get("node_count")
        group: Dict[str, Any] = {}
        for resource, (members_attr, node_attr, field) in _SCALING_RESOURCES.items():
            if data.has_change(members_attr):
                group[resource] = {field: data.get(members_attr)}
            if data.has_changes(node_attr, "node_count"):
                per_node = data.get(node_attr)
                if per_node is not None and node_count is not None:
                    group[resource] = {field: per_node * node_count}

        self._logger.info(f"Updating scaling group of {data.id}: {group}")
        result = self._call(
            "updating database scaling group",
            self._icd.set_deployment_scaling_group,
            id=data.id,
            group_id=SCALING_GROUP_ID,
            group=group,
        )
        self._wait_for_task(result, timeout)

    def _update_users(self, data: ResourceData, timeout: float) -> None:
        old_users, new_users = data.get_change("users")
        added, removed = diff_users(old_users, new_users)

        for user in added:
            try:
                result = self._call(
                    "creating database user",
                    self._icd.create_database_user,
                    id=data.id,
                    user_type=user["user_type"],
                    user=expand_user(user),
                )
            except IBMCloudError as e:
                # Creation fails for existing users, so try a password change.
                self._logger.debug(f"Creating user {user['name']} failed, changing its password: {e}")
                self._change_password(data.id, user["user_type"], user["name"], user["password"], timeout)
                continue
            self._wait_for_task(result, timeout)

        for user in removed:
            self._logger.info(f"Deleting database user {user['name']}")
            result = self._call(
                "deleting database user",
                self._icd.delete_database_user,
                id=data.id,
                user_type=user["user_type"],
                username=user["name"],
            )
            self._wait_for_task(result, timeout)

    def _change_password(self, instance_id: str, user_type: str, username: str,
                         password: str, timeout: float) -> None:
        result = self._call(
            "changing database user password",
            self._icd.update_user,
            id=instance_id,
            user_type=user_type,
            username=username,
            user={"password": password},
        )
        self._wait_for_task(result, timeout)

    def _set_allowlist(self, instance_id: str, allowlist: List[Dict[str, Any]], timeout: float) -> None:
        result = self._call(
            "updating database allowlist",
            self._icd.set_allowlist,
            id=instance_id,
            ip_addresses=expand_allowlist(allowlist),
        )
        self._wait_for_task(result, timeout)

    def _set_autoscaling(self, instance_id: str, autoscaling: Dict[str, Any], timeout: float) -> None:
        result = self._call(
            "updating database auto_scaling",
            self._icd.set_autoscaling_conditions,
            id=instance_id,
            group_id=SCALING_GROUP_ID,
            autoscaling=autoscaling,
        )
        self._wait_for_task(result, timeout)

    # ------------------------------------------------------------------
    # delete / exists
    # ------------------------------------------------------------------

    def delete(self, data: ResourceData) -> None:
        """Delete the instance recursively and wait until it is removed."""
        instance_id = data.id
        try:
            self._call(
                "deleting resource instance",
                self._rc.delete_resource_instance,
                id=instance_id,
                recursive=True,
            )
        except (IBMResourceGoneError, IBMResourceNotFoundError) as e:
            # A prior delete leaves the instance in the removed state.
            self._logger.warning(f"Resource instance already deleted {e}")

        self._waiters().wait_for_instance_delete(instance_id, data.timeout("delete"))
        data.set_id("")

    def exists(self, data: ResourceData) -> bool:
        instance_id = data.id
        try:
            instance = self._call("getting database", self._rc.get_resource_instance, id=instance_id)
        except IBMResourceNotFoundError:
            return False
        if InstanceStatus.is_gone(instance.get("state")):
            self._logger.warning(
                f"Removing {instance_id} from state because it's in removed or pending_reclamation state"
            )
            data.set_id("")
            return False
        return instance.get("id") == instance_id
