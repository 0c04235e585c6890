"""Polling helpers for ICD tasks and resource instance states."""
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ibmrp.config.schemas.polling_schema import PollingConfig
from ibmrp.domain.database.value_objects import InstanceStatus, TaskStatus
from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.infrastructure.resilience import QuadraticBackoffStrategy, retry_call
from ibmrp.infrastructure.waiters import StateChangeConf
from ibmrp.providers.ibm.exceptions import (
    DeploymentNotReadyError,
    IBMCloudError,
    IBMResourceNotFoundError,
    InstanceFailedError,
    InstanceNotFoundError,
    TaskFailedError,
    TaskTimeoutError,
)
from ibmrp.providers.ibm.infrastructure.api_errors import call_api

logger = get_logger(__name__)

REGION_NOT_FOUND_MESSAGE = (
    "The database instance was not found in the region set for the Provider, or the default "
    "of us-south. Specify the correct region in the provider definition, or create a provider "
    "alias for the correct region."
)

CREATE_PENDING = (
    InstanceStatus.PROVISIONING.value,
    InstanceStatus.IN_PROGRESS.value,
    InstanceStatus.INACTIVE.value,
)
UPDATE_PENDING = (
    InstanceStatus.IN_PROGRESS.value,
    InstanceStatus.INACTIVE.value,
)
DELETE_PENDING = (
    InstanceStatus.IN_PROGRESS.value,
    InstanceStatus.INACTIVE.value,
    InstanceStatus.ACTIVE.value,
)
ACTIVE_TARGET = (InstanceStatus.ACTIVE.value,)
DELETE_TARGET = (
    InstanceStatus.REMOVED.value,
    InstanceStatus.PENDING_RECLAMATION.value,
)


class DatabaseWaiters:
    """Blocking waits used by the database instance handler."""

    def __init__(self, resource_controller: Any, cloud_databases: Any,
                 polling: Optional[PollingConfig] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            resource_controller: ResourceControllerV2 client
            cloud_databases: CloudDatabasesV5 client
            polling: Poll intervals and retry settings
            sleep: Sleep function
            clock: Monotonic clock
        """
        self._rc = resource_controller
        self._icd = cloud_databases
        self._polling = polling or PollingConfig()
        self._sleep = sleep
        self._clock = clock

    def wait_for_task(self, task_id: str, timeout: float) -> None:
        """
        Poll an ICD task at a fixed interval until it finishes.

        Args:
            task_id: Task ID returned by a mutating ICD call
            timeout: Seconds before giving up

        Raises:
            TaskFailedError: If the task fails
            TaskTimeoutError: If the timeout elapses first
            IBMCloudError: If the task cannot be fetched
        """
        deadline = self._clock() + timeout
        while True:
            self._sleep(self._polling.task_interval)
            try:
                result = call_api("getting database task", self._icd.get_task, id=task_id)
            except IBMCloudError as e:
                raise IBMCloudError(
                    f"Database task {task_id} errored: {e}", status_code=e.status_code
                ) from e

            task = result.get("task") or {}
            status = task.get("status")
            if status == TaskStatus.FAILED.value:
                description = task.get("description")
                message = f"Database task {task_id} failed"
                raise TaskFailedError(task_id, f"{message}: {description}" if description else message)
            if TaskStatus.is_success(status):
                logger.debug(f"Database task {task_id} completed")
                return
            logger.debug(f"Database task {task_id} is {status}, progress {task.get('progress_percent')}%")
            if self._clock() >= deadline:
                raise TaskTimeoutError(task_id, timeout)

    def wait_for_deployment_ready(self, instance_id: str) -> None:
        """
        Wait until the ICD API serves the deployment, retrying with quadratic back-off.

        Raises:
            DeploymentNotReadyError: If the deployment is still unreachable after all retries
        """
        def fetch_deployment() -> Dict[str, Any]:
            try:
                return call_api("getting deployment info", self._icd.get_deployment_info, id=instance_id)
            except IBMResourceNotFoundError as e:
                raise IBMResourceNotFoundError(f"{REGION_NOT_FOUND_MESSAGE} {e}", status_code=404) from e

        strategy = QuadraticBackoffStrategy(
            max_attempts=self._polling.deployment_ready_attempts,
            base_delay=self._polling.deployment_ready_base_delay,
            retryable_exceptions=(IBMCloudError,),
        )
        try:
            retry_call(fetch_deployment, strategy=strategy, sleep=self._sleep)
        except IBMCloudError as e:
            raise DeploymentNotReadyError(instance_id, e) from e

    def _instance_refresh(self, instance_id: str, operation: str) -> Callable[[], Tuple[Any, str]]:
        def refresh() -> Tuple[Any, str]:
            try:
                instance = call_api(
                    "getting resource instance", self._rc.get_resource_instance, id=instance_id
                )
            except IBMResourceNotFoundError as e:
                raise InstanceNotFoundError(instance_id) from e
            state = instance.get("state", "")
            if state == InstanceStatus.FAILED.value:
                raise InstanceFailedError(instance_id, operation)
            return instance, state
        return refresh

    def _delete_refresh(self, instance_id: str) -> Callable[[], Tuple[Any, str]]:
        def refresh() -> Tuple[Any, str]:
            try:
                instance = call_api(
                    "getting resource instance", self._rc.get_resource_instance, id=instance_id
                )
            except IBMResourceNotFoundError:
                # Already purged by the resource controller.
                return {"id": instance_id}, InstanceStatus.REMOVED.value
            state = instance.get("state", "")
            if state == InstanceStatus.FAILED.value:
                raise InstanceFailedError(instance_id, "delete")
            return instance, state
        return refresh

    def _state_change(self, pending, target, refresh, timeout: float) -> StateChangeConf:
        return StateChangeConf(
            pending=pending,
            target=target,
            refresh=refresh,
            timeout=timeout,
            delay=self._polling.instance_delay,
            min_timeout=self._polling.instance_min_timeout,
            not_found_checks=self._polling.not_found_checks,
            sleep=self._sleep,
            clock=self._clock,
        )

    def wait_for_instance_create(self, instance_id: str, timeout: float) -> Dict[str, Any]:
        """Wait for the ICD API and then for a new instance to become active."""
        self.wait_for_deployment_ready(instance_id)
        conf = self._state_change(
            CREATE_PENDING, ACTIVE_TARGET, self._instance_refresh(instance_id, "create"), timeout
        )
        return conf.wait_for_state()

    def wait_for_instance_update(self, instance_id: str, timeout: float) -> Dict[str, Any]:
        """Wait for the ICD API and then for an updated instance to become active."""
        self.wait_for_deployment_ready(instance_id)
        conf = self._state_change(
            UPDATE_PENDING, ACTIVE_TARGET, self._instance_refresh(instance_id, "update"), timeout
        )
        return conf.wait_for_state()

    def wait_for_instance_delete(self, instance_id: str, timeout: float) -> Dict[str, Any]:
        """Wait for a deleted instance to reach removed or pending_reclamation."""
        conf = self._state_change(
            DELETE_PENDING, DELETE_TARGET, self._delete_refresh(instance_id), timeout
        )
        return conf.wait_for_state()
