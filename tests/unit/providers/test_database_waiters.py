"""Unit tests for DatabaseWaiters."""

from unittest.mock import Mock

import pytest
import requests
from ibm_cloud_sdk_core import ApiException

from ibmrp.config.schemas.polling_schema import PollingConfig
from ibmrp.infrastructure.exceptions import UnexpectedStateError, WaitTimeoutError
from ibmrp.providers.ibm.exceptions import (
    DeploymentNotReadyError,
    IBMCloudError,
    InstanceFailedError,
    InstanceNotFoundError,
    TaskFailedError,
    TaskTimeoutError,
)
from ibmrp.providers.ibm.infrastructure.handlers.database_waiters import DatabaseWaiters

INSTANCE_ID = "crn:v1:bluemix:public:databases-for-postgresql:us-south:a/acc:guid::"


def _task(status, **extra):
    task = {"id": "task-1", "status": status}
    task.update(extra)
    return {"task": task}


def _instance(state):
    return {"id": INSTANCE_ID, "state": state}


@pytest.mark.unit
class TestWaitForTask:
    """Test cases for the fixed-interval task poller."""

    @pytest.fixture(autouse=True)
    def _setup(self, fake_clock):
        self.clock = fake_clock
        self.rc = Mock()
        self.icd = Mock()
        self.waiters = DatabaseWaiters(self.rc, self.icd, sleep=fake_clock.sleep, clock=fake_clock.clock)

    def test_polls_until_completed(self):
        """Each poll waits the task interval before fetching the task."""
        # Arrange
        self.icd.get_task.side_effect = [_task("queued"), _task("running", progress_percent=40), _task("completed")]

        # Act
        self.waiters.wait_for_task("task-1", timeout=300)

        # Assert
        assert self.icd.get_task.call_count == 3
        self.icd.get_task.assert_called_with(id="task-1")
        assert self.clock.sleeps == [5.0, 5.0, 5.0]

    @pytest.mark.parametrize("status", ["complete", "", None])
    def test_other_success_statuses(self, status):
        self.icd.get_task.return_value = _task(status)

        self.waiters.wait_for_task("task-1", timeout=300)

        assert self.icd.get_task.call_count == 1

    def test_failed_task(self):
        self.icd.get_task.return_value = _task("failed", description="Scaling failed")

        with pytest.raises(TaskFailedError) as exc_info:
            self.waiters.wait_for_task("task-1", timeout=300)

        assert exc_info.value.task_id == "task-1"
        assert "Scaling failed" in str(exc_info.value)

    def test_timeout_checked_after_fetch(self):
        """A task still running once the deadline has passed times out."""
        self.icd.get_task.return_value = _task("running")

        with pytest.raises(TaskTimeoutError):
            self.waiters.wait_for_task("task-1", timeout=12)

        assert self.icd.get_task.call_count == 3
        assert self.clock.sleeps == [5.0, 5.0, 5.0]

    def test_short_timeout_still_fetches(self):
        """A timeout shorter than the interval does not fail a finished task."""
        self.icd.get_task.return_value = _task("completed")

        self.waiters.wait_for_task("task-1", timeout=2)

        self.icd.get_task.assert_called_once_with(id="task-1")
        assert self.clock.sleeps == [5.0]

    def test_fetch_error_is_wrapped(self):
        self.icd.get_task.side_effect = ApiException(500, message="Internal error")

        with pytest.raises(IBMCloudError, match="Database task task-1 errored") as exc_info:
            self.waiters.wait_for_task("task-1", timeout=300)

        assert exc_info.value.status_code == 500

    def test_custom_interval(self):
        waiters = DatabaseWaiters(self.rc, self.icd, polling=PollingConfig(task_interval=1),
                                  sleep=self.clock.sleep, clock=self.clock.clock)
        self.icd.get_task.return_value = _task("completed")

        waiters.wait_for_task("task-1", timeout=300)

        assert self.clock.sleeps == [1.0]


@pytest.mark.unit
class TestWaitForDeploymentReady:
    """Test cases for the deployment-ready retry."""

    @pytest.fixture(autouse=True)
    def _setup(self, fake_clock):
        self.clock = fake_clock
        self.icd = Mock()
        self.waiters = DatabaseWaiters(Mock(), self.icd, sleep=fake_clock.sleep, clock=fake_clock.clock)

    def test_ready_on_first_call(self):
        self.icd.get_deployment_info.return_value = {"deployment": {"id": INSTANCE_ID}}

        self.waiters.wait_for_deployment_ready(INSTANCE_ID)

        self.icd.get_deployment_info.assert_called_once_with(id=INSTANCE_ID)
        assert self.clock.sleeps == []

    def test_retries_with_quadratic_backoff(self):
        """Retries wait 10, 40 and 90 seconds."""
        self.icd.get_deployment_info.side_effect = [
            ApiException(404, message="Not Found"),
            ApiException(502, message="Bad Gateway"),
            {"deployment": {}},
        ]

        self.waiters.wait_for_deployment_ready(INSTANCE_ID)

        assert self.icd.get_deployment_info.call_count == 3
        assert self.clock.sleeps == [10.0, 40.0]

    def test_retries_connection_errors(self):
        """The management endpoint may refuse connections right after provisioning."""
        self.icd.get_deployment_info.side_effect = [
            requests.ConnectionError("connection refused"),
            {"deployment": {}},
        ]

        self.waiters.wait_for_deployment_ready(INSTANCE_ID)

        assert self.icd.get_deployment_info.call_count == 2
        assert self.clock.sleeps == [10.0]

    def test_gives_up_after_three_retries(self):
        """The last error is reported with the region hint."""
        self.icd.get_deployment_info.side_effect = ApiException(404, message="Not Found")

        with pytest.raises(DeploymentNotReadyError) as exc_info:
            self.waiters.wait_for_deployment_ready(INSTANCE_ID)

        assert self.icd.get_deployment_info.call_count == 4
        assert self.clock.sleeps == [10.0, 40.0, 90.0]
        assert "not found in the region set for the Provider" in str(exc_info.value)
        assert exc_info.value.status_code == 404


@pytest.mark.unit
class TestInstanceWaits:
    """Test cases for instance state polling."""

    @pytest.fixture(autouse=True)
    def _setup(self, fake_clock):
        self.clock = fake_clock
        self.rc = Mock()
        self.icd = Mock()
        self.icd.get_deployment_info.return_value = {"deployment": {}}
        self.waiters = DatabaseWaiters(self.rc, self.icd, sleep=fake_clock.sleep, clock=fake_clock.clock)

    def test_create_wait(self):
        """Create waits for the ICD API, then polls provisioning until active."""
        # Arrange
        self.rc.get_resource_instance.side_effect = [
            _instance("provisioning"), _instance("in progress"), _instance("active"),
        ]

        # Act
        result = self.waiters.wait_for_instance_create(INSTANCE_ID, timeout=3600)

        # Assert
        assert result["state"] == "active"
        self.icd.get_deployment_info.assert_called_once_with(id=INSTANCE_ID)
        self.rc.get_resource_instance.assert_called_with(id=INSTANCE_ID)
        assert self.clock.sleeps == [10.0, 10.0, 10.0]

    def test_create_failed_state(self):
        self.rc.get_resource_instance.return_value = _instance("failed")

        with pytest.raises(InstanceFailedError):
            self.waiters.wait_for_instance_create(INSTANCE_ID, timeout=3600)

    def test_create_not_found(self):
        self.rc.get_resource_instance.side_effect = ApiException(404, message="Not Found")

        with pytest.raises(InstanceNotFoundError):
            self.waiters.wait_for_instance_create(INSTANCE_ID, timeout=3600)

    def test_update_refuses_provisioning(self):
        """provisioning is not a pending state of an update."""
        self.rc.get_resource_instance.return_value = _instance("provisioning")

        with pytest.raises(UnexpectedStateError):
            self.waiters.wait_for_instance_update(INSTANCE_ID, timeout=3600)

    def test_update_timeout(self):
        self.rc.get_resource_instance.return_value = _instance("in progress")

        with pytest.raises(WaitTimeoutError):
            self.waiters.wait_for_instance_update(INSTANCE_ID, timeout=60)

    def test_delete_wait(self):
        self.rc.get_resource_instance.side_effect = [_instance("active"), _instance("removed")]

        result = self.waiters.wait_for_instance_delete(INSTANCE_ID, timeout=600)

        assert result["state"] == "removed"
        self.icd.get_deployment_info.assert_not_called()

    def test_delete_pending_reclamation(self):
        self.rc.get_resource_instance.return_value = _instance("pending_reclamation")

        assert self.waiters.wait_for_instance_delete(INSTANCE_ID, timeout=600)["state"] == "pending_reclamation"

    def test_delete_not_found_counts_as_removed(self):
        """A purged instance answers 404, which ends the delete wait."""
        self.rc.get_resource_instance.side_effect = ApiException(404, message="Not Found")

        result = self.waiters.wait_for_instance_delete(INSTANCE_ID, timeout=600)

        assert result == {"id": INSTANCE_ID}
