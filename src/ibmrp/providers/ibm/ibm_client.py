"""IBM Cloud SDK client session."""
import threading
from typing import Any, Callable, Dict, Optional

from ibm_cloud_databases.cloud_databases_v5 import CloudDatabasesV5
from ibm_cloud_sdk_core.authenticators import IAMAuthenticator
from ibm_eventnotifications.event_notifications_v1 import EventNotificationsV1
from ibm_platform_services.global_catalog_v1 import GlobalCatalogV1
from ibm_platform_services.global_tagging_v1 import GlobalTaggingV1
from ibm_platform_services.resource_controller_v2 import ResourceControllerV2
from ibm_platform_services.resource_manager_v2 import ResourceManagerV2

from ibmrp.config.schemas.provider_schema import IBMProviderConfig
from ibmrp.domain.core.exceptions import ConfigurationError
from ibmrp.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

_PRODUCTION_URLS = {
    "iam": "https://iam.cloud.ibm.com",
    "resource_controller": "https://resource-controller.cloud.ibm.com",
    "resource_manager": "https://resource-controller.cloud.ibm.com",
    "global_catalog": "https://globalcatalog.cloud.ibm.com/api/v1",
    "global_tagging": "https://tags.global-search-tagging.cloud.ibm.com",
}

_STAGING_URLS = {
    "iam": "https://iam.test.cloud.ibm.com",
    "resource_controller": "https://resource-controller.test.cloud.ibm.com",
    "resource_manager": "https://resource-controller.test.cloud.ibm.com",
    "global_catalog": "https://globalcatalog.test.cloud.ibm.com/api/v1",
    "global_tagging": "https://tags.global-search-tagging.test.cloud.ibm.com",
}


class IBMClientSession:
    """
    Lazily built IBM Cloud SDK clients sharing one IAM authenticator.

    Each client is created on first access and cached for the session.
    """

    def __init__(self, config: IBMProviderConfig, authenticator: Optional[Any] = None):
        """
        Initialize the session.

        Args:
            config: Provider configuration
            authenticator: Authenticator to use instead of an IAM API key one

        Raises:
            ConfigurationError: If no authenticator is given and no API key is configured
        """
        self.config = config
        self._authenticator = authenticator
        self._clients: Dict[str, Any] = {}
        self._lock = threading.RLock()

    @property
    def region(self) -> str:
        return self.config.region

    @property
    def authenticator(self) -> Any:
        if self._authenticator is None:
            if self.config.api_key is None:
                raise ConfigurationError(
                    "IBM Cloud API key is not configured; set IC_API_KEY or provider.api_key",
                    missing_fields=["provider.api_key"],
                )
            self._authenticator = IAMAuthenticator(
                self.config.api_key.get_secret_value(),
                url=self._url("iam"),
            )
        return self._authenticator

    def _url(self, service: str) -> str:
        override = getattr(self.config.endpoints, service, None)
        if override:
            return override

        region = self.config.region
        private = self.config.visibility == "private"
        if service == "cloud_databases":
            host = f"api.{region}.private.databases.cloud.ibm.com" if private else f"api.{region}.databases.cloud.ibm.com"
            return f"https://{host}/v5/ibm"
        if service == "event_notifications":
            host = f"private.{region}.event-notifications.cloud.ibm.com" if private else f"{region}.event-notifications.cloud.ibm.com"
            return f"https://{host}/event-notifications"

        urls = _STAGING_URLS if self.config.environment == "staging" else _PRODUCTION_URLS
        url = urls[service]
        if private and service != "iam":
            url = url.replace("https://", "https://private.", 1)
        return url

    def _client(self, name: str, factory: Callable[..., Any]) -> Any:
        if name not in self._clients:
            with self._lock:
                if name not in self._clients:
                    client = factory(authenticator=self.authenticator)
                    client.set_service_url(self._url(name))
                    logger.debug(f"Created {name} client for {self._url(name)}")
                    self._clients[name] = client
        return self._clients[name]

    def resource_controller(self) -> ResourceControllerV2:
        return self._client("resource_controller", ResourceControllerV2)

    def resource_manager(self) -> ResourceManagerV2:
        return self._client("resource_manager", ResourceManagerV2)

    def global_catalog(self) -> GlobalCatalogV1:
        return self._client("global_catalog", GlobalCatalogV1)

    def global_tagging(self) -> GlobalTaggingV1:
        return self._client("global_tagging", GlobalTaggingV1)

    def cloud_databases(self) -> CloudDatabasesV5:
        return self._client("cloud_databases", CloudDatabasesV5)

    def event_notifications(self) -> EventNotificationsV1:
        return self._client("event_notifications", EventNotificationsV1)
