"""User tag synchronization through the global tagging service."""
from typing import Any, Iterable, List, Optional

from ibmrp.infrastructure.logging.logger import get_logger
from ibmrp.providers.ibm.infrastructure.api_errors import call_api

logger = get_logger(__name__)

TAG_PATTERN = r"^[A-Za-z0-9:_ .-]+$"


class TagManager:
    """Reads and updates the user tags attached to a CRN."""

    def __init__(self, tagging_client: Any, env_tags: Optional[Iterable[str]] = None):
        """
        Args:
            tagging_client: GlobalTaggingV1 client
            env_tags: Tags attached to every resource in addition to configured ones
        """
        self._client = tagging_client
        self._env_tags = [t for t in (env_tags or []) if t]

    def get_tags_using_crn(self, crn: str) -> List[str]:
        """User tags attached to a resource, sorted by name."""
        result = call_api(
            "listing tags",
            self._client.list_tags,
            attached_to=crn,
            tag_type="user",
            limit=1000,
        )
        return sorted(item["name"] for item in result.get("items") or [])

    def update_tags_using_crn(self, old_tags: Optional[Iterable[str]],
                              new_tags: Optional[Iterable[str]], crn: str) -> None:
        """
        Detach removed tags and attach added ones. Environment tags are always kept.

        Args:
            old_tags: Tags currently recorded for the resource
            new_tags: Desired tags
            crn: Resource CRN
        """
        old = set(old_tags or [])
        new = set(new_tags or []) | set(self._env_tags)

        removed = sorted(old - new)
        added = sorted(new - old)
        resources = [{"resource_id": crn}]

        if removed:
            logger.debug(f"Detaching tags {removed} from {crn}")
            call_api(
                "detaching tags",
                self._client.detach_tag,
                resources=resources,
                tag_names=removed,
                tag_type="user",
            )
        if added:
            logger.debug(f"Attaching tags {added} to {crn}")
            call_api(
                "attaching tags",
                self._client.attach_tag,
                resources=resources,
                tag_names=added,
                tag_type="user",
            )
