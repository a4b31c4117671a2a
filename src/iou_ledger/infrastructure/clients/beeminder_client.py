"""
Beeminder client implementation.

Fetches goals and goal datapoints using a personal auth token.
"""

import logging
from typing import Any

import requests

from iou_ledger.domain.entry import GoalDatapoint
from iou_ledger.infrastructure.clients.http import JsonApiClient
from iou_ledger.utils.exceptions import ApiClientError
from iou_ledger.utils.parameters import BeeminderConfig

logger = logging.getLogger(__name__)


class BeeminderClient(JsonApiClient):
    """Beeminder REST client."""

    service_name = "Beeminder"

    def __init__(self, config: BeeminderConfig, session: requests.Session | None = None) -> None:
        """
        Initialize Beeminder client.

        Args:
            config: Beeminder configuration.
            session: Optional requests session.
        """
        super().__init__(config.timeout_seconds, session)
        self.config = config
        self.user_url = f"{config.base_url.rstrip('/')}/users/{config.username}"

    def _auth_params(self) -> dict[str, Any]:
        return {"auth_token": self.config.api_token}

    def list_goals(self) -> list[str]:
        """
        List the user's goal slugs.

        Returns:
            Goal slugs sorted alphabetically.
        """
        goals = self._get_json(f"{self.user_url}/goals.json", self._auth_params())
        return sorted(goal["slug"] for goal in goals)

    def fetch_datapoints(self, goal: str | None = None) -> list[GoalDatapoint]:
        """
        Fetch all datapoints of a goal.

        Args:
            goal: Goal slug. Defaults to the configured goal.

        Returns:
            Datapoints in API order.

        Raises:
            ApiClientError: If the request fails or a datapoint is invalid.
        """
        goal = goal or self.config.goal
        data = self._get_json(
            f"{self.user_url}/goals/{goal}/datapoints.json", self._auth_params()
        )

        try:
            datapoints = [GoalDatapoint.model_validate(point) for point in data]
        except (TypeError, ValueError) as e:
            raise ApiClientError(f"Invalid Beeminder datapoint for goal {goal}: {e}") from e

        logger.info(f"Received {len(datapoints)} datapoints from Beeminder goal {goal}")
        return datapoints
