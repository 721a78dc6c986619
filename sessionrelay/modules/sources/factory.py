"""
Source Factory.

Builds one pull adapter per configured cloud account.
"""

import logging
from typing import List, Optional

from ...config.provider import CloudConfig
from ..aggregator import Aggregator
from ..notify import Publisher
from .cloud import HttpCloudEventSource
from .pull import PullSourceAdapter

logger = logging.getLogger(__name__)


class SourceFactory:
    """Composition root for pull sources."""

    @staticmethod
    def build_pull_adapters(
        cloud_config: CloudConfig,
        aggregator: Aggregator,
        notifier: Optional[Publisher] = None,
    ) -> List[PullSourceAdapter]:
        """
        Build pull adapters.

        Args:
            cloud_config: Cloud section from the config provider
            aggregator: Shared aggregator
            notifier: Publisher for contact request notifications

        Returns:
            One adapter per account (empty when none are configured)
        """
        if not cloud_config.is_configured:
            logger.info("No cloud accounts configured; running with push sources only")
            return []

        adapters = []
        for account in cloud_config.accounts:
            adapters.append(
                PullSourceAdapter(
                    source_id=account.username,
                    event_source=HttpCloudEventSource(cloud_config.api_url),
                    credential=account.password,
                    aggregator=aggregator,
                    notifier=notifier,
                    poll_interval=cloud_config.poll_interval,
                )
            )
        logger.info(f"Built {len(adapters)} cloud source(s) against {cloud_config.api_url}")
        return adapters
