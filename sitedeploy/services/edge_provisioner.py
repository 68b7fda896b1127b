"""
Edge Provisioner
Creates the CloudFront distribution in front of the website origin and
tears it down again when a deployment is rolled back.
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_delay,
    stop_any,
    wait_exponential
)

from sitedeploy.api.base_provider import CDNClient
from sitedeploy.api.exceptions import ProvisioningError
from sitedeploy.utils.config import Settings
from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)


ORIGIN_ID = "S3-origin"

# AWS managed cache policy "CachingOptimized"
CACHING_OPTIMIZED_POLICY_ID = "658327ea-f89d-4fab-a63d-7e88639e58f6"

DEPLOYED = "Deployed"


class _stop_after_idle:
    """Stop once the accumulated backoff exceeds ``max_idle`` seconds."""

    def __init__(self, max_idle: float):
        self.max_idle = max_idle

    def __call__(self, retry_state) -> bool:
        return retry_state.idle_for >= self.max_idle


class EdgeProvisioner:
    """
    CloudFront distribution lifecycle for one site.

    Handles:
    - Building the distribution config (custom S3-website origin, HTTPS
      redirect, SNI certificate, single alias)
    - Creating the distribution without waiting for it to deploy
    - Polling distribution status with exponential backoff
    - Compensating teardown: disable, wait to settle, delete
    """

    def __init__(
        self,
        cdn: CDNClient,
        config: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            cdn: CDN client
            config: Settings (index document, polling bounds, caller reference prefix)
            sleep: Sleep function used between status polls
        """
        self.cdn = cdn
        self.config = config
        self._sleep = sleep

    def build_distribution_config(
        self,
        alias_host: str,
        origin_endpoint: str,
        certificate_id: str,
    ) -> Dict[str, Any]:
        """
        Build a CloudFront DistributionConfig for an S3 website endpoint.

        The S3 website endpoint only speaks HTTP, so the origin is HTTP-only;
        viewers are redirected to HTTPS at the edge.
        """
        return {
            # Must be unique per CreateDistribution call
            "CallerReference": f"{self.config.caller_reference_prefix}-{time.time_ns()}",
            "Aliases": {"Quantity": 1, "Items": [alias_host]},
            "DefaultRootObject": self.config.index_document,
            "Origins": {
                "Quantity": 1,
                "Items": [
                    {
                        "Id": ORIGIN_ID,
                        "DomainName": origin_endpoint,
                        "CustomOriginConfig": {
                            "HTTPPort": 80,
                            "HTTPSPort": 443,
                            "OriginProtocolPolicy": "http-only",
                            "OriginSslProtocols": {
                                "Quantity": 1,
                                "Items": ["TLSv1.2"],
                            },
                            "OriginReadTimeout": 30,
                            "OriginKeepaliveTimeout": 5,
                        },
                    }
                ],
            },
            "DefaultCacheBehavior": {
                "TargetOriginId": ORIGIN_ID,
                "ViewerProtocolPolicy": "redirect-to-https",
                "AllowedMethods": {
                    "Quantity": 2,
                    "Items": ["GET", "HEAD"],
                    "CachedMethods": {"Quantity": 2, "Items": ["GET", "HEAD"]},
                },
                "CachePolicyId": CACHING_OPTIMIZED_POLICY_ID,
                "Compress": True,
            },
            "ViewerCertificate": {
                "ACMCertificateArn": certificate_id,
                "SSLSupportMethod": "sni-only",
                "MinimumProtocolVersion": "TLSv1.2_2021",
            },
            "Comment": f"CloudFront distribution for {alias_host}",
            "Enabled": True,
        }

    def create(self, alias_host: str, origin_endpoint: str, certificate_id: str) -> Tuple[str, str]:
        """
        Create a distribution fronting ``origin_endpoint`` under ``alias_host``.

        The distribution starts in the "InProgress" state; this call does not
        wait for it to become Deployed.

        Args:
            alias_host: Custom hostname, e.g. "myblog.example.com"
            origin_endpoint: S3 website endpoint host
            certificate_id: ACM certificate ARN (us-east-1)

        Returns:
            Tuple of (distribution_domain, distribution_id)

        Raises:
            ProviderError: If CloudFront rejects the configuration
        """
        logger.info(f"Creating CloudFront distribution: alias={alias_host}, origin={origin_endpoint}")

        config = self.build_distribution_config(alias_host, origin_endpoint, certificate_id)
        domain_name, distribution_id = self.cdn.create_distribution(config)

        logger.info(f"✅ Distribution created: {distribution_id} ({domain_name})")
        return domain_name, distribution_id

    def wait_until_deployed(self, distribution_id: str, timeout_seconds: Optional[float] = None) -> bool:
        """
        Poll distribution status with exponential backoff until it is Deployed.

        Args:
            distribution_id: CloudFront distribution ID
            timeout_seconds: Upper bound on waiting (defaults to settings)

        Returns:
            True if Deployed within the bound, False on timeout or status error
        """
        timeout = timeout_seconds if timeout_seconds is not None else self.config.edge_teardown_timeout_seconds
        min_wait = self.config.edge_poll_min_seconds
        max_wait = self.config.edge_poll_max_seconds

        retrying = Retrying(
            stop=stop_any(stop_after_delay(timeout), _stop_after_idle(timeout)),
            wait=wait_exponential(multiplier=max(min_wait, 1), min=min_wait, max=max_wait),
            retry=retry_if_result(lambda status: status != DEPLOYED),
            sleep=self._sleep,
            before_sleep=lambda rs: logger.info(
                f"  Distribution status: {rs.outcome.result()}, "
                f"next check in {rs.next_action.sleep:.0f}s"
            ),
        )

        logger.info(f"⏳ Waiting for distribution {distribution_id} to deploy (up to {timeout:.0f}s)")
        try:
            retrying(self.cdn.get_status, distribution_id)
        except RetryError:
            logger.warning(f"Distribution {distribution_id} not deployed within {timeout:.0f}s")
            return False
        except ProvisioningError as e:
            logger.error(f"Could not read status of distribution {distribution_id}: {e}")
            return False

        logger.info(f"✅ Distribution {distribution_id} is Deployed")
        return True

    def teardown(self, distribution_id: str) -> bool:
        """
        Disable and delete a distribution. Best-effort: every sub-step failure
        is logged and swallowed, and this method never raises.

        CloudFront only deletes disabled distributions whose disablement has
        finished propagating, and every mutation needs the latest ETag.

        Returns:
            True if the distribution was deleted
        """
        logger.warning(f"Rolling back: deleting CloudFront distribution {distribution_id}")

        try:
            config, etag = self.cdn.get_config(distribution_id)
        except ProvisioningError as e:
            logger.error(f"  Could not fetch config of {distribution_id}: {e}")
        else:
            if config.get("Enabled", True):
                config["Enabled"] = False
                try:
                    self.cdn.update_config(distribution_id, config, etag)
                    logger.info(f"  Distribution {distribution_id} disabled")
                except ProvisioningError as e:
                    logger.error(f"  Could not disable {distribution_id}: {e}")

        if not self.wait_until_deployed(distribution_id):
            logger.warning(f"  Attempting delete of {distribution_id} before it settled")

        try:
            _, fresh_etag = self.cdn.get_config(distribution_id)
            self.cdn.delete_distribution(distribution_id, fresh_etag)
        except ProvisioningError as e:
            logger.error(f"❌ Could not delete distribution {distribution_id}: {e}")
            return False

        logger.info(f"✅ CloudFront distribution deleted: {distribution_id}")
        return True
