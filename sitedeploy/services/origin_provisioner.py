"""
Origin Provisioner
Ensures an S3 bucket exists and is configured as a public static-website origin
"""

from typing import Callable, Optional, Tuple

from sitedeploy.api.base_provider import ObjectStoreClient
from sitedeploy.api.exceptions import ProvisioningError
from sitedeploy.utils.config import Settings
from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)


# Regions whose website endpoint uses "s3-website-<region>"; all others use "s3-website.<region>"
# Reference: https://docs.aws.amazon.com/general/latest/gr/s3.html#s3_website_region_endpoints
DASH_WEBSITE_REGIONS = {
    "us-east-1",
    "us-west-1",
    "us-west-2",
    "eu-west-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-northeast-1",
    "sa-east-1",
    "us-gov-west-1",
}


def website_endpoint(bucket_name: str, region: str) -> str:
    """S3 static-website endpoint host for a bucket"""
    if region in DASH_WEBSITE_REGIONS:
        return f"{bucket_name}.s3-website-{region}.amazonaws.com"
    return f"{bucket_name}.s3-website.{region}.amazonaws.com"


class OriginProvisioner:
    """
    Create-or-reuse for the website origin.

    Handles:
    - Finding an existing bucket by name, creating it when absent
    - (Re-)applying website hosting, public-access unblocking and the
      public-read policy on every run
    - Compensating teardown of a bucket created by this run
    """

    def __init__(self, object_store: ObjectStoreClient, config: Settings):
        """
        Args:
            object_store: Origin client
            config: Settings (region and index document)
        """
        self.object_store = object_store
        self.config = config

    def ensure(
        self,
        name: str,
        on_created: Optional[Callable[[str], None]] = None,
    ) -> Tuple[str, bool]:
        """
        Make sure the origin exists and is publicly serving as a website.

        ``on_created`` fires as soon as the provider confirms a creation and
        before any configuration is applied, so a caller can schedule teardown
        even when a later configuration call fails.

        Args:
            name: Bucket name
            on_created: Optional callback receiving the bucket name

        Returns:
            Tuple of (website_endpoint, created)

        Raises:
            ProviderError: If creation or configuration is rejected
        """
        logger.info(f"Ensuring website origin: {name}")

        created = False
        if name in self.object_store.list_all():
            logger.info(f"Bucket already exists: {name}")
        else:
            logger.info(f"Creating bucket: {name}")
            self.object_store.create(name)
            created = True
            logger.info(f"✅ Bucket created: {name}")
            if on_created is not None:
                on_created(name)

        self.configure(name)

        endpoint = website_endpoint(name, self.config.aws_region)
        logger.info(f"Site available at: http://{endpoint}")
        return endpoint, created

    def configure(self, name: str) -> None:
        """
        Apply website hosting and public read access. Idempotent.

        The error document equals the index document so client-side routes
        of single-page apps resolve to the app shell.
        """
        index_document = self.config.index_document

        logger.debug(f"Enabling static website hosting on {name}")
        self.object_store.enable_website_hosting(name, index_document, index_document)

        logger.debug(f"Removing public access block on {name}")
        self.object_store.unblock_public_access(name)

        logger.debug(f"Applying public-read policy on {name}")
        self.object_store.set_public_read_policy(name)

    def teardown(self, name: str) -> bool:
        """
        Empty and delete the bucket. Best-effort: failures are logged, never raised.

        Returns:
            True if the bucket was deleted
        """
        logger.warning(f"Rolling back: deleting S3 bucket {name}")

        try:
            deleted = self.object_store.delete_all_objects(name)
            logger.info(f"  Removed {deleted} object(s) from {name}")
        except ProvisioningError as e:
            logger.error(f"  Could not empty bucket {name}: {e}")

        try:
            self.object_store.delete(name)
        except ProvisioningError as e:
            logger.error(f"❌ Could not delete bucket {name}: {e}")
            return False

        logger.info(f"✅ S3 bucket deleted: {name}")
        return True
