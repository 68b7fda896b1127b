"""
Provider Factory
Builds the bundle of cloud clients the deployment core is constructed with
"""

from dataclasses import dataclass

import boto3

from sitedeploy.api.base_provider import CDNClient, DNSClient, ObjectStoreClient
from sitedeploy.api.cloudfront_client import CloudFrontCDN
from sitedeploy.api.route53_client import Route53DNS
from sitedeploy.api.s3_client import S3ObjectStore
from sitedeploy.utils.config import Settings
from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)

# CloudFront and Route53 are global services served from us-east-1
GLOBAL_REGION = "us-east-1"


@dataclass(frozen=True)
class ProviderClients:
    """Object store, CDN and DNS clients for one deployment run"""
    object_store: ObjectStoreClient
    cdn: CDNClient
    dns: DNSClient


def create_provider_clients(config: Settings) -> ProviderClients:
    """
    Create boto3-backed clients from settings.

    Explicit keys are used when both are configured; otherwise boto3 falls
    back to its default credential chain (env, shared config, instance role).

    Args:
        config: Settings instance

    Returns:
        ProviderClients bundle
    """
    session_kwargs = {"region_name": config.aws_region}
    if config.has_static_credentials():
        session_kwargs["aws_access_key_id"] = config.aws_access_key_id
        session_kwargs["aws_secret_access_key"] = config.aws_secret_access_key

    session = boto3.Session(**session_kwargs)

    logger.info(f"Creating AWS clients (origin region: {config.aws_region})")

    return ProviderClients(
        object_store=S3ObjectStore(session.client("s3", region_name=config.aws_region), config.aws_region),
        cdn=CloudFrontCDN(session.client("cloudfront", region_name=GLOBAL_REGION)),
        dns=Route53DNS(session.client("route53", region_name=GLOBAL_REGION)),
    )
