"""
API Layer - Cloud Provider Clients
Abstract collaborator interfaces and their boto3 implementations
"""

# Base interfaces
from sitedeploy.api.base_provider import (
    CDNClient,
    DNSClient,
    HostedZone,
    ObjectStoreClient
)

# AWS implementations
from sitedeploy.api.s3_client import S3ObjectStore
from sitedeploy.api.cloudfront_client import CloudFrontCDN
from sitedeploy.api.route53_client import Route53DNS

# Factory
from sitedeploy.api.provider_factory import ProviderClients, create_provider_clients

# Exceptions (shared across providers)
from sitedeploy.api.exceptions import (
    ProvisioningError,
    ValidationError,
    ProviderError,
    ThrottlingError,
    NotFoundError
)

__all__ = [
    # Base
    "ObjectStoreClient",
    "CDNClient",
    "DNSClient",
    "HostedZone",

    # Providers
    "S3ObjectStore",
    "CloudFrontCDN",
    "Route53DNS",

    # Factory
    "ProviderClients",
    "create_provider_clients",

    # Exceptions
    "ProvisioningError",
    "ValidationError",
    "ProviderError",
    "ThrottlingError",
    "NotFoundError"
]
