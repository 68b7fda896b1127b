"""
Name Provisioner
Resolves the Route53 hosted zone for a base domain and points a subdomain
at a CloudFront distribution with an alias record.
"""

from sitedeploy.api.base_provider import DNSClient
from sitedeploy.api.exceptions import NotFoundError
from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)


# Fixed hosted zone ID AWS uses for every CloudFront alias target
# Reference: https://docs.aws.amazon.com/Route53/latest/APIReference/API_AliasTarget.html
CLOUDFRONT_HOSTED_ZONE_ID = "Z2FDTNDATAQYW2"


def fqdn(name: str) -> str:
    """Normalise a DNS name to lowercase trailing-dot form"""
    return name.strip().lower().rstrip(".") + "."


class NameProvisioner:
    """
    DNS side of a deployment. Zones are never created here; the base
    domain's hosted zone must already exist in the account.
    """

    def __init__(self, dns: DNSClient):
        self.dns = dns

    def find_zone(self, base_domain: str) -> str:
        """
        Find the hosted zone whose name is exactly ``base_domain``.

        Args:
            base_domain: Apex domain, with or without trailing dot

        Returns:
            Hosted zone ID (without the "/hostedzone/" prefix)

        Raises:
            NotFoundError: If no zone matches
        """
        wanted = fqdn(base_domain)
        logger.info(f"Looking up hosted zone for {wanted}")

        for zone in self.dns.list_zones():
            if fqdn(zone.name) == wanted:
                logger.info(f"Found hosted zone ID: {zone.id}")
                return zone.id

        raise NotFoundError(f"Hosted zone for domain {wanted} not found", operation="ListHostedZones")

    def upsert_alias(self, zone_id: str, subdomain: str, base_domain: str, target_domain: str) -> str:
        """
        Create or replace the A alias ``<subdomain>.<base_domain>.`` -> ``<target_domain>.``.

        Target health evaluation is off: the target is a CloudFront edge.

        Returns:
            The record name that was written
        """
        record_name = fqdn(f"{subdomain}.{base_domain.rstrip('.')}")
        target = fqdn(target_domain)

        logger.info(f"Upserting alias record {record_name} -> {target}")
        change_id = self.dns.upsert_alias_record(zone_id, record_name, target, CLOUDFRONT_HOSTED_ZONE_ID)

        logger.info(f"✅ Route 53 record submitted for {record_name} (change {change_id})")
        return record_name
