"""
AWS Route53 Client
boto3 implementation of the DNS collaborator
"""

from typing import List

from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from sitedeploy.api.base_provider import DNSClient, HostedZone
from sitedeploy.api.exceptions import ProviderError, ThrottlingError


class Route53DNS(DNSClient):
    """
    Route53 hosted-zone lookup and alias record management.
    """

    def __init__(self, client):
        """
        Args:
            client: boto3 Route53 client
        """
        self.client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ThrottlingError),
        reraise=True
    )
    def list_zones(self) -> List[HostedZone]:
        zones = []
        try:
            paginator = self.client.get_paginator("list_hosted_zones")
            for page in paginator.paginate():
                for zone in page.get("HostedZones", []):
                    # HostedZone.Id comes back as "/hostedzone/<ID>"
                    zones.append(HostedZone(id=zone["Id"].split("/")[-1], name=zone["Name"]))
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("ListHostedZones", e) from e
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderError.unexpected_shape("ListHostedZones", e) from e

        return zones

    def upsert_alias_record(self, zone_id: str, name: str, target_domain: str, alias_zone_id: str) -> str:
        change_batch = {
            "Comment": "Alias for CloudFront static site",
            "Changes": [
                {
                    "Action": "UPSERT",
                    "ResourceRecordSet": {
                        "Name": name,
                        "Type": "A",
                        "AliasTarget": {
                            "HostedZoneId": alias_zone_id,
                            "DNSName": target_domain,
                            "EvaluateTargetHealth": False,
                        },
                    },
                }
            ],
        }

        try:
            response = self.client.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch=change_batch,
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("ChangeResourceRecordSets", e) from e

        try:
            return response["ChangeInfo"]["Id"]
        except (KeyError, TypeError) as e:
            raise ProviderError.unexpected_shape("ChangeResourceRecordSets", e) from e
