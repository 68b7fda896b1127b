"""
AWS CloudFront Client
boto3 implementation of the content-delivery collaborator
"""

from typing import Any, Dict, Tuple

from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from sitedeploy.api.base_provider import CDNClient
from sitedeploy.api.exceptions import ProviderError, ThrottlingError


class CloudFrontCDN(CDNClient):
    """
    CloudFront distribution operations.
    CloudFront is a global service; the boto3 client should target us-east-1.
    """

    def __init__(self, client):
        """
        Args:
            client: boto3 CloudFront client
        """
        self.client = client

    def create_distribution(self, config: Dict[str, Any]) -> Tuple[str, str]:
        try:
            response = self.client.create_distribution(DistributionConfig=config)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("CreateDistribution", e) from e

        try:
            dist = response["Distribution"]
            return dist["DomainName"], dist["Id"]
        except (KeyError, TypeError) as e:
            raise ProviderError.unexpected_shape("CreateDistribution", e) from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ThrottlingError),
        reraise=True
    )
    def get_config(self, distribution_id: str) -> Tuple[Dict[str, Any], str]:
        try:
            response = self.client.get_distribution_config(Id=distribution_id)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("GetDistributionConfig", e) from e

        try:
            return response["DistributionConfig"], response["ETag"]
        except (KeyError, TypeError) as e:
            raise ProviderError.unexpected_shape("GetDistributionConfig", e) from e

    def update_config(self, distribution_id: str, config: Dict[str, Any], concurrency_token: str) -> str:
        try:
            response = self.client.update_distribution(
                Id=distribution_id,
                IfMatch=concurrency_token,
                DistributionConfig=config,
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("UpdateDistribution", e) from e

        return response.get("ETag", "")

    def delete_distribution(self, distribution_id: str, concurrency_token: str) -> None:
        try:
            self.client.delete_distribution(Id=distribution_id, IfMatch=concurrency_token)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("DeleteDistribution", e) from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ThrottlingError),
        reraise=True
    )
    def get_status(self, distribution_id: str) -> str:
        try:
            response = self.client.get_distribution(Id=distribution_id)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("GetDistribution", e) from e

        try:
            return response["Distribution"]["Status"]
        except (KeyError, TypeError) as e:
            raise ProviderError.unexpected_shape("GetDistribution", e) from e
