"""
AWS S3 Object Store Client
boto3 implementation of the website-origin collaborator
"""

import json
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from sitedeploy.api.base_provider import ObjectStoreClient
from sitedeploy.api.exceptions import ProviderError, ThrottlingError
from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000


def public_read_policy(bucket_name: str) -> Dict[str, Any]:
    """Read-only public policy scoped to GetObject on the bucket contents"""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "PublicReadGetObject",
                "Effect": "Allow",
                "Principal": "*",
                "Action": "s3:GetObject",
                "Resource": f"arn:aws:s3:::{bucket_name}/*",
            }
        ],
    }


class S3ObjectStore(ObjectStoreClient):
    """
    S3 bucket operations needed to run a static-website origin.
    """

    def __init__(self, client, region: str):
        """
        Args:
            client: boto3 S3 client
            region: Region new buckets are created in
        """
        self.client = client
        self.region = region

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ThrottlingError),
        reraise=True
    )
    def list_all(self) -> List[str]:
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("ListBuckets", e) from e

        try:
            return [bucket["Name"] for bucket in response.get("Buckets", [])]
        except (KeyError, TypeError) as e:
            raise ProviderError.unexpected_shape("ListBuckets", e) from e

    def create(self, name: str) -> None:
        params: Dict[str, Any] = {"Bucket": name}
        # us-east-1 rejects an explicit LocationConstraint
        if self.region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}

        try:
            self.client.create_bucket(**params)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("CreateBucket", e) from e

    def enable_website_hosting(self, name: str, index_document: str, error_document: str) -> None:
        try:
            self.client.put_bucket_website(
                Bucket=name,
                WebsiteConfiguration={
                    "IndexDocument": {"Suffix": index_document},
                    "ErrorDocument": {"Key": error_document},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("PutBucketWebsite", e) from e

    def unblock_public_access(self, name: str) -> None:
        try:
            self.client.put_public_access_block(
                Bucket=name,
                PublicAccessBlockConfiguration={
                    "BlockPublicAcls": False,
                    "IgnorePublicAcls": False,
                    "BlockPublicPolicy": False,
                    "RestrictPublicBuckets": False,
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("PutPublicAccessBlock", e) from e

    def set_public_read_policy(self, name: str) -> None:
        try:
            self.client.put_bucket_policy(
                Bucket=name,
                Policy=json.dumps(public_read_policy(name)),
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("PutBucketPolicy", e) from e

    def put_object(self, name: str, key: str, body: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                Bucket=name,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("PutObject", e) from e

    def delete_all_objects(self, name: str) -> int:
        deleted = 0
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=name):
                keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
                for start in range(0, len(keys), DELETE_BATCH_SIZE):
                    batch = keys[start:start + DELETE_BATCH_SIZE]
                    response = self.client.delete_objects(
                        Bucket=name,
                        Delete={"Objects": batch, "Quiet": True},
                    )
                    errors = response.get("Errors", [])
                    if errors:
                        first = errors[0]
                        raise ProviderError(
                            f"DeleteObjects failed for {len(errors)} key(s), "
                            f"first: {first.get('Key')}: {first.get('Message')}",
                            code=first.get("Code"),
                            operation="DeleteObjects",
                        )
                    deleted += len(batch)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("DeleteObjects", e) from e

        logger.debug(f"Deleted {deleted} object(s) from {name}")
        return deleted

    def delete(self, name: str) -> None:
        try:
            self.client.delete_bucket(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            raise ProviderError.from_boto_error("DeleteBucket", e) from e
