"""
Base Provider Interfaces
Abstract base classes for the object-store, CDN and DNS collaborators
the deployment core depends on.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Tuple


class HostedZone(NamedTuple):
    """A DNS zone visible to the account"""
    id: str
    name: str


class ObjectStoreClient(ABC):
    """
    Abstract object store (website origin) client.
    All origin implementations must inherit this class.
    """

    @abstractmethod
    def list_all(self) -> List[str]:
        """
        List every origin (bucket) name visible to the account.

        Returns:
            List of bucket names
        """
        pass

    @abstractmethod
    def create(self, name: str) -> None:
        """
        Create a new origin.

        Raises:
            ProviderError: If the provider rejects the creation
        """
        pass

    @abstractmethod
    def enable_website_hosting(self, name: str, index_document: str, error_document: str) -> None:
        """
        Turn on website-hosting mode for the origin.

        Args:
            name: Origin name
            index_document: Key served for directory requests
            error_document: Key served for missing keys
        """
        pass

    @abstractmethod
    def unblock_public_access(self, name: str) -> None:
        """Remove public-access blocks so a public policy can be attached"""
        pass

    @abstractmethod
    def set_public_read_policy(self, name: str) -> None:
        """Attach a read-only GetObject policy for everyone"""
        pass

    @abstractmethod
    def put_object(self, name: str, key: str, body: bytes, content_type: str) -> None:
        """
        Store one object, overwriting any existing object under the same key.
        """
        pass

    @abstractmethod
    def delete_all_objects(self, name: str) -> int:
        """
        Delete every object in the origin.

        Returns:
            Number of objects deleted
        """
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """Delete the (empty) origin"""
        pass

    def get_provider_name(self) -> str:
        return self.__class__.__name__


class CDNClient(ABC):
    """
    Abstract content-delivery client.
    """

    @abstractmethod
    def create_distribution(self, config: Dict[str, Any]) -> Tuple[str, str]:
        """
        Create a distribution.

        Args:
            config: Provider distribution configuration

        Returns:
            Tuple of (domain_name, distribution_id)
        """
        pass

    @abstractmethod
    def get_config(self, distribution_id: str) -> Tuple[Dict[str, Any], str]:
        """
        Fetch a distribution's configuration.

        Returns:
            Tuple of (config, concurrency_token)
        """
        pass

    @abstractmethod
    def update_config(self, distribution_id: str, config: Dict[str, Any], concurrency_token: str) -> str:
        """
        Submit a new configuration.

        Returns:
            The new concurrency token
        """
        pass

    @abstractmethod
    def delete_distribution(self, distribution_id: str, concurrency_token: str) -> None:
        """Delete a disabled distribution"""
        pass

    @abstractmethod
    def get_status(self, distribution_id: str) -> str:
        """
        Get the distribution's propagation status.

        Returns:
            "InProgress" or "Deployed"
        """
        pass

    def get_provider_name(self) -> str:
        return self.__class__.__name__


class DNSClient(ABC):
    """
    Abstract DNS client.
    """

    @abstractmethod
    def list_zones(self) -> List[HostedZone]:
        """
        List every zone visible to the account.

        Zone names are returned in trailing-dot form, e.g. "example.com."
        """
        pass

    @abstractmethod
    def upsert_alias_record(self, zone_id: str, name: str, target_domain: str, alias_zone_id: str) -> str:
        """
        Create or replace an alias record.

        Args:
            zone_id: Zone holding the record
            name: Fully qualified record name (trailing dot)
            target_domain: Alias target (trailing dot)
            alias_zone_id: Zone id the provider uses to evaluate the alias target

        Returns:
            Provider change id
        """
        pass

    def get_provider_name(self) -> str:
        return self.__class__.__name__
