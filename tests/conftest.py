"""
Shared fixtures: in-memory fakes for the object store, CDN and DNS clients.
No network access and no AWS credentials are needed.
"""

import copy
import itertools

import pytest

from sitedeploy.api.base_provider import CDNClient, DNSClient, HostedZone, ObjectStoreClient
from sitedeploy.api.exceptions import ProviderError
from sitedeploy.api.provider_factory import ProviderClients
from sitedeploy.models import DeploymentRequest
from sitedeploy.utils.config import Settings


CERT_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/abc-123"
REGION = "us-east-1"


class _FailureInjection:
    """Mixin: ``fail_on[operation] = exception`` makes that operation raise."""

    def _init_failures(self):
        self.calls = []
        self.fail_on = {}

    def _record(self, operation, *args):
        self.calls.append((operation,) + args)
        error = self.fail_on.get(operation)
        if error is not None:
            raise error

    def called(self, operation):
        return [c for c in self.calls if c[0] == operation]


class FakeObjectStore(_FailureInjection, ObjectStoreClient):

    def __init__(self, existing=()):
        self._init_failures()
        self.buckets = {name: {} for name in existing}
        self.website = {}
        self.public = set()
        self.policies = {}

    def list_all(self):
        self._record("list_all")
        return list(self.buckets)

    def create(self, name):
        self._record("create", name)
        if name in self.buckets:
            raise ProviderError("CreateBucket failed: exists", code="BucketAlreadyOwnedByYou")
        self.buckets[name] = {}

    def enable_website_hosting(self, name, index_document, error_document):
        self._record("enable_website_hosting", name, index_document, error_document)
        self.website[name] = (index_document, error_document)

    def unblock_public_access(self, name):
        self._record("unblock_public_access", name)
        self.public.add(name)

    def set_public_read_policy(self, name):
        self._record("set_public_read_policy", name)
        self.policies[name] = "public-read"

    def put_object(self, name, key, body, content_type):
        self._record("put_object", name, key)
        self.buckets[name][key] = (body, content_type)

    def delete_all_objects(self, name):
        self._record("delete_all_objects", name)
        count = len(self.buckets[name])
        self.buckets[name].clear()
        return count

    def delete(self, name):
        self._record("delete", name)
        if self.buckets.get(name):
            raise ProviderError("DeleteBucket failed: not empty", code="BucketNotEmpty")
        self.buckets.pop(name, None)


class FakeCDN(_FailureInjection, CDNClient):
    """
    Distributions keyed by id. ``statuses`` is consumed by get_status; once
    empty every distribution reports "Deployed".
    """

    def __init__(self):
        self._init_failures()
        self.distributions = {}
        self.statuses = []
        self._ids = itertools.count(1)
        self._etags = itertools.count(1)

    def _next_etag(self):
        return f"ETAG{next(self._etags)}"

    def create_distribution(self, config):
        self._record("create_distribution", config)
        n = next(self._ids)
        dist_id = f"EDIST{n}"
        self.distributions[dist_id] = {"config": copy.deepcopy(config), "etag": self._next_etag()}
        return f"d{n}.cloudfront.net", dist_id

    def _get(self, distribution_id):
        if distribution_id not in self.distributions:
            raise ProviderError("NoSuchDistribution", code="NoSuchDistribution")
        return self.distributions[distribution_id]

    def get_config(self, distribution_id):
        self._record("get_config", distribution_id)
        dist = self._get(distribution_id)
        return copy.deepcopy(dist["config"]), dist["etag"]

    def update_config(self, distribution_id, config, concurrency_token):
        self._record("update_config", distribution_id, config.get("Enabled"))
        dist = self._get(distribution_id)
        if concurrency_token != dist["etag"]:
            raise ProviderError("PreconditionFailed", code="PreconditionFailed")
        dist["config"] = copy.deepcopy(config)
        dist["etag"] = self._next_etag()
        return dist["etag"]

    def delete_distribution(self, distribution_id, concurrency_token):
        self._record("delete_distribution", distribution_id)
        dist = self._get(distribution_id)
        if concurrency_token != dist["etag"]:
            raise ProviderError("PreconditionFailed", code="PreconditionFailed")
        if dist["config"].get("Enabled"):
            raise ProviderError("DistributionNotDisabled", code="DistributionNotDisabled")
        del self.distributions[distribution_id]

    def get_status(self, distribution_id):
        self._record("get_status", distribution_id)
        self._get(distribution_id)
        if self.statuses:
            return self.statuses.pop(0)
        return "Deployed"


class FakeDNS(_FailureInjection, DNSClient):

    def __init__(self, zones=()):
        self._init_failures()
        self.zones = [HostedZone(id=zone_id, name=name) for zone_id, name in zones]
        self.records = {}
        self._changes = itertools.count(1)

    def list_zones(self):
        self._record("list_zones")
        return list(self.zones)

    def upsert_alias_record(self, zone_id, name, target_domain, alias_zone_id):
        self._record("upsert_alias_record", zone_id, name, target_domain, alias_zone_id)
        self.records[(zone_id, name)] = (target_domain, alias_zone_id)
        return f"/change/C{next(self._changes)}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    """Settings isolated from .env, with instant CloudFront polling."""
    return Settings(
        _env_file=None,
        aws_access_key_id="",
        aws_secret_access_key="",
        aws_region=REGION,
        ssl_cert_arn=CERT_ARN,
        upload_workers=1,
        edge_teardown_timeout_seconds=30,
        edge_poll_min_seconds=0,
        edge_poll_max_seconds=0,
        log_to_file=False,
    )


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def cdn():
    return FakeCDN()


@pytest.fixture
def dns():
    return FakeDNS(zones=[("ZEXAMPLE", "example.com."), ("ZOTHER", "other.org.")])


@pytest.fixture
def clients(object_store, cdn, dns):
    return ProviderClients(object_store=object_store, cdn=cdn, dns=dns)


@pytest.fixture
def site_dir(tmp_path):
    """A small static site: index.html, a stylesheet and a nested image."""
    root = tmp_path / "dist"
    (root / "css").mkdir(parents=True)
    (root / "img" / "icons").mkdir(parents=True)
    (root / "index.html").write_text("<h1>hello</h1>")
    (root / "css" / "site.css").write_text("body { color: red; }")
    (root / "img" / "icons" / "logo.png").write_bytes(b"\x89PNG\r\n")
    return root


@pytest.fixture
def request_for(site_dir):
    def _make(name="myblog", domain="example.com", content_root=None, region=REGION):
        return DeploymentRequest(
            name=name,
            domain=domain,
            content_root=content_root if content_root is not None else site_dir,
            certificate_arn=CERT_ARN,
            region=region,
        )
    return _make
