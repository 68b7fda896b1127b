"""
Tests for content publishing, the rollback plan and the deployment state machine.

Run:
    python -m pytest tests/test_content_and_rollback.py -v
"""

import os

import pytest
from unittest.mock import MagicMock, patch

from sitedeploy.api.exceptions import ProviderError
from sitedeploy.models import (
    DeploymentRequest,
    DeploymentResult,
    DeploymentStage,
    DeploymentState,
    InvalidStageTransition,
    PIPELINE_STAGES,
)
from sitedeploy.services.content_publisher import (
    DEFAULT_CONTENT_TYPE,
    ContentPublisher,
    content_size,
    get_content_type,
    walk_content,
)
from sitedeploy.services.rollback import RollbackPlan


ORIGIN = "myblog.example.com"


def _deny_listing(dirname):
    """Patch os.scandir so listing any directory named ``dirname`` fails."""
    real_scandir = os.scandir

    def _scandir(path="."):
        if os.path.basename(os.fspath(path)) == dirname:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    return patch("os.scandir", side_effect=_scandir)


# ===========================================================================
# 1. Content enumeration and MIME types
# ===========================================================================

class TestWalkContent:

    def test_relative_posix_keys_sorted(self, site_dir):
        keys = [f.relative_path for f in walk_content(site_dir)]
        assert keys == ["css/site.css", "img/icons/logo.png", "index.html"]

    def test_sizes(self, site_dir):
        files = walk_content(site_dir)
        assert sum(f.size_bytes for f in files) == content_size(site_dir)
        assert content_size(site_dir) == len("<h1>hello</h1>") + len("body { color: red; }") + 6

    def test_empty_folder(self, tmp_path):
        assert walk_content(tmp_path) == []
        assert content_size(tmp_path) == 0

    def test_unlistable_directory_raises(self, site_dir):
        with _deny_listing("img"):
            with pytest.raises(PermissionError):
                walk_content(site_dir)

    def test_dangling_symlink_raises(self, site_dir, tmp_path):
        (site_dir / "app.js").symlink_to(tmp_path / "missing.js")
        with pytest.raises(OSError, match="broken link"):
            walk_content(site_dir)


class TestGetContentType:

    @pytest.mark.parametrize("filename,expected", [
        ("index.html", "text/html"),
        ("css/site.css", "text/css"),
        ("app.JS", "application/javascript"),
        ("img/logo.svg", "image/svg+xml"),
        ("fonts/a.woff2", "font/woff2"),
    ])
    def test_known_extensions(self, filename, expected):
        assert get_content_type(filename) == expected

    def test_unknown_extension_falls_back(self):
        assert get_content_type("blob.zzunknown") == DEFAULT_CONTENT_TYPE
        assert get_content_type("LICENSE") == DEFAULT_CONTENT_TYPE


# ===========================================================================
# 2. ContentPublisher
# ===========================================================================

class TestContentPublisher:

    def test_publish_uploads_every_file(self, object_store, site_dir):
        object_store.buckets[ORIGIN] = {}

        files, size = ContentPublisher(object_store, max_workers=1).publish(site_dir, ORIGIN)

        assert files == 3
        assert size == content_size(site_dir)
        assert object_store.buckets[ORIGIN]["css/site.css"] == (b"body { color: red; }", "text/css")
        assert object_store.buckets[ORIGIN]["img/icons/logo.png"][1] == "image/png"

    def test_publish_in_parallel(self, object_store, site_dir):
        object_store.buckets[ORIGIN] = {}

        files, _ = ContentPublisher(object_store, max_workers=4).publish(site_dir, ORIGIN)

        assert files == 3
        assert set(object_store.buckets[ORIGIN]) == {"index.html", "css/site.css", "img/icons/logo.png"}

    def test_publish_overwrites(self, object_store, site_dir):
        object_store.buckets[ORIGIN] = {"index.html": (b"old", "text/html")}

        ContentPublisher(object_store, max_workers=1).publish(site_dir, ORIGIN)

        assert object_store.buckets[ORIGIN]["index.html"][0] == b"<h1>hello</h1>"

    @pytest.mark.parametrize("workers", [1, 4])
    def test_single_failure_fails_publish(self, site_dir, workers):
        store = MagicMock()
        store.put_object.side_effect = [None, ProviderError("PutObject failed"), None]

        with pytest.raises(ProviderError, match="PutObject"):
            ContentPublisher(store, max_workers=workers).publish(site_dir, ORIGIN)

    def test_empty_folder_publishes_nothing(self, object_store, tmp_path):
        assert ContentPublisher(object_store).publish(tmp_path, ORIGIN) == (0, 0)
        assert object_store.called("put_object") == []

    def test_unlistable_directory_fails_publish(self, object_store, site_dir):
        """A subtree that cannot be listed fails the step instead of being skipped."""
        object_store.buckets[ORIGIN] = {}

        with _deny_listing("img"):
            with pytest.raises(ProviderError, match="Could not read content folder") as exc_info:
                ContentPublisher(object_store, max_workers=1).publish(site_dir, ORIGIN)

        assert exc_info.value.operation == "PutObject"
        assert object_store.called("put_object") == []


# ===========================================================================
# 3. RollbackPlan
# ===========================================================================

class TestRollbackPlan:

    def test_executes_in_reverse_order(self):
        order = []
        plan = RollbackPlan()
        plan.push("first", lambda: order.append("first"))
        plan.push("second", lambda: order.append("second"))

        assert plan.descriptions == ["second", "first"]
        report = plan.execute()

        assert order == ["second", "first"]
        assert report.succeeded
        assert len(plan) == 0

    def test_continues_after_failing_action(self):
        later = MagicMock(return_value=True)
        plan = RollbackPlan()
        plan.push("origin", later)
        plan.push("edge", MagicMock(side_effect=RuntimeError("edge gone wrong")))

        report = plan.execute()

        later.assert_called_once()
        assert report.left_in_place == ["edge"]
        assert report.outcomes[0].error == "edge gone wrong"

    def test_false_return_counts_as_failure(self):
        plan = RollbackPlan()
        plan.push("bucket", lambda: False)
        assert plan.execute().left_in_place == ["bucket"]

    def test_context_manager_discards_on_success(self):
        action = MagicMock()
        with RollbackPlan() as plan:
            plan.push("bucket", action)

        action.assert_not_called()
        assert len(plan) == 0
        assert plan.report.executed is False

    def test_context_manager_unwinds_and_reraises(self):
        action = MagicMock(return_value=True)

        with pytest.raises(ValueError, match="step failed"):
            with RollbackPlan() as plan:
                plan.push("bucket", action)
                raise ValueError("step failed")

        action.assert_called_once()
        assert plan.report.succeeded

    def test_execute_empty_plan(self):
        assert RollbackPlan().execute().executed is False


# ===========================================================================
# 4. Deployment state machine and data model
# ===========================================================================

class TestDeploymentState:

    def test_happy_path_transitions(self):
        state = DeploymentState()
        for stage in PIPELINE_STAGES:
            state.transition(stage)
        assert state.stage == DeploymentStage.NAME_READY

    def test_cannot_skip_stage(self):
        state = DeploymentState()
        with pytest.raises(InvalidStageTransition):
            state.transition(DeploymentStage.EDGE_READY)

    def test_fail_from_any_pipeline_stage(self):
        state = DeploymentState()
        state.transition(DeploymentStage.ORIGIN_READY)
        state.fail(DeploymentStage.CONTENT_PUBLISHED)
        state.transition(DeploymentStage.FAILED)

        assert state.failed_step == DeploymentStage.CONTENT_PUBLISHED
        assert state.stage == DeploymentStage.FAILED

    def test_terminal_states_are_final(self):
        state = DeploymentState()
        for stage in PIPELINE_STAGES:
            state.transition(stage)
        with pytest.raises(InvalidStageTransition):
            state.transition(DeploymentStage.ROLLING_BACK)

    def test_created_flags_default_false(self):
        state = DeploymentState()
        assert state.origin_created is False
        assert state.edge_created is False
        assert state.edge_id is None

    def test_request_derived_names(self, tmp_path):
        request = DeploymentRequest("myblog", "example.com", tmp_path, "arn", "us-east-1")
        assert request.origin_name == "myblog.example.com"
        assert request.alias_host == "myblog.example.com"

    def test_result_urls(self):
        result = DeploymentResult(
            origin_name=ORIGIN,
            origin_endpoint="myblog.example.com.s3-website-us-east-1.amazonaws.com",
            distribution_id="E1",
            distribution_domain="d1.cloudfront.net",
            record_name="myblog.example.com.",
            zone_id="Z1",
            files_published=1,
            bytes_published=1,
            origin_created=True,
            edge_created=True,
        )
        assert result.url == "https://myblog.example.com"
        assert result.website_url == "http://myblog.example.com.s3-website-us-east-1.amazonaws.com"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
