import asyncio
import logging

import pytest

from shell_container.core.lifecycle import ContainerLifecycleManager
from shell_container.core.purge import PurgeEngine
from shell_container.models.purge import PurgeAction
from shell_container.services.exceptions import (
    DockerServiceError,
    RemovalInProgressError,
)


@pytest.fixture
def engine(fake_docker, manager_config):
    lifecycle = ContainerLifecycleManager(fake_docker, manager_config)
    return PurgeEngine(fake_docker, lifecycle)


def actions(report):
    return {outcome.container_id: outcome.action for outcome in report.outcomes}


class TestPurgeUntracked:
    """Tests for reconciling containers against the session registry."""

    def test_only_registered_containers_survive(self, engine, fake_docker):
        fake_docker.add_container("A", running=True)
        fake_docker.add_container("B", running=True)
        fake_docker.add_container("C", running=False)

        report = asyncio.run(engine.purge_untracked({"A"}))

        assert actions(report) == {
            "A": PurgeAction.KEPT,
            "B": PurgeAction.STOPPED_AND_REMOVED,
            "C": PurgeAction.REMOVED,
        }
        assert list(fake_docker.containers) == ["A"]
        assert fake_docker.containers["A"]["running"] is True
        calls = fake_docker.calls
        assert calls.index(("stop_container", "B")) < calls.index(("remove_container", "B"))
        assert ("stop_container", "C") not in calls
        assert ("stop_container", "A") not in calls
        assert ("remove_container", "A") not in calls

    def test_stopped_registered_container_is_kept(self, engine, fake_docker):
        fake_docker.add_container("A", running=False)

        report = asyncio.run(engine.purge_untracked({"A": "session-1"}))

        assert report.kept == ["A"]
        assert "A" in fake_docker.containers

    def test_auto_remove_container_gone_after_stop(self, engine, fake_docker):
        fake_docker.add_container("B", running=True, auto_remove=True)

        report = asyncio.run(engine.purge_untracked(set()))

        assert actions(report) == {"B": PurgeAction.STOPPED_AND_REMOVED}
        assert fake_docker.containers == {}

    def test_container_gone_before_probe(self, engine, fake_docker):
        fake_docker.ghost_ids = ["ghost"]

        report = asyncio.run(engine.purge_untracked(set()))

        assert actions(report) == {"ghost": PurgeAction.ALREADY_GONE}
        assert ("remove_container", "ghost") not in fake_docker.calls

    def test_removal_in_progress_counts_as_removed(self, engine, fake_docker):
        fake_docker.add_container("C")
        fake_docker.fail("remove_container", "C", RemovalInProgressError("already in progress"))

        report = asyncio.run(engine.purge_untracked(set()))

        assert report.removed == ["C"]
        assert report.failed == []

    def test_one_failure_does_not_stop_the_pass(self, engine, fake_docker, caplog):
        fake_docker.add_container("B", running=True)
        fake_docker.add_container("C")
        fake_docker.add_container("D")
        fake_docker.fail("stop_container", "B", DockerServiceError("stop timed out"))

        with caplog.at_level(logging.ERROR):
            report = asyncio.run(engine.purge_untracked(set()))

        assert report.failed == ["B"]
        assert report.removed == ["C", "D"]
        assert "B" in fake_docker.containers
        assert "Failed to purge container B: stop timed out" in caplog.text

    def test_uninspectable_container_is_left_alone(self, engine, fake_docker):
        fake_docker.add_container("C")
        fake_docker.fail("inspect_container", "C", DockerServiceError("daemon busy"))

        report = asyncio.run(engine.purge_untracked(set()))

        assert report.failed == ["C"]
        assert "C" in fake_docker.containers

    def test_listing_failure_aborts(self, engine, fake_docker, caplog):
        fake_docker.add_container("C")
        fake_docker.fail("list_containers", error=DockerServiceError("daemon unreachable"))

        with caplog.at_level(logging.ERROR):
            report = asyncio.run(engine.purge_untracked(set()))

        assert report.aborted
        assert report.outcomes == []
        assert "C" in fake_docker.containers
        assert "daemon unreachable" in caplog.text

    def test_summary_logged_once(self, engine, fake_docker, caplog):
        for container_id in ("A", "B", "C"):
            fake_docker.add_container(container_id)

        with caplog.at_level(logging.INFO):
            report = asyncio.run(engine.purge_untracked({"A"}))

        summaries = [r for r in caplog.records if r.getMessage().startswith("Containers purged")]
        assert len(summaries) == 1
        assert "considered 3, removed 2, failed 0" in summaries[0].getMessage()
        assert report.considered == 3

    def test_stop_uses_configured_timeout(self, fake_docker, manager_config):
        manager_config.stop_timeout = 2
        lifecycle = ContainerLifecycleManager(fake_docker, manager_config)
        engine = PurgeEngine(fake_docker, lifecycle)
        fake_docker.add_container("B", running=True)
        seen = {}
        original_stop = fake_docker.stop_container

        async def stop(container_id, timeout=None):
            seen[container_id] = timeout
            await original_stop(container_id, timeout)

        fake_docker.stop_container = stop

        asyncio.run(engine.purge_untracked(set()))

        assert seen == {"B": 2}
