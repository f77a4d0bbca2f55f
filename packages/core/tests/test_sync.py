"""Tests for the sync coordinator.

Collaborators are plain fakes; the cache is the real file-backed SyncCache so
idempotence is checked against what actually lands on disk.
"""

import json
from unittest.mock import MagicMock

import pytest

from prmemory_core.errors import AuthenticationError, SummarizerError
from prmemory_core.models import EnrichedPullRequest, PullRequestRecord
from prmemory_core.sync import FAILED, PROCESSED, run_sync
from prmemory_store.cache import SyncCache


def _record(number, merged_at="2024-03-05T10:00:00Z"):
    return PullRequestRecord(
        repo_full_name="acme/widgets",
        number=number,
        title=f"PR {number}",
        body=None,
        created_at="2024-03-01T09:00:00Z",
        merged_at=merged_at,
    )


class FakeCollector:
    def __init__(self, records):
        self.records = list(records)
        self.enriched = []

    def authenticate(self):
        return "octocat"

    def fetch_merged(self):
        return list(self.records)

    def enrich(self, record):
        self.enriched.append(record.number)
        return EnrichedPullRequest(record=record)


class FakeSummarizer:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = 0

    def summarize(self, payload, instructions):
        self.calls += 1
        if payload["metadata"]["number"] in self.fail_on:
            raise SummarizerError("model unavailable")
        return f"**Problem**\nPR {payload['metadata']['number']}"


class FakePublisher:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.published = []

    def publish(self, stem, markdown):
        if any(f"_PR{n}_" in stem for n in self.fail_on):
            raise RuntimeError("notion 400")
        self.published.append(stem)
        return True


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "notion-sync-cache.json"


def _run(records, cache_path, summarizer=None, publisher=None, **kwargs):
    collector = FakeCollector(records)
    summarizer = summarizer or FakeSummarizer()
    publisher = publisher or FakePublisher()
    summary = run_sync(collector, summarizer, publisher, SyncCache.load(cache_path), "Summarize.", **kwargs)
    return summary, collector, summarizer, publisher


def test_processes_every_new_pr(cache_path):
    summary, _, _, publisher = _run([_record(1), _record(2)], cache_path)

    assert summary.total == 2
    assert summary.processed == 2
    assert publisher.published == ["acme_widgets_PR1_2024-03-05", "acme_widgets_PR2_2024-03-05"]
    assert set(SyncCache.load(cache_path).items()) == {
        ("acme_widgets_PR1_2024-03-05", True),
        ("acme_widgets_PR2_2024-03-05", True),
    }


def test_second_run_is_a_no_op(cache_path):
    records = [_record(1), _record(2)]
    _run(records, cache_path)
    before = cache_path.read_text()

    summary, collector, summarizer, publisher = _run(records, cache_path)

    assert summary.cached == 2
    assert summary.processed == 0
    assert publisher.published == []
    assert summarizer.calls == 0
    assert collector.enriched == []
    assert cache_path.read_text() == before


def test_force_reprocesses_cached_prs(cache_path):
    records = [_record(1)]
    _run(records, cache_path)

    summary, _, _, publisher = _run(records, cache_path, force=True)

    assert summary.processed == 1
    assert publisher.published == ["acme_widgets_PR1_2024-03-05"]
    assert "acme_widgets_PR1_2024-03-05" in SyncCache.load(cache_path)


def test_failed_pr_is_not_cached_and_loop_continues(cache_path):
    publisher = FakePublisher(fail_on=[2])
    summary, _, _, _ = _run([_record(1), _record(2), _record(3)], cache_path, publisher=publisher)

    statuses = {r.stem: r.status for r in summary.results}
    assert statuses == {
        "acme_widgets_PR1_2024-03-05": PROCESSED,
        "acme_widgets_PR2_2024-03-05": FAILED,
        "acme_widgets_PR3_2024-03-05": PROCESSED,
    }
    assert summary.failed == 1
    cache = SyncCache.load(cache_path)
    assert "acme_widgets_PR2_2024-03-05" not in cache
    assert len(cache) == 2


def test_summarizer_failure_retried_next_run(cache_path):
    records = [_record(1)]
    _run(records, cache_path, summarizer=FakeSummarizer(fail_on=[1]))
    assert "acme_widgets_PR1_2024-03-05" not in SyncCache.load(cache_path)

    summary, _, _, publisher = _run(records, cache_path)
    assert summary.processed == 1
    assert publisher.published == ["acme_widgets_PR1_2024-03-05"]


def test_limit_keeps_most_recent(cache_path):
    choose = MagicMock(return_value=2)
    summary, collector, _, _ = _run([_record(1), _record(2), _record(3)], cache_path, choose_limit=choose)

    choose.assert_called_once_with(3)
    assert summary.total == 3
    assert collector.enriched == [1, 2]


def test_limit_larger_than_total_is_clamped(cache_path):
    summary, collector, _, _ = _run([_record(1)], cache_path, choose_limit=lambda total: 50)
    assert collector.enriched == [1]
    assert summary.processed == 1


def test_summary_writer_receives_markdown(cache_path):
    written = {}
    _run([_record(4)], cache_path, summary_writer=lambda stem, md: written.setdefault(stem, md))
    assert written == {"acme_widgets_PR4_2024-03-05": "**Problem**\nPR 4"}


def test_page_marker_stored(cache_path):
    publisher = MagicMock()
    publisher.publish.return_value = "3f1c0e2a-page"
    summary, _, _, _ = _run([_record(1)], cache_path, publisher=publisher)
    assert summary.results[0].marker == "3f1c0e2a-page"
    assert SyncCache.load(cache_path).get("acme_widgets_PR1_2024-03-05") == "3f1c0e2a-page"


def test_authentication_failure_propagates_and_keeps_cache(cache_path):
    _run([_record(1)], cache_path)
    before = cache_path.read_text()

    collector = FakeCollector([_record(1)])
    collector.authenticate = MagicMock(side_effect=AuthenticationError("bad token"))
    with pytest.raises(AuthenticationError):
        run_sync(collector, FakeSummarizer(), FakePublisher(), SyncCache.load(cache_path), "x", force=True)

    assert cache_path.read_text() == before


def test_no_merged_prs(cache_path):
    summary, _, _, _ = _run([], cache_path)
    assert summary.total == 0
    assert summary.results == []
    assert summary.cached == 0 and summary.processed == 0


def test_force_rewrites_cache_without_unreachable_entries(cache_path):
    cache_path.write_text(json.dumps({"stale_PR9_2020-01-01": True, "acme_widgets_PR1_2024-03-05": True}))

    _run([_record(1)], cache_path, force=True)

    assert json.loads(cache_path.read_text()) == {"acme_widgets_PR1_2024-03-05": True}


def test_finished_pr_on_disk_before_next_pr_starts(cache_path):
    seen_on_disk = {}

    class InterruptingPublisher(FakePublisher):
        def publish(self, stem, markdown):
            if "_PR2_" in stem:
                seen_on_disk.update(json.loads(cache_path.read_text()))
                raise KeyboardInterrupt
            return super().publish(stem, markdown)

    with pytest.raises(KeyboardInterrupt):
        _run([_record(1), _record(2), _record(3)], cache_path, publisher=InterruptingPublisher())

    assert seen_on_disk == {"acme_widgets_PR1_2024-03-05": True}
    assert json.loads(cache_path.read_text()) == {"acme_widgets_PR1_2024-03-05": True}
