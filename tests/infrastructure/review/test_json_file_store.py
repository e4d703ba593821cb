"""Tests for the JSON-file review store."""

import asyncio
import fcntl
import json

import pytest

from fact_gate.domain.models.review_case import ReviewAction, ReviewCase, ReviewTrigger
from fact_gate.domain.services.review_queue import HumanReviewQueue
from fact_gate.infrastructure.review.json_file_store import (
    JsonFileReviewStore,
    ReviewStoreConflictError,
)


@pytest.fixture
def queue_path(tmp_path):
    return tmp_path / "data" / "human-review-queue.json"


@pytest.fixture
def queue(queue_path):
    return HumanReviewQueue(JsonFileReviewStore(str(queue_path)))


@pytest.mark.asyncio
async def test_missing_file_is_empty(queue):
    assert await queue.list_cases() == []


@pytest.mark.asyncio
async def test_cases_are_persisted_in_camel_case(queue, queue_path):
    case = await queue.add_case("posts/a.md", "서울 카페", ReviewTrigger.SCORE_50_70, 62.5, "seo: 40%")

    document = json.loads(queue_path.read_text(encoding="utf-8"))
    assert document["version"] == 1
    assert document["lastUpdated"].endswith("Z")
    [stored] = document["cases"]
    assert stored["id"] == case.id
    assert stored["filePath"] == "posts/a.md"
    assert stored["title"] == "서울 카페"
    assert stored["status"] == "pending"

    reopened = HumanReviewQueue(JsonFileReviewStore(str(queue_path)))
    assert [c.id for c in await reopened.list_pending()] == [case.id]


@pytest.mark.asyncio
async def test_version_increments_per_write(queue, queue_path):
    case = await queue.add_case("a.md", "A", ReviewTrigger.SCORE_50_70, 60.0)
    await queue.approve(case.id, "좋아요")

    document = json.loads(queue_path.read_text(encoding="utf-8"))
    assert document["version"] == 2
    assert document["cases"][0]["status"] == "approved"
    assert document["cases"][0]["reviewerNote"] == "좋아요"


@pytest.mark.asyncio
async def test_concurrent_filings_do_not_lose_cases(queue, queue_path):
    await asyncio.gather(*[
        queue.add_case(f"post-{i}.md", f"Post {i}", ReviewTrigger.SCORE_50_70, 60.0)
        for i in range(4)
    ])

    stored = json.loads(queue_path.read_text(encoding="utf-8"))["cases"]
    assert sorted(c["filePath"] for c in stored) == [f"post-{i}.md" for i in range(4)]


@pytest.mark.asyncio
async def test_reads_files_written_by_other_tools(queue_path):
    queue_path.parent.mkdir(parents=True)
    queue_path.write_text(json.dumps({
        "version": 7,
        "lastUpdated": "2026-01-05T09:00:00.000Z",
        "cases": [{
            "id": "review-1736067600000-x1y2z3",
            "filePath": "blog/posts/old.md",
            "title": "Old post",
            "trigger": "critical_false",
            "action": "block",
            "score": 40,
            "details": "factcheck: 40%",
            "status": "pending",
            "createdAt": "2026-01-05T09:00:00.000Z",
        }, {"id": "broken"}],
    }), encoding="utf-8")

    queue = HumanReviewQueue(JsonFileReviewStore(str(queue_path)))
    [case] = await queue.list_cases()

    assert case.trigger == ReviewTrigger.CRITICAL_FALSE
    await queue.reject(case.id)
    assert json.loads(queue_path.read_text(encoding="utf-8"))["version"] == 8


@pytest.mark.asyncio
async def test_corrupt_file_reads_as_empty(queue_path):
    queue_path.parent.mkdir(parents=True)
    queue_path.write_text("{not json", encoding="utf-8")

    store = JsonFileReviewStore(str(queue_path))

    assert await store.load() == []


@pytest.mark.asyncio
async def test_mutator_errors_leave_file_untouched(queue, queue_path):
    await queue.add_case("a.md", "A", ReviewTrigger.SCORE_50_70, 60.0)
    before = queue_path.read_text(encoding="utf-8")

    def fail(cases):
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        await queue.store.update(fail)

    assert queue_path.read_text(encoding="utf-8") == before


@pytest.mark.asyncio
async def test_gives_up_when_file_keeps_changing(queue_path):
    store = JsonFileReviewStore(str(queue_path))
    versions = iter(range(100))

    def racing_version():
        return next(versions) + 1

    store._read_version = racing_version

    with pytest.raises(ReviewStoreConflictError):
        await store.update(lambda cases: None)
    assert not queue_path.exists()


@pytest.mark.asyncio
async def test_writer_holding_the_file_lock_is_not_overwritten(queue_path):
    store = JsonFileReviewStore(str(queue_path))
    mutated = asyncio.Event()
    queue_path.parent.mkdir(parents=True)

    def add_case(cases):
        cases.append(ReviewCase(
            id="review-2", file_path="mine.md", title="Mine",
            trigger=ReviewTrigger.SCORE_50_70, action=ReviewAction.QUEUE, score=60,
        ))
        mutated.set()

    with open(store.lock_path, "a") as lock_file:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        update = asyncio.create_task(store.update(add_case))
        await mutated.wait()
        # another process commits while it holds the lock
        queue_path.write_text(json.dumps({
            "version": 1,
            "cases": [{
                "id": "review-1", "filePath": "theirs.md", "title": "Theirs",
                "trigger": "score_50_70", "action": "queue", "score": 55,
                "status": "pending", "createdAt": "2026-01-05T09:00:00Z",
            }],
        }), encoding="utf-8")
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    await update

    document = json.loads(queue_path.read_text(encoding="utf-8"))
    assert document["version"] == 2
    assert sorted(c["filePath"] for c in document["cases"]) == ["mine.md", "theirs.md"]
