import pytest
import pytest_asyncio

from prism_ingest.core.exceptions import DuplicateFilepathError
from prism_ingest.domain.entities import TranscriptRecord
from prism_ingest.services.database import JSONStore, MemoryStore, StoreFactory


def record(record_id="rec-1", filepath="/watch/call.txt"):
    return TranscriptRecord(
        id=record_id,
        filename="call.txt",
        filepath=filepath,
        raw_content="Hello world",
        call_date="2024-01-01T00:00:00",
        context="Demo",
    )


@pytest_asyncio.fixture(params=["memory", "json"])
async def any_store(request, tmp_path):
    if request.param == "memory":
        store = MemoryStore()
    else:
        store = JSONStore(data_dir=tmp_path / "db")
    await store.initialize()
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_create_and_lookup(any_store):
    await any_store.create_transcript(record())
    
    assert await any_store.exists("/watch/call.txt")
    found = await any_store.find_by_filepath("/watch/call.txt")
    assert found.id == "rec-1"
    assert found.created_at
    assert await any_store.count() == 1


@pytest.mark.asyncio
async def test_filepath_is_unique(any_store):
    await any_store.create_transcript(record())
    with pytest.raises(DuplicateFilepathError):
        await any_store.create_transcript(record(record_id="rec-2"))
    assert len(await any_store.get_all_transcripts()) == 1


@pytest.mark.asyncio
async def test_json_store_reloads_records(tmp_path):
    first = JSONStore(data_dir=tmp_path)
    await first.initialize()
    await first.create_transcript(record())
    
    second = JSONStore(data_dir=tmp_path)
    await second.initialize()
    
    assert await second.exists("/watch/call.txt")
    assert (await second.get_transcript("rec-1")).raw_content == "Hello world"


@pytest.mark.asyncio
async def test_factory_rejects_unknown_type():
    with pytest.raises(ValueError):
        StoreFactory.create("postgres")
    assert isinstance(await StoreFactory.create_and_initialize("memory"), MemoryStore)
