"""Unit tests for streaming content writes and reads."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from fs_object_store.adapters.outbound import content_writer
from fs_object_store.adapters.outbound.content_writer import ContentWriter, copy_atomic


async def agen(*chunks: bytes):
    for chunk in chunks:
        yield chunk


@pytest.mark.unit
class TestContentWriter:
    """Test ContentWriter."""

    @pytest.fixture
    def writer(self) -> ContentWriter:
        return ContentWriter(chunk_size=3)

    @pytest.mark.asyncio
    async def test_whole_buffer(self, writer: ContentWriter, temp_dir: Path):
        data = b"hello world"
        result = await writer.write(temp_dir / "f", data)
        assert result.size == len(data)
        assert result.md5 == hashlib.md5(data).hexdigest()
        assert (temp_dir / "f").read_bytes() == data

    @pytest.mark.asyncio
    async def test_async_stream_matches_whole_buffer(self, writer: ContentWriter, temp_dir: Path):
        whole = await writer.write(temp_dir / "whole", b"hello world")
        streamed = await writer.write(temp_dir / "streamed", agen(b"hel", b"", b"lo w", b"orld"))
        assert streamed == whole
        assert (temp_dir / "streamed").read_bytes() == b"hello world"

    @pytest.mark.asyncio
    async def test_sync_iterable(self, writer: ContentWriter, temp_dir: Path):
        result = await writer.write(temp_dir / "f", [b"ab", b"cd"])
        assert result.size == 4
        assert result.md5 == hashlib.md5(b"abcd").hexdigest()

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, writer: ContentWriter, temp_dir: Path):
        await writer.write(temp_dir / "a" / "b" / "c", b"x")
        assert (temp_dir / "a" / "b" / "c").read_bytes() == b"x"

    @pytest.mark.asyncio
    async def test_empty_content(self, writer: ContentWriter, temp_dir: Path):
        result = await writer.write(temp_dir / "empty", b"")
        assert result.size == 0
        assert result.md5 == hashlib.md5(b"").hexdigest()

    @pytest.mark.asyncio
    async def test_failed_stream_leaves_previous_content(self, writer: ContentWriter, temp_dir: Path):
        target = temp_dir / "f"
        await writer.write(target, b"original")

        async def broken():
            yield b"partial"
            raise RuntimeError("client went away")

        with pytest.raises(RuntimeError):
            await writer.write(target, broken())

        assert target.read_bytes() == b"original"
        assert sorted(p.name for p in temp_dir.iterdir()) == ["f"]

    @pytest.mark.asyncio
    async def test_read_range(self, writer: ContentWriter, temp_dir: Path):
        await writer.write(temp_dir / "f", b"0123456789")
        chunks = [c async for c in writer.read(temp_dir / "f", 2, 7)]
        assert b"".join(chunks) == b"234567"
        assert all(len(c) <= 3 for c in chunks)

    @pytest.mark.asyncio
    async def test_read_to_end(self, writer: ContentWriter, temp_dir: Path):
        await writer.write(temp_dir / "f", b"0123456789")
        assert b"".join([c async for c in writer.read(temp_dir / "f", 8)]) == b"89"

    @pytest.mark.asyncio
    async def test_concat(self, writer: ContentWriter, temp_dir: Path):
        await writer.write(temp_dir / "1", b"AB")
        await writer.write(temp_dir / "2", b"CDE")
        data = b"".join([c async for c in writer.concat([temp_dir / "2", temp_dir / "1"])])
        assert data == b"CDEAB"

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            ContentWriter(chunk_size=0)


@pytest.mark.unit
class TestCopyAtomic:
    """Test whole-file copies that replace their destination by rename."""

    @pytest.mark.asyncio
    async def test_replaces_destination(self, temp_dir: Path):
        (temp_dir / "src").write_bytes(b"new")
        (temp_dir / "dest").write_bytes(b"old contents")
        await copy_atomic(temp_dir / "src", temp_dir / "dest")
        assert (temp_dir / "dest").read_bytes() == b"new"
        assert sorted(p.name for p in temp_dir.iterdir()) == ["dest", "src"]

    @pytest.mark.asyncio
    async def test_failed_copy_leaves_destination(self, temp_dir: Path, monkeypatch):
        (temp_dir / "src").write_bytes(b"new")
        (temp_dir / "dest").write_bytes(b"old")

        def failing_copy(src, dst):
            Path(dst).write_bytes(b"ne")
            raise OSError("disk full")

        monkeypatch.setattr(content_writer.shutil, "copyfile", failing_copy)
        with pytest.raises(OSError, match="disk full"):
            await copy_atomic(temp_dir / "src", temp_dir / "dest")

        assert (temp_dir / "dest").read_bytes() == b"old"
        assert sorted(p.name for p in temp_dir.iterdir()) == ["dest", "src"]
