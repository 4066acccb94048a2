"""Tests for console, stream, file and memory transports."""

import gzip
import io
import os

import orjson
import pytest

from logweave import create_logger
from logweave.foundation.errors import ConfigurationError, TransportError
from logweave.io.transports import ConsoleTransport, FileTransport, MemoryTransport, StreamTransport, parse_size
from logweave.runtime.entry import LogEntry


def _entry(message: str = "hello", level: str = "info", **fields: object) -> LogEntry:
    return LogEntry({"level": level, "message": message, "time": 1_700_000_000_000, **fields})


class TestConsoleTransport:
    """Console output routing and formats."""

    def test_json_to_stdout_errors_to_stderr(self) -> None:
        out, err = io.StringIO(), io.StringIO()
        console = ConsoleTransport(stream=out, err_stream=err)
        console.write(_entry("ok"))
        console.write(_entry("bad", level="error"))
        assert orjson.loads(out.getvalue())["message"] == "ok"
        assert orjson.loads(err.getvalue())["message"] == "bad"

    def test_pretty_without_colors(self) -> None:
        out = io.StringIO()
        console = ConsoleTransport(format="pretty", colors=False, stream=out)
        console.write(_entry("started", port=8080))
        line = out.getvalue().strip()
        assert "INFO" in line
        assert "started" in line
        assert "port=8080" in line
        assert "\033[" not in line

    def test_colors_auto_detected_off_for_non_tty(self) -> None:
        console = ConsoleTransport(format="pretty", stream=io.StringIO())
        assert console.colors is False

    def test_supports_every_environment(self) -> None:
        console = ConsoleTransport()
        assert console.supports("server") and console.supports("client")


class TestStreamTransport:
    """JSON lines into a text stream."""

    def test_writes_json_lines(self) -> None:
        buf = io.StringIO()
        log = create_logger(transports=[StreamTransport(buf)])
        log.info("a", n=1)
        log.warn("b")
        lines = [orjson.loads(line) for line in buf.getvalue().splitlines()]
        assert [line["message"] for line in lines] == ["a", "b"]
        assert lines[0]["n"] == 1

    def test_requires_stream(self) -> None:
        with pytest.raises(TransportError):
            StreamTransport(None)  # type: ignore[arg-type]

    def test_close_is_idempotent_and_blocks_writes(self) -> None:
        buf = io.StringIO()
        stream = StreamTransport(buf, close_stream=True)
        stream.close()
        stream.close()
        assert buf.closed
        with pytest.raises(TransportError):
            stream.write(_entry())

    def test_server_only(self) -> None:
        stream = StreamTransport(io.StringIO())
        assert stream.supports("server")
        assert not stream.supports("client")


class TestFileTransport:
    """Serial file writes with rotation."""

    @pytest.mark.asyncio
    async def test_appends_lines_in_order(self, tmp_path) -> None:
        path = tmp_path / "nested" / "app.log"
        log = create_logger(transports=[FileTransport(path)])
        for n in range(20):
            log.info("m", n=n)
        assert await log.close() == []
        lines = [orjson.loads(line) for line in path.read_text().splitlines()]
        assert [line["n"] for line in lines] == list(range(20))

    def test_sync_usage(self, tmp_path) -> None:
        path = tmp_path / "sync.log"
        log = create_logger(transports=[FileTransport(path)])
        log.info("one")
        log.close_sync()
        assert orjson.loads(path.read_text())["message"] == "one"

    @pytest.mark.asyncio
    async def test_size_rotation_keeps_max_files(self, tmp_path) -> None:
        path = tmp_path / "app.log"
        transport = FileTransport(path, max_size=200, max_files=2)
        log = create_logger(transports=[transport])
        for n in range(40):
            log.info("x" * 50, n=n)
        await log.close()
        rotated = transport.rotated_files()
        assert len(rotated) == 2
        assert path.stat().st_size <= 200 + 120
        assert all(p.name.startswith("app.") and p.suffix == ".log" for p in rotated)

    @pytest.mark.asyncio
    async def test_rotation_compress(self, tmp_path) -> None:
        path = tmp_path / "app.log"
        transport = FileTransport(path, max_size="100B", max_files=10, compress=True)
        log = create_logger(transports=[transport])
        for n in range(5):
            log.info("y" * 80, n=n)
        await log.close()
        rotated = transport.rotated_files()
        assert rotated and all(p.suffix == ".gz" for p in rotated)
        with gzip.open(rotated[-1], "rt") as fh:
            assert orjson.loads(fh.readline())["n"] == 0

    @pytest.mark.asyncio
    async def test_retention_leaves_unrelated_siblings(self, tmp_path) -> None:
        siblings = [tmp_path / name for name in ("app.py", "app.json", "app.notes.log", "app.2024.log")]
        for sibling in siblings:
            sibling.write_text("keep me")
            os.utime(sibling, (0, 0))
        transport = FileTransport(tmp_path / "app.log", max_size=50, max_files=1)
        log = create_logger(transports=[transport])
        for n in range(6):
            log.info("z" * 40, n=n)
        await log.close()
        assert all(s.read_text() == "keep me" for s in siblings)
        assert len(transport.rotated_files()) == 1
        assert set(transport.rotated_files()).isdisjoint(siblings)

    @pytest.mark.asyncio
    async def test_oversized_file_from_previous_run_rotates_before_append(self, tmp_path) -> None:
        path = tmp_path / "app.log"
        path.write_text("old\n" * 30)
        transport = FileTransport(path, max_size=50)
        log = create_logger(transports=[transport])
        log.info("fresh")
        await log.close()
        assert [orjson.loads(line)["message"] for line in path.read_text().splitlines()] == ["fresh"]
        (rotated,) = transport.rotated_files()
        assert rotated.read_text() == "old\n" * 30

    def test_server_only(self, tmp_path) -> None:
        transport = FileTransport(tmp_path / "a.log")
        assert not transport.supports("client")
        log = create_logger(environment="client", transports=[transport])
        assert log.transports == ()

    @pytest.mark.parametrize("kwargs", [{"max_files": -1}, {"rotate_every": 0}, {"max_size": "lots"}])
    def test_invalid_options(self, tmp_path, kwargs: dict) -> None:
        with pytest.raises(ConfigurationError):
            FileTransport(tmp_path / "a.log", **kwargs)

    @pytest.mark.asyncio
    async def test_write_after_close_raises(self, tmp_path) -> None:
        transport = FileTransport(tmp_path / "a.log")
        await transport.close()
        await transport.close()
        with pytest.raises(TransportError):
            transport.write(_entry())


def test_parse_size() -> None:
    assert parse_size(1024) == 1024
    assert parse_size("1KiB") == 1024
    assert parse_size("10MB") == 10_000_000


def test_memory_transport_helpers() -> None:
    mem = MemoryTransport()
    mem.write(_entry("a"))
    mem.write(_entry("b", level="warn"))
    assert mem.messages() == ["a", "b"]
    assert mem.levels() == ["info", "warn"]
    mem.clear()
    assert mem.entries == []
    mem.close()
    with pytest.raises(TransportError):
        mem.write(_entry())
