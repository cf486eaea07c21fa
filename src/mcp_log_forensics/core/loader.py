"""File acquisition and ordered parsing.

This module is the integration point that reads log files and returns records.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .config import resolve_max_workers
from .models import LogRecord
from .parser import LineParser

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


def _check_file(log_path: str | Path) -> Path:
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    return path


def split_lines(text: str) -> list[str]:
    """Split text into lines, trimming terminators and dropping blank lines."""
    out: list[str] = []
    for line in text.split("\n"):
        line = line.rstrip("\r\n")
        if line.strip():
            out.append(line)
    return out


def parse_lines(lines: Iterable[str], *, parser: LineParser | None = None) -> list[LogRecord]:
    """Parse already-filtered lines; ids follow input position."""
    parser = parser or LineParser()
    return [parser.parse(line, idx) for idx, line in enumerate(lines)]


async def _iter_nonblank(
    path: Path, *, encoding: str, decode_errors: str
) -> AsyncIterator[tuple[int, str]]:
    """Yield (seq, line) for non-blank lines; seq counts only kept lines."""
    seq = 0
    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        async for line in f:
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            yield seq, line
            seq += 1


async def _run_pipeline(
    work_iter: AsyncIterator[tuple[int, str]],
    *,
    worker_count: int,
    processor: Callable[[int, str], Awaitable[LogRecord]],
) -> AsyncIterator[LogRecord]:
    """Process items on worker_count tasks and yield results in seq order."""
    if worker_count < 1:
        raise ValueError("worker_count must be >= 1")

    queue_size = max(1, worker_count * 4)
    work_queue: asyncio.Queue[tuple[object, str]] = asyncio.Queue(maxsize=queue_size)
    result_queue: asyncio.Queue[tuple[object, LogRecord | None]] = asyncio.Queue(
        maxsize=queue_size
    )
    work_sentinel = object()
    done_sentinel = object()
    errors: list[Exception] = []

    async def reader() -> None:
        try:
            async for seq, line in work_iter:
                await work_queue.put((seq, line))
        except Exception as exc:
            errors.append(exc)
        finally:
            for _ in range(worker_count):
                await work_queue.put((work_sentinel, ""))

    async def worker() -> None:
        try:
            while True:
                seq, line = await work_queue.get()
                if seq is work_sentinel:
                    break
                record = await processor(seq, line)
                await result_queue.put((seq, record))
        except Exception as exc:
            errors.append(exc)
        finally:
            await result_queue.put((done_sentinel, None))

    reader_task = asyncio.create_task(reader())
    worker_tasks = [asyncio.create_task(worker()) for _ in range(worker_count)]

    pending: dict[int, LogRecord] = {}
    next_seq = 0
    done_workers = 0

    try:
        while True:
            seq, record = await result_queue.get()
            if seq is done_sentinel:
                done_workers += 1
                if done_workers == worker_count:
                    break
                continue

            pending[seq] = record
            while next_seq in pending:
                yield pending.pop(next_seq)
                next_seq += 1

        if errors:
            raise errors[0]
    finally:
        reader_task.cancel()
        for task in worker_tasks:
            task.cancel()
        await asyncio.gather(reader_task, *worker_tasks, return_exceptions=True)


async def iter_records(
    log_path: str | Path,
    *,
    parser: LineParser | None = None,
    max_workers: int | None = None,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> AsyncIterator[LogRecord]:
    """Yield records in input order, optionally parsing on a thread pool."""
    path = _check_file(log_path)
    parser = parser or LineParser()

    max_workers_resolved = resolve_max_workers(max_workers)
    parallel_ok = max_workers_resolved > 1 and path.suffix.lower() != ".gz"

    lines = _iter_nonblank(path, encoding=encoding, decode_errors=decode_errors)

    if not parallel_ok:
        async for seq, line in lines:
            yield parser.parse(line, seq)
        return

    loop = asyncio.get_running_loop()
    executor = ThreadPoolExecutor(max_workers=max_workers_resolved)

    async def process_line(seq: int, line: str) -> LogRecord:
        return await loop.run_in_executor(executor, parser.parse, line, seq)

    try:
        async for record in _run_pipeline(
            lines,
            worker_count=max_workers_resolved,
            processor=process_line,
        ):
            yield record
    finally:
        executor.shutdown(wait=True)


async def read_lines(
    log_path: str | Path,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> list[str]:
    """Read non-blank lines from a plain or gzip log file."""
    path = _check_file(log_path)
    lines = _iter_nonblank(path, encoding=encoding, decode_errors=decode_errors)
    return [line async for _, line in lines]


async def load_records(log_path: str | Path, **iter_kwargs) -> list[LogRecord]:
    """Collect iter_records into a list."""
    records = [record async for record in iter_records(log_path, **iter_kwargs)]
    logger.debug("Parsed %d records from %s", len(records), log_path)
    return records
