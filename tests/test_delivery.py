import asyncio
import errno
import io
import os
import threading
from email.utils import formatdate

import pytest

from safesend.delivery import StreamHandle, StreamState, aopen, open, probe
from safesend.model import IGNORED, Failed, FileMeta, Opened, Resolved
from safesend.utils.hooks import Signal


class CountingFile(io.BytesIO):
	def __init__(self, data: bytes = b"") -> None:
		super().__init__(data)
		self.closes: int = 0

	def close(self) -> None:
		self.closes += 1
		super().close()


def counting(data: bytes = b"0123456789"):
	files: list[CountingFile] = []

	def opener(path: str, mode: str) -> CountingFile:
		f = CountingFile(data)
		files.append(f)
		return f

	return opener, files


def test_open_existing_file(tmp_path):
	path = tmp_path / "report.csv"
	path.write_bytes(b"a,b\n1,2\n")
	res = open(Resolved(str(path)))
	assert isinstance(res, Opened)
	st = os.stat(path)
	assert res.path == str(path)
	assert res.meta.modifiedTime == st.st_mtime
	assert res.meta.size == 8
	assert res.meta.extension == ".csv"
	assert res.meta.lastModified == formatdate(st.st_mtime, usegmt=True)
	assert res.meta.contentType == "text/csv"
	with res.stream as stream:
		assert b"".join(stream.chunks(3)) == b"a,b\n1,2\n"
	assert res.stream.state is StreamState.Closed
	assert res.stream.file.closed


def test_open_accepts_plain_paths(tmp_path):
	path = tmp_path / "a.txt"
	path.write_text("hello")
	res = open(str(path))
	assert isinstance(res, Opened)
	res.stream.release()


def test_absent_files_are_ignored(tmp_path):
	(tmp_path / "file.txt").write_text("x")
	assert open(str(tmp_path / "missing.txt")) is IGNORED
	# ENOTDIR
	assert open(str(tmp_path / "file.txt" / "child")) is IGNORED
	# ENAMETOOLONG
	assert open(str(tmp_path / ("x" * 4096))) is IGNORED
	# Directories have nothing to stream
	assert open(str(tmp_path)) is IGNORED


def test_probe(tmp_path):
	path = tmp_path / "page.html"
	path.write_text("<p>hi</p>")
	meta = probe(str(path))
	assert isinstance(meta, FileMeta)
	assert meta.size == 9
	assert meta.contentType == "text/html"
	assert probe(str(tmp_path / "nope")) is IGNORED


def test_other_errors_fail(tmp_path):
	path = tmp_path / "secret.txt"
	path.write_text("x")

	def opener(path: str, mode: str):
		raise PermissionError(errno.EACCES, "Permission denied", path)

	res = open(str(path), opener=opener)
	assert isinstance(res, Failed)
	assert res.status == 500
	assert res.error.errno == errno.EACCES


def test_missing_file_from_opener_is_ignored(tmp_path):
	path = tmp_path / "racy.txt"
	path.write_text("x")

	def opener(path: str, mode: str):
		raise FileNotFoundError(errno.ENOENT, "No such file", path)

	assert open(str(path), opener=opener) is IGNORED


def test_error_then_finish_releases_once(tmp_path):
	path = tmp_path / "a.bin"
	path.write_bytes(b"0123456789")
	opener, files = counting()
	res = open(str(path), opener=opener)
	assert isinstance(res, Opened)
	finished, errored = Signal("finished"), Signal("errored")
	res.stream.bind(finished, errored)
	assert len(finished) == 1 and len(errored) == 1

	assert errored.emit(ConnectionResetError()) == 1
	assert files[0].closes == 1
	assert res.stream.state is StreamState.Closed
	assert len(finished) == 0 and len(errored) == 0

	# A late finish has nothing left to call
	assert finished.emit() == 0
	assert res.stream.release() is False
	assert files[0].closes == 1


def test_finish_then_error_releases_once(tmp_path):
	path = tmp_path / "a.bin"
	path.write_bytes(b"0123456789")
	opener, files = counting()
	res = open(str(path), opener=opener)
	assert isinstance(res, Opened)
	finished, errored = Signal("finished"), Signal("errored")
	res.stream.bind(finished, errored)
	assert finished.emit() == 1
	assert errored.emit(BrokenPipeError()) == 0
	assert files[0].closes == 1


def test_both_handlers_on_one_signal():
	shared = Signal("shared")
	f = CountingFile(b"x")
	handle = StreamHandle("/x", f).bind(shared, shared)
	# The first handler detaches the second while emitting
	assert shared.emit() == 1
	assert f.closes == 1
	assert handle.state is StreamState.Closed


def test_release_states():
	f = CountingFile(b"abcdef")
	handle = StreamHandle("/x", f)
	assert handle.isOpen
	assert handle.finish() is True
	assert handle.state is StreamState.Closed
	assert handle.abort() is False
	assert f.closes == 1


def test_chunks_stop_once_released():
	handle = StreamHandle("/x", CountingFile(b"abcdef"))
	chunks = handle.chunks(2)
	assert next(chunks) == b"ab"
	handle.abort()
	assert list(chunks) == []


def test_cannot_bind_released_stream():
	handle = StreamHandle("/x", CountingFile(b""))
	handle.release()
	with pytest.raises(RuntimeError):
		handle.bind(Signal("a"), Signal("b"))


def test_aopen(tmp_path):
	path = tmp_path / "async.txt"
	path.write_bytes(b"async")
	res = asyncio.run(aopen(str(path)))
	assert isinstance(res, Opened)
	assert b"".join(res.stream.chunks()) == b"async"
	res.stream.release()
	assert asyncio.run(aopen(str(tmp_path / "missing"))) is IGNORED



def test_context_exit_states():
	seen: list[StreamState] = []

	class Recording(StreamHandle):
		__slots__ = []

		def release(self, via: StreamState = StreamState.Aborting) -> bool:
			seen.append(via)
			return super().release(via)

	with Recording("/x", CountingFile(b"a")):
		pass
	with pytest.raises(ValueError):
		with Recording("/y", CountingFile(b"b")):
			raise ValueError("boom")
	assert seen == [StreamState.Finishing, StreamState.Aborting]


def test_cancelled_aopen_releases_late_file(tmp_path):
	path = tmp_path / "slow.txt"
	path.write_bytes(b"late")
	entered, gate = threading.Event(), threading.Event()
	files: list[CountingFile] = []

	def opener(path: str, mode: str) -> CountingFile:
		entered.set()
		gate.wait(5)
		f = CountingFile(b"late")
		files.append(f)
		return f

	async def main() -> None:
		task = asyncio.create_task(aopen(str(path), opener=opener))
		while not entered.is_set():
			await asyncio.sleep(0.01)
		task.cancel()
		with pytest.raises(asyncio.CancelledError):
			await task
		gate.set()
		for _ in range(500):
			if files and files[0].closes:
				break
			await asyncio.sleep(0.01)

	asyncio.run(main())
	assert len(files) == 1
	assert files[0].closes == 1
	assert files[0].closed


# EOF
