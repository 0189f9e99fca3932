import asyncio
import builtins
import errno
import os
import stat
from enum import Enum
from functools import partial
from typing import IO, Any, Callable, Generator

from mypy_extensions import mypyc_attr

from .config import CHUNK_SIZE
from .model import IGNORED, Failed, FileMeta, Ignored, Opened, Resolved, TDelivery
from .utils.files import extension
from .utils.hooks import Signal
from .utils.logging import error, event, logged

__doc__ = """
Opens resolved paths and ties the lifetime of the open file to the response
that streams it. The file is released exactly once, on whichever of the
*finished* or *errored* signals fires first.
"""

# Errors that mean there is nothing to serve
NOT_FOUND: frozenset[int] = frozenset((errno.ENOENT, errno.ENAMETOOLONG, errno.ENOTDIR))

TOpener = Callable[[str, str], IO[bytes]]


class StreamState(Enum):
	Opened = 0
	Finishing = 1
	Aborting = 2
	Closed = 3


@mypyc_attr(allow_interpreted_subclasses=True)
class StreamHandle:
	"""Owns an open file for the duration of a response."""

	__slots__ = ["path", "file", "state", "bindings"]

	def __init__(self, path: str, file: IO[bytes]):
		self.path: str = path
		self.file: IO[bytes] = file
		self.state: StreamState = StreamState.Opened
		self.bindings: list[tuple[Signal, Callable[..., bool]]] = []

	@property
	def isOpen(self) -> bool:
		return self.state is StreamState.Opened

	def bind(self, finished: Signal, errored: Signal) -> "StreamHandle":
		"""Releases the handle on the first of `finished` and `errored`."""
		if not self.isOpen:
			raise RuntimeError(f"Cannot bind a released stream: {self.path}")
		self.bindings = [
			(finished, finished.connect(self.finish)),
			(errored, errored.connect(self.abort)),
		]
		return self

	def finish(self, *args: Any) -> bool:
		return self.release(StreamState.Finishing)

	def abort(self, *args: Any) -> bool:
		return self.release(StreamState.Aborting)

	def release(self, via: StreamState = StreamState.Aborting) -> bool:
		"""Closes the file and detaches from the signals. Only the first call
		has an effect, and it returns `True`."""
		if self.state is not StreamState.Opened:
			return False
		self.state = via
		bindings, self.bindings = self.bindings, []
		for signal, handler in bindings:
			signal.disconnect(handler)
		try:
			self.file.close()
		finally:
			self.state = StreamState.Closed
		logged(event) and event("StreamReleased", via.name, Path=self.path)
		return True

	def chunks(self, size: int = CHUNK_SIZE) -> Generator[bytes, None, None]:
		"""Yields the file contents, stopping early if the handle gets
		released in the meantime."""
		while self.isOpen:
			chunk = self.file.read(size)
			if not chunk:
				break
			yield chunk

	def __enter__(self) -> "StreamHandle":
		return self

	def __exit__(self, kind: Any, *args: Any) -> None:
		self.release(StreamState.Finishing if kind is None else StreamState.Aborting)

	def __repr__(self) -> str:
		return f"StreamHandle({self.path!r}, {self.state.name})"


def failure(path: str, err: OSError) -> Failed | Ignored:
	"""Classifies a filesystem error: absence is ignored, anything else is a
	failure."""
	if err.errno in NOT_FOUND:
		return IGNORED
	error(
		"Could not access file",
		err.errno,
		Path=path,
		Error=err.strerror or str(err),
	)
	return Failed(err, 500)


def probe(path: str) -> FileMeta | Failed | Ignored:
	try:
		st = os.stat(path)
	except OSError as e:
		return failure(path, e)
	# Directories have nothing to stream
	if stat.S_ISDIR(st.st_mode):
		return IGNORED
	return FileMeta(modifiedTime=st.st_mtime, size=st.st_size, extension=extension(path))


def open(path: str | Resolved, *, opener: TOpener = builtins.open) -> TDelivery:
	"""Probes and opens the given resolved path for streaming."""
	local_path: str = path.path if isinstance(path, Resolved) else path
	meta = probe(local_path)
	if not isinstance(meta, FileMeta):
		return meta
	try:
		file = opener(local_path, "rb")
	except OSError as e:
		return failure(local_path, e)
	return Opened(local_path, StreamHandle(local_path, file), meta)


async def aopen(path: str | Resolved, *, opener: TOpener = builtins.open) -> TDelivery:
	"""Like `open`, but runs the blocking calls in the loop's executor. If the
	caller is cancelled while the file is being opened, the file is released
	as soon as the executor is done with it."""
	loop = asyncio.get_running_loop()
	future = loop.run_in_executor(None, partial(open, path, opener=opener))
	try:
		return await asyncio.shield(future)
	except asyncio.CancelledError:
		future.add_done_callback(releaseLate)
		raise


def releaseLate(future: "asyncio.Future[TDelivery]") -> None:
	"""Releases a stream that was opened for a caller that went away."""
	if future.cancelled() or future.exception() is not None:
		return
	res = future.result()
	if isinstance(res, Opened):
		res.stream.release()


# EOF
