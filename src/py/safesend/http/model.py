import inspect
from abc import ABC, abstractmethod
from typing import Any, Generator, Literal, NamedTuple, TypeAlias

from mypy_extensions import mypyc_attr

from ..utils.hooks import Signal
from ..utils.logging import warning
from .api import ResponseFactory
from .status import HTTP_STATUS

DEFAULT_ENCODING: str = "utf8"

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


def asBytes(value: str | bytes | bytearray) -> bytes:
	if isinstance(value, bytes):
		return value
	elif isinstance(value, bytearray):
		return bytes(value)
	elif isinstance(value, str):
		return value.encode(DEFAULT_ENCODING)
	else:
		raise ValueError(f"Expected bytes or str, got: {value}")


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for response/request processing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPRequestError(Exception):
	"""To be raised by handlers to generate a 500 error."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""Represents a whole body as bytes."""

	payload: bytes = b""
	length: int = 0


class HTTPBodyStream(NamedTuple):
	"""An HTTP body that is generated from a stream."""

	stream: Generator[str | bytes, Any, Any]


# The different types of bodies that are managed
THTTPBody: TypeAlias = HTTPBodyBlob | HTTPBodyStream


@mypyc_attr(allow_interpreted_subclasses=True)
class HTTPBodyWriter(ABC):
	"""Writes responses to a transport. Subclasses only need to implement
	`_writeBytes`."""

	async def write(self, body: THTTPBody | bytes | None) -> bool:
		"""Writes the given type of body."""
		if isinstance(body, bytes):
			return await self._writeBytes(body)
		elif isinstance(body, HTTPBodyBlob):
			return await self._writeBytes(body.payload)
		elif isinstance(body, HTTPBodyStream):
			for chunk in body.stream:
				await self._writeBytes(asBytes(chunk), True)
			await self._writeBytes(b"", False)
			return True
		elif body is None:
			return True
		else:
			raise ValueError(f"Unsupported body format: {body}")

	async def send(self, response: "HTTPResponse") -> bool:
		"""Writes the head and body of the response, then emits its
		`finished` signal. A client that goes away emits `errored` and returns
		`False`, any other error emits `errored` and is re-raised."""
		try:
			await self._writeBytes(response.head(), True)
			await self.write(response.body)
		except ConnectionError as e:
			# Client did an early close
			warning(
				"Client closed the connection",
				Status=response.status,
				Error=e.__class__.__name__,
			)
			response.errored.emit(e)
			return False
		except BaseException as e:
			response.errored.emit(e)
			raise
		response.finished.emit(response)
		return True

	@abstractmethod
	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool: ...


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""Represents an HTTP requests, which also acts as a factory for
	responses."""

	__slots__ = [
		"protocol",
		"method",
		"path",
		"query",
		"_headers",
	]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None = None,
		headers: HTTPHeaders | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] | None = query
		self.protocol: str = protocol
		self._headers: HTTPHeaders = headers or HTTPHeaders({})

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			protocol=self.protocol,
			headers=headers,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f'?{self.query}' if self.query else ''} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response. The `finished` signal is emitted once the response
	has been fully written, `errored` when writing it failed."""

	__slots__ = [
		"protocol",
		"status",
		"message",
		"headers",
		"body",
		"finished",
		"errored",
	]

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects."""
		payload: bytes | None = None
		updated_headers: dict[str, str] = dict(headers) if headers else {}

		body: THTTPBody | None = None
		if content is None:
			pass
		elif isinstance(content, str):
			payload = content.encode(DEFAULT_ENCODING)
		elif isinstance(content, bytes):
			payload = content
		elif inspect.isgenerator(content):
			body = HTTPBodyStream(content)
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if payload is not None:
			contentLength = len(payload)
			body = HTTPBodyBlob(payload, contentLength)
		if contentType is not None:
			updated_headers["Content-Type"] = contentType
		if contentLength is not None:
			updated_headers["Content-Length"] = str(contentLength)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=HTTPHeaders(
				updated_headers,
				contentType=contentType,
				contentLength=contentLength,
			),
			body=body,
			protocol=protocol,
		)

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: THTTPBody | None = None,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = headers
		self.body: THTTPBody | None = body
		self.finished: Signal = Signal("finished")
		self.errored: Signal = Signal("errored")

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = str(value)
		return self

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		status: int = 204 if self.body is None else self.status
		message: str = (
			self.message if status == self.status else None
		) or HTTP_STATUS.get(status, "Unknown status")
		lines: list[str] = [
			f"{headername(k)}: {v}" for k, v in self.headers.headers.items()
		]
		lines.insert(0, f"{self.protocol} {status} {message}")
		lines.append("")
		lines.append("")
		return "\r\n".join(lines).encode("ascii")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers} {self.body})"


# EOF
