from . import delivery
from .http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from .model import (
	Failed,
	Opened,
	Reason,
	Rejected,
	Resolved,
	SendOptions,
	TDelivery,
	TOutcome,
)
from .resolver import resolve
from .utils.logging import debug, error, logged, warning

REASON_MESSAGE: dict[Reason, str] = {
	Reason.BadEncoding: "failed to decode",
	Reason.NullByte: "null bytes",
	Reason.RootRequired: "relative paths require the root option",
	Reason.Traversal: "malicious path",
}


def statusFor(outcome: TOutcome) -> int | None:
	"""Returns the status hint of the outcome, `None` when the outcome does not
	force any status."""
	match outcome:
		case Rejected(status=status) | Failed(status=status):
			return status
		case _:
			return None


def prepare(
	request: HTTPRequest,
	path: str | None,
	options: SendOptions | None,
) -> Resolved | HTTPResponse | None:
	"""Resolves the path of a send, returning the error response of a rejected
	path, or `None` when the path is to be ignored."""
	path = request.path if path is None else path
	options = SendOptions.Default() if options is None else options
	logged(debug) and debug(
		"Send",
		Path=path,
		Root=options.root,
		Index=options.index,
		Hidden=options.hidden,
	)
	resolved = resolve(path, options)
	if isinstance(resolved, Rejected):
		reason, status = resolved
		if status >= 500:
			error("Cannot resolve path", reason.value, Path=path)
		else:
			warning("Rejected path", Path=path, Reason=reason.value)
		return request.error(status, REASON_MESSAGE[reason])
	elif isinstance(resolved, Resolved):
		return resolved
	else:
		return None


def deliver(request: HTTPRequest, opened: TDelivery) -> HTTPResponse | None:
	"""Turns an opened file into a streaming response bound to its stream."""
	match opened:
		case Opened(stream=stream, meta=meta):
			response = request.respond(
				stream.chunks(),
				contentType=meta.contentType,
				contentLength=meta.size,
				headers={"Last-Modified": meta.lastModified},
			)
			stream.bind(response.finished, response.errored)
			return response
		case Failed(error=err, status=status):
			raise HTTPRequestError(
				f"Could not read file: {err.strerror or err}", status=status
			) from err
		case _:
			return None


def send(
	request: HTTPRequest,
	path: str | None = None,
	options: SendOptions | None = None,
) -> HTTPResponse | None:
	"""Sends the file at `path` (the request path by default) as a response
	to `request`. Returns `None` when there is nothing to serve, so that the
	caller can move on to the next handler, and raises `HTTPRequestError`
	on filesystem faults."""
	resolved = prepare(request, path, options)
	if not isinstance(resolved, Resolved):
		return resolved
	return deliver(request, delivery.open(resolved))


async def asend(
	request: HTTPRequest,
	path: str | None = None,
	options: SendOptions | None = None,
) -> HTTPResponse | None:
	"""Like `send`, but opens the file without blocking the event loop."""
	resolved = prepare(request, path, options)
	if not isinstance(resolved, Resolved):
		return resolved
	return deliver(request, await delivery.aopen(resolved))


# EOF
