import os.path

from .model import IGNORED, Reason, Rejected, Resolved, SendOptions, TResolution
from .utils.logging import debug, logged
from .utils.paths import contains, decode, hasTraversal, isAbsolute, leadingDot

__doc__ = """
Turns an untrusted request path into a canonical filesystem path below the
configured root. Resolution is purely lexical: the filesystem is never
accessed, so any path that comes out as `Resolved` is safe to stat.
"""

SEPARATORS: str = os.sep + (os.altsep or "")


def rootOf(options: SendOptions) -> str:
	"""Returns the absolute, normalized root, or an empty string when there is
	none."""
	return os.path.abspath(options.root) if options.root else ""


def resolve(path: str, options: SendOptions) -> TResolution:
	"""Resolves the raw request `path` according to `options`, returning
	a `Resolved` path, a `Rejected` reason or `IGNORED` for hidden files."""
	root: str = rootOf(options)
	logged(debug) and debug("Resolving path", Path=path, Root=root)
	trailing_slash: bool = path.endswith("/")

	decoded: str | None = decode(path)
	if decoded is None:
		return Rejected.For(Reason.BadEncoding)

	# NUL would truncate the path in native calls
	if "\0" in decoded:
		return Rejected.For(Reason.NullByte)

	if options.index and trailing_slash:
		decoded += options.index

	if not root and not isAbsolute(decoded):
		return Rejected.For(Reason.RootRequired)
	if not root and hasTraversal(decoded):
		return Rejected.For(Reason.Traversal)

	# The request path is appended to the root, a leading slash never
	# replaces it.
	resolved: str = os.path.normpath(
		os.path.join(root, decoded.lstrip(SEPARATORS)) if root else decoded
	)

	if root and not contains(root, resolved):
		return Rejected.For(Reason.Traversal)

	if not options.hidden and leadingDot(resolved):
		return IGNORED

	return Resolved(resolved)


# EOF
