import re
from pathlib import PurePath
from urllib.parse import unquote_to_bytes

__doc__ = """
Helpers to work with untrusted request paths. None of these functions touch
the filesystem.
"""

# A `%` that does not introduce two hex digits
RE_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
RE_SEPARATOR = re.compile(r"[/\\]")


def decode(path: str) -> str | None:
	"""Percent-decodes the path as UTF-8, returning `None` when there is a
	malformed escape or when the decoded bytes are not valid UTF-8."""
	if RE_BAD_ESCAPE.search(path):
		return None
	try:
		return unquote_to_bytes(path).decode("utf8")
	except UnicodeError:
		return None


def isAbsolute(path: str) -> bool:
	"""Tells if the path looks absolute, either POSIX (`/`), drive-letter
	(`C:\\`) or UNC (`\\\\server`)."""
	if path.startswith("/"):
		return True
	elif path[1:3] == ":\\":
		return True
	elif path.startswith("\\\\"):
		return True
	else:
		return False


def segments(path: str) -> list[str]:
	"""Splits the path on both separator styles."""
	return RE_SEPARATOR.split(path)


def hasTraversal(path: str) -> bool:
	return ".." in segments(path)


def contains(root: str | PurePath, path: str | PurePath) -> bool:
	"""Tells if `path` is `root` or below it. Both are expected to be absolute
	and normalized. The comparison is done on path parts, so that `/srv/www`
	does not contain `/srv/www-private`."""
	parts = PurePath(root).parts
	return PurePath(path).parts[: len(parts)] == parts


def leadingDot(path: str | PurePath) -> bool:
	"""Tells if the last segment of the path is hidden."""
	return PurePath(path).name.startswith(".")


# EOF
