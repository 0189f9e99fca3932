from email.utils import formatdate
from enum import Enum
from typing import NamedTuple, TypeAlias, TYPE_CHECKING

from . import config
from .utils.files import contentType as getContentType

if TYPE_CHECKING:
	from .delivery import StreamHandle

# -----------------------------------------------------------------------------
#
# OPTIONS
#
# -----------------------------------------------------------------------------


class SendOptions(NamedTuple):
	"""Configures how request paths are resolved. Built once per route and
	shared, read-only, by every call."""

	root: str | None = None
	index: str | None = None
	hidden: bool = False
	# Seconds, passed through to the caller
	maxAge: int = 0

	@staticmethod
	def Default() -> "SendOptions":
		return SendOptions(
			root=config.ROOT,
			index=config.INDEX,
			hidden=config.HIDDEN,
			maxAge=config.MAXAGE,
		)


# -----------------------------------------------------------------------------
#
# OUTCOMES
#
# -----------------------------------------------------------------------------


class Reason(Enum):
	"""Why a request path was rejected."""

	BadEncoding = "bad-encoding"
	NullByte = "null-byte"
	RootRequired = "root-required"
	Traversal = "traversal"


REASON_STATUS: dict[Reason, int] = {
	Reason.BadEncoding: 400,
	Reason.NullByte: 400,
	Reason.RootRequired: 500,
	Reason.Traversal: 400,
}


class Resolved(NamedTuple):
	"""A canonical, absolute path that passed every check."""

	path: str


class Rejected(NamedTuple):
	reason: Reason
	status: int

	@staticmethod
	def For(reason: Reason) -> "Rejected":
		return Rejected(reason, REASON_STATUS[reason])


class Ignored(NamedTuple):
	"""Nothing to serve. Hidden and missing files both produce this, and it
	has no field so that the two cannot be told apart."""

	pass


class FileMeta(NamedTuple):
	modifiedTime: float
	size: int
	extension: str

	@property
	def lastModified(self) -> str:
		"""The modification time as an HTTP date."""
		return formatdate(self.modifiedTime, usegmt=True)

	@property
	def contentType(self) -> str:
		return getContentType(f"file{self.extension}")


class Failed(NamedTuple):
	"""A filesystem fault other than absence."""

	error: OSError
	status: int = 500


class Opened(NamedTuple):
	path: str
	stream: "StreamHandle"
	meta: FileMeta


IGNORED: Ignored = Ignored()

TResolution: TypeAlias = Resolved | Rejected | Ignored
TDelivery: TypeAlias = Opened | Ignored | Failed
TOutcome: TypeAlias = Resolved | Rejected | Ignored | Opened | Failed

# EOF
