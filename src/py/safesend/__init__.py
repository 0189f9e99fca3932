from .model import (
	SendOptions,
	Reason,
	Resolved,
	Rejected,
	Ignored,
	Failed,
	Opened,
	FileMeta,
	IGNORED,
)  # NOQA: F401
from .resolver import resolve  # NOQA: F401
from .delivery import StreamHandle, StreamState, probe, aopen  # NOQA: F401
from .delivery import open as openStream  # NOQA: F401
from .send import send, asend, statusFor  # NOQA: F401
from .http.model import HTTPRequest, HTTPResponse, HTTPRequestError  # NOQA: F401


# EOF
