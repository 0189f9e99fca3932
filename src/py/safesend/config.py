from os import getenv

# Default root directory, unset means requests must carry absolute paths
ROOT: str | None = getenv("SAFESEND_ROOT") or None

# Name of the file served for requests ending with a slash
INDEX: str | None = getenv("SAFESEND_INDEX") or None

HIDDEN: bool = getenv("SAFESEND_HIDDEN", "0") == "1"

# Passed through to callers, not interpreted here
MAXAGE: int = int(getenv("SAFESEND_MAXAGE", 0))

CHUNK_SIZE: int = int(getenv("SAFESEND_CHUNK_SIZE", 64_000))

LOG_LEVEL: str = getenv("SAFESEND_LOG_LEVEL", "info").lower()

# EOF
