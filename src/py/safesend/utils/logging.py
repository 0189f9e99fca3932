import sys
import time
from enum import Enum
from typing import NamedTuple, Any, Callable
from contextvars import ContextVar
from .term import Term
from ..config import LOG_LEVEL

__doc__ = """
Structured console logging. Each logging function builds a `LogEntry` and
writes it to stderr as a single coloured line, with the keyword arguments
rendered as `Key=value` pairs.

Use the `logged()` guard before building costly entries:

```
logged(debug) and debug("Resolving", Path=path)
```
"""

ERR = sys.stderr

TLiteral = bool | int | float | str | bytes
TPrimitive = TLiteral | list[TLiteral] | tuple[TLiteral, ...] | dict[str, TLiteral]

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="safesend")


class LogType(Enum):
	Message = 0  # A general information message
	Event = 20  # Something that happened to a resource


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30  # A Warning
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

LOG_LEVEL_NAMES: dict[str, LogLevel] = {
	"debug": LogLevel.Debug,
	"info": LogLevel.Info,
	"warning": LogLevel.Warning,
	"error": LogLevel.Error,
}

THRESHOLD: LogLevel = LOG_LEVEL_NAMES.get(LOG_LEVEL, LogLevel.Info)


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: TPrimitive | None = None
	context: dict[str, TPrimitive] | None = None


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.NORMAL}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def setThreshold(level: LogLevel | str) -> LogLevel:
	"""Changes the minimum level of the entries that get written."""
	global THRESHOLD
	THRESHOLD = level if isinstance(level, LogLevel) else LOG_LEVEL_NAMES[level]
	return THRESHOLD


def write(entry: LogEntry) -> LogEntry:
	if entry.level.value < THRESHOLD.value:
		return entry
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	name: str | None = None,
	value: TPrimitive | None = None,
	context: dict[str, TPrimitive],
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		name=name,
		value=value,
		context=context,
	)


def debug(message: str, *, origin: str | None = None, **context: TPrimitive) -> LogEntry:
	return write(
		entry(message=message, level=LogLevel.Debug, origin=origin, context=context)
	)


def info(message: str, *, origin: str | None = None, **context: TPrimitive) -> LogEntry:
	return write(entry(message=message, origin=origin, context=context))


def warning(
	message: str, *, origin: str | None = None, **context: TPrimitive
) -> LogEntry:
	return write(
		entry(message=message, level=LogLevel.Warning, origin=origin, context=context)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return write(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			origin=origin,
			context=context,
		)
	)


def event(
	event: str,
	value: Any = None,
	*,
	origin: str | None = None,
	level: LogLevel = LogLevel.Debug,
	**context: TPrimitive,
) -> LogEntry:
	return write(
		entry(
			name=event,
			value=value,
			type=LogType.Event,
			level=level,
			origin=origin,
			context=context,
		)
	)


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	try:
		stream = ERR
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		stream.flush()
	except Exception:  # nosec: B110
		# Swallow all exceptions so that this function can be called from an exception
		# handler safely, such as in the implementation of logging/logging sinks.
		pass

	# Return the exception so that this function can be called like:
	#   raise exception(e)
	return exception


LOGGER_LEVELS: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	event: LogLevel.Debug,
	info: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}


def logged(item: Callable[..., Any]) -> bool:
	"""Takes one of the logging function, and tells if it is currently
	supported. This is used to guard against running the whole entry
	building when not necessary."""
	return LOGGER_LEVELS.get(item, LogLevel.Exception).value >= THRESHOLD.value


# EOF
