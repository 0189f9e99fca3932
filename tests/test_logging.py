from safesend.utils import logging
from safesend.utils.hooks import Signal
from safesend.utils.logging import LogLevel, debug, error, logged, setThreshold, warning


def test_threshold():
	previous = logging.THRESHOLD
	try:
		setThreshold("warning")
		assert not logged(debug)
		assert logged(warning)
		assert logged(error)
		setThreshold(LogLevel.Debug)
		assert logged(debug)
	finally:
		setThreshold(previous)


def test_entries_are_returned():
	previous = logging.THRESHOLD
	try:
		setThreshold("debug")
		entry = warning("Rejected path", Path="/../x", Reason="traversal")
		assert entry.level is LogLevel.Warning
		assert entry.context == {"Path": "/../x", "Reason": "traversal"}
	finally:
		setThreshold(previous)


def test_signal():
	calls: list[str] = []
	signal = Signal("finished")
	first = signal.connect(lambda *args: calls.append("first"))
	signal.connect(lambda *args: calls.append("second"))
	assert signal.emit() == 2
	assert signal.disconnect(first) is True
	assert signal.disconnect(first) is False
	assert signal.emit() == 1
	assert calls == ["first", "second", "second"]


# EOF
