from typing import Any, Callable

THandler = Callable[..., Any]


class Signal:
	"""A named list of callbacks. Handlers are invoked in connection order
	and can disconnect themselves, or other handlers, while the signal is
	being emitted."""

	__slots__ = ["name", "handlers"]

	def __init__(self, name: str) -> None:
		self.name: str = name
		self.handlers: list[THandler] = []

	def connect(self, handler: THandler) -> THandler:
		self.handlers.append(handler)
		return handler

	def disconnect(self, handler: THandler) -> bool:
		if handler in self.handlers:
			self.handlers.remove(handler)
			return True
		else:
			return False

	def emit(self, *args: Any) -> int:
		"""Calls the handlers that are still connected, returning how many
		were called."""
		count: int = 0
		for handler in list(self.handlers):
			# A previous handler may have detached this one
			if handler in self.handlers:
				handler(*args)
				count += 1
		return count

	def __len__(self) -> int:
		return len(self.handlers)

	def __repr__(self) -> str:
		return f"Signal({self.name}, {len(self.handlers)} handlers)"


# EOF
