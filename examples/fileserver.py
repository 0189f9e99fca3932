"""
Static File Server Example

Serves the files of a directory over a bare asyncio stream server, using
`asend` to resolve request paths and stream the files.

Usage:
    python fileserver.py [ROOT] [PORT]

Test with:
    curl -v http://localhost:8000/README.md
    curl -v --path-as-is http://localhost:8000/../../etc/passwd
"""

import asyncio
import sys
from typing import Literal

from safesend import HTTPRequest, HTTPRequestError, SendOptions, asend
from safesend.http.model import HTTPBodyWriter
from safesend.utils.logging import exception, info


class StreamBodyWriter(HTTPBodyWriter):
	def __init__(self, writer: asyncio.StreamWriter) -> None:
		self.writer: asyncio.StreamWriter = writer

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk:
			self.writer.write(chunk)
			await self.writer.drain()
		return True


def serve(options: SendOptions):
	async def onClient(
		reader: asyncio.StreamReader, writer: asyncio.StreamWriter
	) -> None:
		try:
			line = (await reader.readline()).decode("latin1").split()
			# We don't care about the request headers
			while (await reader.readline()).strip():
				pass
			if len(line) != 3:
				return
			method, target, protocol = line
			request = HTTPRequest(method, target.split("?", 1)[0], protocol=protocol)
			try:
				response = await asend(request, options=options) or request.notFound()
			except HTTPRequestError as e:
				response = request.fail(e.message, status=e.status or 500)
			response.setHeader("Connection", "close")
			await StreamBodyWriter(writer).send(response)
		except Exception as e:
			exception(e)
		finally:
			writer.close()

	return onClient


async def main(root: str, port: int) -> None:
	options = SendOptions(root=root, index="index.html")
	server = await asyncio.start_server(serve(options), "127.0.0.1", port)
	info("Serving files", Root=root, Port=port)
	async with server:
		await server.serve_forever()


if __name__ == "__main__":
	asyncio.run(
		main(
			sys.argv[1] if len(sys.argv) > 1 else ".",
			int(sys.argv[2]) if len(sys.argv) > 2 else 8000,
		)
	)

# EOF
