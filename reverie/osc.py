"""OSC bridge for remote mixing and state broadcasting.

The server listens on a UDP port (default 9000) for control messages and
sends state to a target host/port (default 127.0.0.1:9001), which is how a
separate visualiser or control surface follows the engine.

Receive Handlers
────────────────
- ``/mute/<axis> [0|1]``: Mute an axis (``0`` unmutes)
- ``/unmute/<axis>``: Unmute an axis
- ``/solo/<axis> [0|1]``: Solo an axis (``0`` un-solos)
- ``/volume/<axis> <0-100>``: Set an axis volume
- ``/delta <text>``: Feed a chunk of text
- ``/flourish``: Signal end of stream
- ``/reset``: Clear the session

Send Events
───────────
- ``/axes <certainty> <reasoning> <revision> <resolution>``: After each chunk (ints)
- ``/trend <string>``: After each chunk
- ``/flourish``: When the flourish plays
"""

import asyncio
import logging
import typing

import pythonosc.dispatcher
import pythonosc.osc_server
import pythonosc.udp_client

import reverie.mixer

if typing.TYPE_CHECKING:
	from reverie.engine import ChunkAnalysis, Engine


logger = logging.getLogger(__name__)


def _flag_argument (args: typing.Tuple[typing.Any, ...]) -> bool:

	"""Read an optional on/off argument; no argument means on."""

	if not args:
		return True

	return bool(int(args[0]))


class OscServer:

	"""Async OSC server/client bound to one engine."""

	def __init__ (
		self,
		engine: "Engine",
		receive_port: int = 9000,
		send_port: int = 9001,
		send_host: str = "127.0.0.1"
	) -> None:

		self._engine = engine
		self._receive_port = receive_port
		self._send_port = send_port
		self._send_host = send_host

		self._server: typing.Optional[typing.Any] = None
		self._transport: typing.Optional[asyncio.BaseTransport] = None
		self._client: typing.Optional[pythonosc.udp_client.SimpleUDPClient] = None
		self._dispatcher = pythonosc.dispatcher.Dispatcher()

		self._dispatcher.map("/mute/*", self._handle_mute)
		self._dispatcher.map("/unmute/*", self._handle_unmute)
		self._dispatcher.map("/solo/*", self._handle_solo)
		self._dispatcher.map("/volume/*", self._handle_volume)
		self._dispatcher.map("/delta", self._handle_delta)
		self._dispatcher.map("/flourish", self._handle_flourish)
		self._dispatcher.map("/reset", self._handle_reset)

		engine.on_active_axes_change(self._send_axes)
		engine.on_event("chunk", self._send_trend)
		engine.on_event("flourish", self._send_flourish)


	@property
	def port (self) -> typing.Optional[int]:

		"""The bound receive port (useful when constructed with port 0)."""

		if self._transport is None:
			return None

		return self._transport.get_extra_info("sockname")[1]


	async def start (self) -> None:

		"""Start the OSC server and client."""

		self._client = pythonosc.udp_client.SimpleUDPClient(self._send_host, self._send_port)

		self._server = pythonosc.osc_server.AsyncIOOSCUDPServer(
			("0.0.0.0", self._receive_port),
			self._dispatcher,
			asyncio.get_running_loop()  # type: ignore[arg-type]
		)

		transport, _ = await self._server.create_serve_endpoint()
		self._transport = transport

		logger.info(f"OSC listening on :{self.port}, sending to {self._send_host}:{self._send_port}")


	async def stop (self) -> None:

		"""Stop the OSC server."""

		if self._transport:
			self._transport.close()
			self._transport = None
			logger.info("OSC server stopped")


	def send (self, address: str, *args: typing.Any) -> None:

		"""Send an OSC message."""

		if self._client:
			try:
				self._client.send_message(address, args)
			except Exception as e:
				logger.warning(f"OSC send error: {e}")


	def map (self, address: str, handler: typing.Callable) -> None:

		"""Register an additional handler, e.g. for a custom control surface."""

		self._dispatcher.map(address, handler)


	# Outgoing state

	def _send_axes (self, axes: typing.Dict[str, bool]) -> None:
		self.send("/axes", *[int(axes.get(axis, False)) for axis in reverie.mixer.AXES])

	def _send_trend (self, analysis: "ChunkAnalysis") -> None:
		self.send("/trend", analysis.trend)

	def _send_flourish (self) -> None:
		self.send("/flourish")


	# Handlers

	def _axis_from_address (self, address: str) -> typing.Optional[str]:

		# address is like /mute/certainty
		parts = address.split("/")

		if len(parts) < 3 or parts[2] not in reverie.mixer.AXES:
			logger.warning(f"OSC message for unknown axis: {address}")
			return None

		return parts[2]

	def _handle_mute (self, address: str, *args: typing.Any) -> None:
		axis = self._axis_from_address(address)
		if axis is None:
			return
		try:
			self._engine.set_axis(axis, muted=_flag_argument(args))
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC mute argument: {args[0]}")

	def _handle_unmute (self, address: str, *args: typing.Any) -> None:
		axis = self._axis_from_address(address)
		if axis is not None:
			self._engine.set_axis(axis, muted=False)

	def _handle_solo (self, address: str, *args: typing.Any) -> None:
		axis = self._axis_from_address(address)
		if axis is None:
			return
		try:
			self._engine.set_axis(axis, solo=_flag_argument(args))
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC solo argument: {args[0]}")

	def _handle_volume (self, address: str, *args: typing.Any) -> None:
		axis = self._axis_from_address(address)
		if axis is None or not args:
			return
		try:
			self._engine.set_axis(axis, volume=float(args[0]))
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC volume argument: {args[0]}")

	def _handle_delta (self, address: str, *args: typing.Any) -> None:
		if not args:
			return
		self._engine.add_delta(str(args[0]))

	def _handle_flourish (self, address: str, *args: typing.Any) -> None:
		self._engine.start_flourish()

	def _handle_reset (self, address: str, *args: typing.Any) -> None:
		self._engine.reset()
