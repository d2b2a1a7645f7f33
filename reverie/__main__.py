import argparse
import asyncio
import logging
import sys
import typing

import reverie.config
import reverie.constants.durations as dur
import reverie.engine
import reverie.midi_utils
import reverie.osc
import reverie.transcript


logger = logging.getLogger(__name__)


# Time left for the flourish to ring out before the port is closed.
FLOURISH_TAIL = dur.WHOLE + 2 * dur.FLOURISH_SPACING


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="reverie", description="Sonify a stream of reasoning text over MIDI.")

	common = argparse.ArgumentParser(add_help=False)
	common.add_argument("--config", default=reverie.config.DEFAULT_CONFIG_PATH, help="YAML config file (default: %(default)s)")
	common.add_argument("--device", default=None, help="MIDI output port name (overrides the config)")
	common.add_argument("--no-midi", action="store_true", help="Run without opening a MIDI port")
	common.add_argument("--osc", action="store_true", help="Enable the OSC bridge (overrides the config)")
	common.add_argument("--verbose", "-v", action="store_true", help="Log every chunk decision")

	subparsers = parser.add_subparsers(dest="command", required=True)

	replay = subparsers.add_parser("replay", parents=[common], help="Replay a saved transcript")
	replay.add_argument("transcript", help="JSON lines transcript written by 'listen --record'")
	replay.add_argument("--speed", type=float, default=None, help="Replay speed multiplier (overrides the config)")

	listen = subparsers.add_parser("listen", parents=[common], help="Sonify lines read from stdin")
	listen.add_argument("--record", default=None, metavar="PATH", help="Save the transcript to PATH on exit")

	return parser


def build_engine (config: reverie.config.EngineConfig, args: argparse.Namespace) -> reverie.engine.Engine:

	"""
	Create an engine from the config, with command-line overrides applied.

	A MIDI port that cannot be opened is logged and the engine runs silent.
	"""

	engine = reverie.engine.Engine(
		mixer = config.mixer,
		replay_base_delay = config.replay.base_delay,
		record = getattr(args, "record", None) is not None
	)

	if args.no_midi:
		logger.info("MIDI disabled - running silent")
		return engine

	try:
		engine.connect_midi(
			args.device or config.midi.device_name,
			channels = config.midi.channels,
			noise_note = config.midi.noise_note
		)
	except reverie.midi_utils.AudioBackendError as e:
		logger.error(f"{e} - running silent")

	return engine


async def _run (engine: reverie.engine.Engine, config: reverie.config.EngineConfig, args: argparse.Namespace) -> None:

	osc_server: typing.Optional[reverie.osc.OscServer] = None

	if config.osc.enabled or args.osc:
		osc_server = reverie.osc.OscServer(
			engine,
			receive_port = config.osc.receive_port,
			send_port = config.osc.send_port,
			send_host = config.osc.send_host
		)
		await osc_server.start()

	try:
		engine.reset()
		await engine.start()

		if args.command == "replay":
			chunks = reverie.transcript.load(args.transcript)
			speed = args.speed if args.speed is not None else config.replay.speed
			await engine.replay(chunks, speed=speed)

		else:
			await _listen(engine, sys.stdin)

		await asyncio.sleep(FLOURISH_TAIL)

	finally:
		if args.command == "listen" and args.record:
			reverie.transcript.save(args.record, engine.transcript)

		engine.stop()

		if osc_server is not None:
			await osc_server.stop()

		await engine.close()


async def _listen (engine: reverie.engine.Engine, stream: typing.TextIO) -> None:

	"""Feed each line of ``stream`` as one delta, then flourish at end of input."""

	loop = asyncio.get_running_loop()

	while True:

		line = await loop.run_in_executor(None, stream.readline)

		if not line:
			break

		engine.add_delta(line.rstrip("\n"))

	engine.start_flourish()


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the reverie command line.
	"""

	args = build_parser().parse_args(argv)

	try:
		config = reverie.config.read_config(args.config)
	except ValueError as e:
		print(f"reverie: {e}", file=sys.stderr)
		return 2

	level = logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO)
	logging.basicConfig(level=level)

	if args.command == "replay" and args.speed is not None and args.speed <= 0:
		logger.error("--speed must be positive")
		return 2

	engine = build_engine(config, args)

	try:
		asyncio.run(_run(engine, config, args))
	except KeyboardInterrupt:
		logger.info("Stopping...")
	except (OSError, ValueError) as e:
		logger.error(str(e))
		return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
