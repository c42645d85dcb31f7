from __future__ import annotations

import argparse
import os
import sys
import threading

from loadgen.core.engine import run_crypto_load, run_udp_noise
from loadgen.core.models import CryptoConfig, Mode, UDPConfig
from loadgen.core.signals import SignalHandlers, signal_name, stop_after
from loadgen.core.timeparse import parse_duration_to_seconds
from loadgen.core.validation import validate_crypto, validate_udp
from loadgen.exceptions import ConfigurationError, EngineError, ValidationError
from loadgen.logger import configure_logging
from loadgen.logger import session_logger as logger

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loadgen",
        description="Load generator: SHA-256 CPU stress (crypto) or UDP packet flood (udp)",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default=os.environ.get("LOADGEN_MODE"),
        help="Test mode: 'crypto' or 'udp' (required)",
    )
    parser.add_argument(
        "--data-size",
        type=int,
        default=os.environ.get("LOADGEN_DATA_SIZE", "1024"),
        help="Bytes hashed per SHA-256 operation (crypto mode)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=os.environ.get("LOADGEN_WORKERS", "1"),
        help="Number of concurrent workers (both modes)",
    )
    parser.add_argument(
        "--target",
        type=str,
        default=os.environ.get("LOADGEN_TARGET", "127.0.0.1:1"),
        help="Target host:port (udp mode). IPv6 hosts go in brackets: [::1]:9000",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=os.environ.get("LOADGEN_RATE", "0"),
        help="Total send rate in packets/sec across all workers (udp mode, 0 = unlimited)",
    )
    parser.add_argument(
        "--duration",
        type=str,
        default=os.environ.get("LOADGEN_DURATION"),
        help="Stop after this long (e.g. 30s, 5m, 1h30m). Default: run until SIGINT/SIGTERM.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=os.environ.get("LOADGEN_LOG_LEVEL", "INFO"),
        help="Log level: DEBUG|INFO|WARNING|ERROR",
    )
    return parser


def _build_config(args) -> CryptoConfig | UDPConfig:
    if not args.mode:
        raise ConfigurationError(
            "MISSING_MODE",
            "--mode is required",
            {"recovery": "Provide --mode crypto or --mode udp"},
        )

    try:
        mode = Mode(args.mode.strip().lower())
    except ValueError:
        raise ConfigurationError(
            "INVALID_MODE",
            "--mode must be 'crypto' or 'udp'",
            {"provided": args.mode},
        ) from None

    if mode == Mode.CRYPTO:
        crypto = CryptoConfig(data_size=args.data_size, workers=args.workers)
        validate_crypto(crypto)
        return crypto

    udp = UDPConfig(target=args.target, rate=args.rate, workers=args.workers)
    validate_udp(udp)
    return udp


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.log_level not in _LOG_LEVELS:
        parser.print_usage(sys.stderr)
        logger.error(
            "loadgen.invalid_log_level",
            event="loadgen.invalid_log_level",
            provided=args.log_level,
            recovery="Use one of " + "|".join(_LOG_LEVELS),
        )
        return 2
    configure_logging(args.log_level)

    try:
        config = _build_config(args)
    except (ConfigurationError, ValidationError) as exc:
        if exc.code == "MISSING_MODE":
            parser.print_usage(sys.stderr)
        logger.error(
            "loadgen.invalid_config",
            event="loadgen.invalid_config",
            code=exc.code,
            error=exc.message,
            **exc.details,
        )
        return 2

    duration_seconds = None
    if args.duration is not None:
        try:
            duration_seconds = parse_duration_to_seconds(args.duration)
        except ValueError as exc:
            logger.error(
                "loadgen.invalid_duration",
                event="loadgen.invalid_duration",
                provided=args.duration,
                error=str(exc),
            )
            return 2

    stop_event = threading.Event()
    handlers = SignalHandlers(stop_event, logger=logger)
    timer: threading.Timer | None = None

    logger.info(
        "loadgen.ready",
        event="loadgen.ready",
        config=config,
        duration_seconds=duration_seconds,
        stop_hint="Press Ctrl+C to stop" if duration_seconds is None else None,
    )

    try:
        with handlers:
            if duration_seconds is not None:
                timer = stop_after(stop_event, duration_seconds)
            if isinstance(config, CryptoConfig):
                run_crypto_load(config, stop_event, logger=logger)
            else:
                run_udp_noise(config, stop_event, logger=logger)
    except EngineError as exc:
        logger.error(
            "loadgen.engine_failed",
            event="loadgen.engine_failed",
            code=exc.code,
            error=exc.message,
            cause=str(exc.__cause__) if exc.__cause__ else None,
        )
        return 1
    finally:
        if timer is not None:
            timer.cancel()

    if handlers.received is not None:
        logger.warning(
            "loadgen.signal",
            event="loadgen.signal",
            signal=signal_name(handlers.received),
        )

    logger.info("loadgen.completed", event="loadgen.completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
