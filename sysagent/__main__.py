from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import uvicorn

from .config import settings
from .main import app

logger = logging.getLogger('sysagent')


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError('must be greater than zero')
    return number


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='sysagent', description='Serve host metrics as JSON with a live dashboard.')
    parser.add_argument('--host', default=settings.app_host, help='listen address (default: %(default)s)')
    parser.add_argument('--port', type=int, default=settings.app_port, help='listen port (default: %(default)s)')
    parser.add_argument(
        '--interval',
        type=_positive_float,
        default=settings.sample_interval_sec,
        help='sampling interval in seconds (default: %(default)s)',
    )
    parser.add_argument('--log-level', default=settings.log_level, help='logging level (default: %(default)s)')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    settings.app_host = args.host
    settings.app_port = args.port
    settings.sample_interval_sec = args.interval
    settings.log_level = args.log_level

    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    logger.info('SysAgent dashboard available at http://%s:%d', args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == '__main__':
    main()
