#!/usr/bin/env python3
"""
Terminal Progress Bars - Demo Entry Point

Runs one of two demos:
1. single: one bar driven by the main thread, with log lines printed above it
2. multi: several bars, each driven by its own worker thread, under an aggregate bar
"""

import sys
import logging
import random
import threading
import time

from termbars.cli.config import parse_arguments
from termbars.logging import LoggingManager, setup_logging
from termbars.progress import BarConfig, MultiProgressBar, ProgressBar

logger = logging.getLogger(__name__)


def run_single(args, config: BarConfig, logging_manager: LoggingManager) -> None:
    """Drive one bar over a range, logging every tenth step above it."""
    bar = ProgressBar("downloading [:bar] :percent :current/:total :rate/s ETA :eta", config, total=args.total)

    with logging_manager.progress_mode(bar):
        for step in bar.iterate(range(args.total)):
            time.sleep(args.delay)
            if step and step % 10 == 0:
                logger.warning(f"checkpoint at step {step}")


def run_multi(args, config: BarConfig, logging_manager: LoggingManager) -> None:
    """Drive one bar per worker thread under an aggregate bar."""
    bars = MultiProgressBar("main [:bar] :percent", config, logging_manager=logging_manager)

    workers = []
    for index in range(args.workers):
        steps = args.total + random.randint(-args.total // 2, args.total // 2)
        bar = bars.register(f"task {index + 1} [:bar] :current/:total", total=max(1, steps))
        workers.append(threading.Thread(target=_work, args=(bar, steps, args.delay), name=f"worker-{index + 1}"))

    bars.start()
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()


def _work(bar: ProgressBar, steps: int, delay: float) -> None:
    for _ in range(max(1, steps)):
        time.sleep(delay * random.uniform(0.5, 1.5))
        bar.advance()


def main():
    """
    Main entry point - parse config and run the selected demo.

    Returns:
        Exit code: 0 for success, 2 for fatal errors
    """
    args = parse_arguments()

    logging_manager = setup_logging(args.log_file, console_level=args.console_log_level)

    try:
        config = BarConfig(
            width=args.width,
            frequency=args.frequency,
            hide_cursor=args.hide_cursor,
            output=sys.stderr,
        )

        if args.mode == 'single':
            run_single(args, config, logging_manager)
        else:
            run_multi(args, config, logging_manager)

        logger.info("Demo complete")
        return 0

    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        logger.debug("Full error details:", exc_info=True)
        return 2

    except KeyboardInterrupt:
        logger.warning("\nDemo interrupted by user (Ctrl+C)")
        return 130

    except Exception as e:
        logger.error(f"Unexpected error occurred: {e}")
        logger.debug("Full error details:", exc_info=True)
        return 2

    finally:
        logging_manager.cleanup()


if __name__ == '__main__':
    sys.exit(main())
