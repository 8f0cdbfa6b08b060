#!/usr/bin/env python3
"""
AI Money Machine management CLI

Usage:
    aimm-manage serve                      # dashboard + simulation on AIMM_HOST:AIMM_PORT
    aimm-manage simulate --ticks 20        # headless run, prints the wire and signals
    aimm-manage reset-db                   # drop stored signals and news
    aimm-manage test                       # run the test suite
"""

import os
import sys
import random
import logging
import argparse
import subprocess
from logging.handlers import RotatingFileHandler

from moneymachine.config import load_config, MachineConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config: MachineConfig) -> logging.Logger:
    """Configure rotating file logger with console output"""
    root = logging.getLogger()
    root.setLevel(config.log_level)

    os.makedirs(config.log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(config.log_dir, 'aimm.log'),
        maxBytes=10 * 1024 * 1024,
        backupCount=7
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console_handler)
    return logging.getLogger("MoneyMachine")


def run_server(args, config: MachineConfig):
    import uvicorn
    from moneymachine.api import create_app
    from moneymachine.machine import MoneyMachine

    host = args.host or config.host
    port = args.port or config.port
    print(f"Starting AI Money Machine on http://{host}:{port} ...")
    uvicorn.run(create_app(MoneyMachine(config)), host=host, port=port)


def run_simulation(args, config: MachineConfig):
    from moneymachine.machine import MoneyMachine

    machine = MoneyMachine(config, rng=random.Random(args.seed))
    seen = {s.id for s in machine.signals}
    for i in range(args.ticks):
        news = machine.generate_market_event() if args.every_tick else machine.tick()
        if news is None:
            continue
        print(f"[{i:03d}] {news.impact_level.value:<6} {news.headline}")
        for signal in machine.signals:
            if signal.id not in seen:
                seen.add(signal.id)
                print(f"      >>> {signal.action.value} {signal.ticker}: {signal.reason}")

    print("\nFinal sentiment:")
    for node in sorted(machine.graph.nodes, key=lambda n: -n.sentiment_score):
        print(f"  {node.ticker:<6} {node.id:<12} {node.sentiment_score:>5g}")


def reset_db(args, config: MachineConfig):
    from moneymachine.store import LocalStore
    LocalStore(config.db_path).clear_db()
    print(f"Cleared {config.db_path}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="AI Money Machine Management CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the dashboard and simulation")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    sim_parser = subparsers.add_parser("simulate", help="Run the market simulation headless")
    sim_parser.add_argument("--ticks", type=int, default=20, help="Number of timer ticks")
    sim_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    sim_parser.add_argument("--every-tick", action="store_true", help="Force an event on every tick")

    subparsers.add_parser("reset-db", help="Clear stored signals and news")
    subparsers.add_parser("test", help="Run test suite")

    args = parser.parse_args(argv)
    config = load_config()

    if args.command == "serve":
        setup_logging(config)
        run_server(args, config)
    elif args.command == "simulate":
        setup_logging(config)
        run_simulation(args, config)
    elif args.command == "reset-db":
        setup_logging(config)
        reset_db(args, config)
    elif args.command == "test":
        print("Running tests...")
        return subprocess.call([sys.executable, "-m", "pytest", "tests/"])
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
