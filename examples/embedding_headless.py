#!/usr/bin/env python3
"""
Example: Headless Hot Reload
Shows how to embed HotReloadController in another asyncio application.

This example demonstrates:
- Checking LocalStack health before watching
- Receiving code-updated events on the event loop
- Clean shutdown on Ctrl+C
"""

import asyncio
import json
import sys

try:
    from localstack_hotreload import HotReloadController
    from hotreload_core import ReadinessTimeout
except ImportError:
    print("Error: Install localstack-hotreload first: pip install localstack-hotreload")
    sys.exit(1)


class ReloadLogger:
    """
    Collect reload events and print them as JSON lines.

    Use case: piping reload events into another tool.
    """

    def __init__(self, config_path: str):
        self.controller = HotReloadController(config_path)
        self.count = 0

    def on_code_updated(self, event) -> None:
        self.count += 1
        print(json.dumps(event.to_dict()))

    async def run(self, stop: asyncio.Event) -> int:
        validation = self.controller.validate_config()
        if validation.errors:
            print(f"Config errors: {validation.errors}", file=sys.stderr)
            return 1
        for warning in validation.warnings:
            print(f"Warning: {warning}", file=sys.stderr)

        try:
            await self.controller.wait_until_ready(cancel_event=stop)
        except ReadinessTimeout as e:
            print(f"LocalStack not reachable: {e}", file=sys.stderr)
            return 1

        self.controller.on_code_updated = self.on_code_updated
        self.controller.attach(asyncio.get_running_loop())
        try:
            await stop.wait()
        finally:
            self.controller.detach()

        print(f"Received {self.count} reload event(s)", file=sys.stderr)
        return 0


async def main(config_path: str) -> int:
    stop = asyncio.Event()
    try:
        return await ReloadLogger(config_path).run(stop)
    except asyncio.CancelledError:
        stop.set()
        return 130


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "hotreload.toml")))
    except KeyboardInterrupt:
        sys.exit(130)
