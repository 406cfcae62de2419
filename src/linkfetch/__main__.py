"""Main entry point for running the linkfetch bot."""

import asyncio
import contextlib

import linkfetch.entrypoint
from linkfetch.core.error_handling import (
    install_global_exception_hooks,
    register_asyncio_exception_handler,
)


def main() -> None:
    """Run the application entry point."""
    install_global_exception_hooks()
    with asyncio.Runner() as runner:
        register_asyncio_exception_handler(runner.get_loop())
        try:
            runner.run(linkfetch.entrypoint.main())
        except KeyboardInterrupt:
            # Stop polling before the event loop is torn down.
            with contextlib.suppress(KeyboardInterrupt):
                runner.run(linkfetch.entrypoint.shutdown())


if __name__ == "__main__":
    main()
