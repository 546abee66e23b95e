"""
Example demonstrating bounded concurrency from async and sync code.
"""

import asyncio
import logging

from sincpro_async_limit import create_scheduler, limit_function, run_limited_task, shutdown

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def my_task(name: str, duration: float) -> str:
    """
    Example async task that simulates an I/O operation.

    Args:
        name: Label shown in the log.
        duration: How long to sleep in seconds.

    Returns:
        str: A message indicating the task completed.
    """
    logger.info(f"Starting {name}, will sleep for {duration} seconds")
    await asyncio.sleep(duration)
    return f"{name} completed after {duration} seconds"


@limit_function(concurrency=2)
async def fetch(url: str) -> str:
    await asyncio.sleep(0.2)
    return f"fetched {url}"


async def async_examples() -> None:
    # Example 1: at most two tasks run at once, results keep submission order
    scheduler = create_scheduler(2)
    futures = [scheduler.submit(my_task, f"task-{i}", 0.5) for i in range(5)]
    logger.info(f"active={scheduler.active_count} pending={scheduler.pending_count}")

    # Example 2: raising the limit lets queued tasks start right away
    scheduler.concurrency = 4
    for result in await asyncio.gather(*futures):
        logger.info(result)

    # Example 3: a decorated function shares its own limiter across calls
    pages = await asyncio.gather(*(fetch(f"https://example.com/{i}") for i in range(4)))
    logger.info(f"Got {len(pages)} pages")


def main():
    asyncio.run(async_examples())

    try:
        # Example 4: synchronous callers go through the process-wide limiter
        result = run_limited_task(my_task, "sync-task", 0.5)
        logger.info(f"Got result: {result}")

        try:
            run_limited_task(my_task, "slow-task", 3.0, timeout=1.0)
        except TimeoutError:
            logger.warning("Task timed out as expected")

    finally:
        # Clean shutdown
        shutdown()


if __name__ == "__main__":
    main()
