"""Script to manually execute the scale-down workflow once."""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from scaledown.config import get_settings
from scaledown.connection import connect_temporal
from scaledown.models.types import ScaleDownInput
from scaledown.workflows import ScaleDownWorkflow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main():
    """Manually execute the scale-down workflow once."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    logger.info("Manual workflow execution")
    logger.info(f"Namespace: {settings.temporal_namespace}")
    logger.info(f"Dry run mode: {settings.dry_run_mode}")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    try:
        logger.info("Starting workflow execution...")
        result = await client.execute_workflow(
            ScaleDownWorkflow.run,
            ScaleDownInput(dry_run=settings.dry_run_mode),
            id=f"eventhub-scale-down-manual-{asyncio.get_running_loop().time()}",
            task_queue=settings.task_queue,
        )

        logger.info("=" * 60)
        logger.info("Workflow completed successfully!")
        logger.info("=" * 60)
        logger.info(f"Result: {result}")
        logger.info(f"Namespaces updated: {len(result.updated)}")
        for outcome in result.updated:
            logger.info(f"  - {outcome}")
        logger.info(f"Namespaces unchanged: {len(result.unchanged)}")
        logger.info(f"Namespaces skipped: {len(result.skipped)}")
        for outcome in result.skipped:
            logger.info(f"  - {outcome}")
        logger.info(f"Namespaces failed: {len(result.failed)}")
        for outcome in result.failed:
            logger.error(f"  - {outcome}")
        logger.info(f"Subscription errors: {len(result.errors)}")
        for error in result.errors:
            logger.error(f"  - {error}")

    except Exception as e:
        logger.error(f"Failed to execute workflow: {e}")
        sys.exit(1)


if __name__ == "__main__":
    print("=" * 60)
    print("Event Hubs Scale-Down - Manual Execution")
    print("=" * 60)
    print()
    print("This script will execute the workflow once.")
    print("Make sure the worker is running in another terminal!")
    print()
    asyncio.run(main())
