"""Worker script to run the scale-down workflow and activities."""

import asyncio
import logging
import sys
from pathlib import Path

from temporalio.worker import Worker

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from scaledown.activities import ScaleDownActivities
from scaledown.config import get_settings
from scaledown.connection import connect_temporal
from scaledown.workflows import ScaleDownWorkflow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main():
    """Start the worker to process scale-down workflows."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    logger.info(f"Starting worker for namespace: {settings.temporal_namespace}")
    logger.info(f"Task queue: {settings.task_queue}")
    logger.info(f"Scale-down tag: {settings.scale_down_tag}")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    activities = ScaleDownActivities(settings)

    # Create and run worker
    worker = Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[ScaleDownWorkflow],
        activities=[
            activities.list_subscriptions,
            activities.scan_namespaces,
            activities.reconcile_namespace,
            activities.send_slack_notification,
        ],
    )

    logger.info("Worker started, waiting for tasks...")
    try:
        await worker.run()
    except KeyboardInterrupt:
        logger.info("Worker shutting down...")
    except Exception as e:
        logger.error(f"Worker error: {e}")
        raise
    finally:
        activities.close()


if __name__ == "__main__":
    asyncio.run(main())
