"""Script to create the Temporal Schedule that triggers scale-down runs."""

import asyncio
import logging
import sys
from pathlib import Path

from temporalio.client import (
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleOverlapPolicy,
    SchedulePolicy,
    ScheduleSpec,
)

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

SCHEDULE_ID = "eventhub-scale-down-schedule"


async def main():
    """Create the Temporal Schedule for scale-down runs."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    logger.info(f"Creating schedule for namespace: {settings.temporal_namespace}")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    try:
        await client.create_schedule(
            SCHEDULE_ID,
            Schedule(
                action=ScheduleActionStartWorkflow(
                    ScaleDownWorkflow.run,
                    ScaleDownInput(dry_run=settings.dry_run_mode),
                    id="eventhub-scale-down-workflow",
                    task_queue=settings.task_queue,
                ),
                spec=ScheduleSpec(cron_expressions=[settings.schedule_cron]),
                # Skip if previous run is still running
                policy=SchedulePolicy(overlap=ScheduleOverlapPolicy.SKIP),
            ),
        )

        logger.info(f"Successfully created schedule: {SCHEDULE_ID}")
        logger.info(f"  - Cron: {settings.schedule_cron}")
        logger.info("  - Overlap policy: SKIP")
        logger.info(f"  - Task queue: {settings.task_queue}")
        logger.info(f"  - Dry run mode: {settings.dry_run_mode}")

    except Exception as e:
        if "already exists" in str(e).lower():
            logger.warning(f"Schedule {SCHEDULE_ID} already exists")
            logger.info("To update the schedule, delete it first with:")
            logger.info(f"  temporal schedule delete --schedule-id {SCHEDULE_ID}")
        else:
            logger.error(f"Failed to create schedule: {e}")
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
