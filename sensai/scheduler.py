"""
Scheduler for background jobs

Uses APScheduler to regenerate industry insights every week.
"""
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from zoneinfo import ZoneInfo
import asyncio
from typing import Optional

from sensai.models.base import SessionLocal
from sensai.services.ai_client import get_text_model
from sensai.services.insight_generator import InsightGenerator
from sensai.services.insight_refresh_service import InsightRefreshService
from sensai.config import get_settings
from sensai.utils.logger import log

settings = get_settings()
scheduler = AsyncIOScheduler()

INSIGHT_REFRESH_JOB_ID = "industry_insights_refresh"

# Names of jobs currently executing (scheduled or manual), one event loop
_running_jobs = set()


# Job Functions

async def refresh_industry_insights() -> Optional[dict]:
    """Regenerate insights for every stored industry (weekly)"""
    if "insights" in _running_jobs:
        log.warning("Industry insight refresh already running, skipping this run")
        return None

    _running_jobs.add("insights")
    db = SessionLocal()
    try:
        log.info("Starting weekly industry insight refresh...")
        service = InsightRefreshService(db, InsightGenerator(get_text_model()))
        summary = await service.refresh_all()
        return summary.to_dict()

    except Exception as e:
        log.error(f"Industry insight refresh error: {str(e)}")
        return None

    finally:
        db.close()
        _running_jobs.discard("insights")


JOB_FUNCTIONS = {
    "insights": refresh_industry_insights,
}


# Schedule Configuration

def setup_scheduler():
    """
    Configure the scheduler.

    - Industry insights: weekly, Sunday 00:00 in cron_timezone
    """
    scheduler.add_job(
        refresh_industry_insights,
        trigger=CronTrigger(
            day_of_week=settings.insight_refresh_day_of_week,
            hour=settings.insight_refresh_hour,
            minute=settings.insight_refresh_minute,
            timezone=ZoneInfo(settings.cron_timezone),
        ),
        id=INSIGHT_REFRESH_JOB_ID,
        name='Weekly Industry Insight Refresh',
        replace_existing=True,
        max_instances=1
    )

    log.info(f"Scheduler configured (timezone: {settings.cron_timezone})")


def start_scheduler():
    """Start the scheduler"""
    setup_scheduler()
    scheduler.start()
    log.info("Scheduler started")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        log.info("Scheduler stopped")


async def run_job_now(job_name: str) -> dict:
    """
    Manually run a job in the current event loop

    Args:
        job_name: Name of the job (insights)

    Returns:
        Dict with job results
    """
    if job_name not in JOB_FUNCTIONS:
        return {
            'success': False,
            'error': f'Unknown job: {job_name}. Valid options: {", ".join(JOB_FUNCTIONS.keys())}'
        }

    if job_name in _running_jobs:
        return {
            'success': False,
            'running': True,
            'error': f'{job_name} job is already running'
        }

    log.info(f"Manually triggering {job_name} job...")
    result = await JOB_FUNCTIONS[job_name]()

    if result is None:
        return {'success': False, 'error': f'{job_name} job failed, see logs'}

    return {'success': True, 'result': result}


def get_scheduled_jobs() -> list:
    """
    Get list of all scheduled jobs

    Returns:
        List of job info dicts
    """
    jobs = []

    for job in scheduler.get_jobs():
        next_run = getattr(job, "next_run_time", None)

        jobs.append({
            'id': job.id,
            'name': job.name,
            'next_run': next_run.isoformat() if next_run else None,
            'trigger': str(job.trigger)
        })

    return jobs


# CLI for manual runs

if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m sensai.scheduler <command> [job_name]")
        print("\nCommands:")
        print("  run <job>   Run a job now")
        print("  list        List the configured jobs")
        print("\nJobs:")
        print("  insights")
        sys.exit(1)

    command = sys.argv[1]

    if command == "run":
        if len(sys.argv) < 3:
            print("Error: Please specify a job name")
            sys.exit(1)

        outcome = asyncio.run(run_job_now(sys.argv[2]))

        if outcome['success']:
            print(f"✓ {outcome['result']}")
        else:
            print(f"✗ Error: {outcome['error']}")
            sys.exit(1)

    elif command == "list":
        setup_scheduler()
        print("\nScheduled Jobs:")
        print("-" * 80)

        for job in get_scheduled_jobs():
            print(f"\nID:       {job['id']}")
            print(f"Name:     {job['name']}")
            print(f"Trigger:  {job['trigger']}")

    else:
        print(f"Unknown command: {command}")
        sys.exit(1)
