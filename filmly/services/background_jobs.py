"""
Background Jobs Service for connectivity monitoring
Periodically probes the TMDB host and feeds the NetworkMonitor

Features:
- Scheduled jobs using APScheduler (asyncio scheduler, jobs run on the event loop)
- Configurable timezone and intervals
- Job monitoring and statistics
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from datetime import datetime, timedelta
from functools import partial
from typing import Callable, Dict, Optional
from pytz import timezone
import asyncio
import logging

from filmly.config import settings
from filmly.services.network_monitor import NetworkMonitor, probe_connectivity

logger = logging.getLogger(__name__)


class BackgroundJobService:
    """
    Manages scheduled connectivity checks

    Jobs:
    - Probe connectivity (every CONNECTIVITY_CHECK_INTERVAL seconds, first run immediately)
    - Deferred initial check (once, CONNECTIVITY_INITIAL_CHECK_DELAY seconds after the first probe completed)

    Usage:
        jobs = BackgroundJobService(monitor)
        jobs.start()  # must be called with a running event loop
        jobs.shutdown()
    """

    def __init__(self, monitor: NetworkMonitor, probe: Optional[Callable[[], bool]] = None):
        """Initialize scheduler with timezone configuration"""
        self.monitor = monitor
        self.probe = probe or partial(
            probe_connectivity,
            settings.CONNECTIVITY_PROBE_HOST,
            settings.CONNECTIVITY_PROBE_PORT,
        )
        self.timezone = timezone(settings.TIMEZONE)
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)

        # Track job execution statistics
        self.job_stats = {
            'check_connectivity': {'last_run': None, 'status': 'idle', 'error': None},
            'initial_connectivity_check': {'last_run': None, 'status': 'idle', 'error': None},
        }
        self._initial_check_scheduled = False

    def start(self):
        """
        Start all scheduled background jobs

        Jobs are only started if ENABLE_BACKGROUND_JOBS=true in environment
        """
        if not settings.ENABLE_BACKGROUND_JOBS:
            logger.info("Background jobs disabled via ENABLE_BACKGROUND_JOBS environment variable")
            return

        now = datetime.now(self.timezone)

        self.scheduler.add_job(
            func=self.check_connectivity,
            trigger=IntervalTrigger(seconds=settings.CONNECTIVITY_CHECK_INTERVAL, timezone=self.timezone),
            id='check_connectivity',
            name='Probe network connectivity',
            next_run_time=now,
            replace_existing=True,
            max_instances=1  # Prevent concurrent runs
        )
        logger.info(f"Scheduled: Probe connectivity (every {settings.CONNECTIVITY_CHECK_INTERVAL}s)")

        self.scheduler.start()
        logger.info(f"Background jobs started (timezone: {self.timezone}, jobs: {len(self.scheduler.get_jobs())})")

    def _schedule_initial_check(self):
        """Run the deferred startup check once, counted from the first probe result"""
        run_date = datetime.now(self.timezone) + timedelta(seconds=settings.CONNECTIVITY_INITIAL_CHECK_DELAY)
        self.scheduler.add_job(
            func=self.initial_connectivity_check,
            trigger=DateTrigger(run_date=run_date, timezone=self.timezone),
            id='initial_connectivity_check',
            name='Deferred startup connectivity check',
            replace_existing=True,
        )
        self._initial_check_scheduled = True
        logger.debug(f"Scheduled: Deferred startup connectivity check at {run_date.isoformat()}")

    def shutdown(self):
        """Shutdown scheduler gracefully"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Background jobs stopped gracefully")

    def get_job_stats(self) -> Dict:
        """
        Get statistics for all jobs including next run times

        Returns:
            Dict with job information and execution history
        """
        jobs_info = []
        for job in self.scheduler.get_jobs():
            stats = self.job_stats.get(job.id, {})
            jobs_info.append({
                'id': job.id,
                'name': job.name,
                'next_run': job.next_run_time.isoformat() if job.next_run_time else None,
                'last_run': stats.get('last_run'),
                'status': stats.get('status', 'idle'),
                'error': stats.get('error')
            })

        return {
            'scheduler_running': self.scheduler.running,
            'timezone': str(self.timezone),
            'jobs': jobs_info
        }

    # ============================================
    # Job Methods
    # ============================================

    async def check_connectivity(self):
        """Run the reachability probe in a worker thread and record the result"""
        job_id = 'check_connectivity'
        self.job_stats[job_id]['status'] = 'running'
        self.job_stats[job_id]['error'] = None

        try:
            connected = await asyncio.to_thread(self.probe)
            self.monitor.update(connected)
            if not self._initial_check_scheduled and self.scheduler.running:
                self._schedule_initial_check()
            self.job_stats[job_id]['status'] = 'success'
        except Exception as e:
            logger.error(f"[{job_id}] Failed: {str(e)}")
            self.job_stats[job_id]['status'] = 'failed'
            self.job_stats[job_id]['error'] = str(e)
        finally:
            self.job_stats[job_id]['last_run'] = datetime.now().isoformat()

    async def initial_connectivity_check(self):
        job_id = 'initial_connectivity_check'
        self.monitor.check_initial_connection()
        self.job_stats[job_id]['status'] = 'success'
        self.job_stats[job_id]['last_run'] = datetime.now().isoformat()
