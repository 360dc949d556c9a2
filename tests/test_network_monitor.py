"""
Connectivity observer and background probe job tests
"""
import asyncio
import socket
import time

from filmly.config import settings
from filmly.services.background_jobs import BackgroundJobService
from filmly.services.network_monitor import (
    ALERT_TITLE,
    ConnectionState,
    NetworkMonitor,
    probe_connectivity,
)


def test_starts_uninitialized():
    monitor = NetworkMonitor()

    assert monitor.state == ConnectionState.UNINITIALIZED
    assert not monitor.has_initialized
    assert not monitor.show_alert


def test_first_update_offline_does_not_alert():
    monitor = NetworkMonitor()

    monitor.update(False)

    assert monitor.state == ConnectionState.DISCONNECTED
    assert monitor.show_alert is False


def test_losing_connection_alerts():
    monitor = NetworkMonitor()
    monitor.update(True)

    monitor.update(False)

    assert monitor.show_alert is True
    assert monitor.status()["alert_title"] == ALERT_TITLE


def test_alert_is_one_shot():
    monitor = NetworkMonitor()
    monitor.update(True)
    monitor.update(False)
    monitor.acknowledge_alert()

    monitor.update(False)

    assert monitor.show_alert is False
    assert monitor.status()["alert_message"] is None


def test_reconnect_then_loss_alerts_again():
    monitor = NetworkMonitor()
    monitor.update(True)
    monitor.update(False)
    monitor.acknowledge_alert()

    monitor.update(True)
    monitor.update(False)

    assert monitor.show_alert is True


def test_deferred_initial_check_alerts_when_offline():
    monitor = NetworkMonitor()
    monitor.update(False)

    monitor.check_initial_connection()

    assert monitor.show_alert is True


def test_deferred_initial_check_is_quiet_before_first_update_or_when_online():
    monitor = NetworkMonitor()
    monitor.check_initial_connection()
    assert monitor.show_alert is False

    monitor.update(True)
    monitor.check_initial_connection()
    assert monitor.show_alert is False


def test_probe_reports_unreachable_host(monkeypatch):
    def refuse(address, timeout=None):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(socket, "create_connection", refuse)

    assert probe_connectivity("example.invalid", 443) is False


# ============================================
# Background jobs
# ============================================

def test_check_connectivity_job_feeds_monitor():
    results = iter([True, False])
    monitor = NetworkMonitor()
    jobs = BackgroundJobService(monitor, probe=lambda: next(results))

    asyncio.run(jobs.check_connectivity())
    asyncio.run(jobs.check_connectivity())

    assert monitor.state == ConnectionState.DISCONNECTED
    assert monitor.show_alert is True
    assert jobs.job_stats["check_connectivity"]["status"] == "success"
    assert jobs.job_stats["check_connectivity"]["last_run"] is not None


def test_check_connectivity_job_records_probe_errors():
    def broken_probe():
        raise RuntimeError("probe crashed")

    monitor = NetworkMonitor()
    jobs = BackgroundJobService(monitor, probe=broken_probe)

    asyncio.run(jobs.check_connectivity())

    assert monitor.state == ConnectionState.UNINITIALIZED
    assert jobs.job_stats["check_connectivity"]["status"] == "failed"
    assert jobs.job_stats["check_connectivity"]["error"] == "probe crashed"


def test_initial_check_job():
    monitor = NetworkMonitor()
    monitor.update(False)
    jobs = BackgroundJobService(monitor, probe=lambda: False)

    asyncio.run(jobs.initial_connectivity_check())

    assert monitor.show_alert is True


def test_start_respects_disable_flag(monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_BACKGROUND_JOBS", False)
    jobs = BackgroundJobService(NetworkMonitor(), probe=lambda: True)

    jobs.start()

    assert jobs.scheduler.running is False
    assert jobs.get_job_stats()["jobs"] == []


def test_start_schedules_probe_then_initial_check(monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_BACKGROUND_JOBS", True)
    monkeypatch.setattr(settings, "CONNECTIVITY_INITIAL_CHECK_DELAY", 0.05)
    monitor = NetworkMonitor()
    jobs = BackgroundJobService(monitor, probe=lambda: True)

    async def run():
        jobs.start()
        job_ids = {job["id"] for job in jobs.get_job_stats()["jobs"]}
        await asyncio.sleep(0.4)
        jobs.shutdown()
        return job_ids

    job_ids = asyncio.run(run())

    assert job_ids == {"check_connectivity"}
    assert monitor.state == ConnectionState.CONNECTED
    assert jobs.job_stats["initial_connectivity_check"]["status"] == "success"
    assert monitor.show_alert is False


def test_initial_check_waits_for_slow_first_probe(monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_BACKGROUND_JOBS", True)
    monkeypatch.setattr(settings, "CONNECTIVITY_INITIAL_CHECK_DELAY", 0.05)
    monitor = NetworkMonitor()

    def slow_offline_probe():
        time.sleep(0.3)
        return False

    jobs = BackgroundJobService(monitor, probe=slow_offline_probe)

    async def run():
        jobs.start()
        await asyncio.sleep(0.8)
        jobs.shutdown()

    asyncio.run(run())

    assert monitor.state == ConnectionState.DISCONNECTED
    assert jobs.job_stats["initial_connectivity_check"]["status"] == "success"
    assert monitor.show_alert is True
