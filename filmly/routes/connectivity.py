"""
Connectivity Routes
Lets the client poll the offline alert and dismiss it
"""
from fastapi import APIRouter, Depends

from filmly.services.background_jobs import BackgroundJobService
from filmly.services.network_monitor import NetworkMonitor
from filmly.utils.dependencies import get_background_jobs, get_network_monitor

router = APIRouter(prefix="/api/connectivity", tags=["Connectivity"])


@router.get("")
def get_connectivity(monitor: NetworkMonitor = Depends(get_network_monitor)):
    """
    Current connectivity state

    - **state**: uninitialized / connected / disconnected
    - **show_alert**: true once the connection was lost, until acknowledged
    """
    return monitor.status()


@router.post("/acknowledge")
def acknowledge_alert(monitor: NetworkMonitor = Depends(get_network_monitor)):
    """Dismiss the offline alert"""
    monitor.acknowledge_alert()
    return monitor.status()


@router.get("/jobs")
def get_jobs(jobs: BackgroundJobService = Depends(get_background_jobs)):
    """Scheduler status and last connectivity probe results"""
    return jobs.get_job_stats()
