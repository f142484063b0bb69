"""
Health check utilities
"""

import psutil
import time
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel


class SystemHealth(BaseModel):
    """System health status model"""

    status: str
    timestamp: datetime
    uptime: float
    memory_usage: Dict[str, Any]
    cpu_usage: float
    cache: Optional[Dict[str, Any]] = None


class HealthChecker:
    """Process health reporting with system and cache metrics"""

    def __init__(self):
        self.start_time = time.time()

    def get_memory_info(self) -> Dict[str, Any]:
        memory = psutil.virtual_memory()
        return {
            "total": memory.total,
            "available": memory.available,
            "percentage": memory.percent,
        }

    def get_cpu_info(self) -> float:
        # Non-blocking sample; first call after start may report 0.0
        return psutil.cpu_percent(interval=None)

    def get_system_health(self, cache_stats: Optional[Dict[str, Any]] = None) -> SystemHealth:
        """Get overall health status with optional cache statistics"""
        memory = self.get_memory_info()
        cpu = self.get_cpu_info()

        status = "healthy"
        if memory["percentage"] > 90 or cpu > 95:
            status = "unhealthy"
        elif memory["percentage"] > 80 or cpu > 80:
            status = "warning"

        return SystemHealth(
            status=status,
            timestamp=datetime.now(),
            uptime=time.time() - self.start_time,
            memory_usage=memory,
            cpu_usage=cpu,
            cache=cache_stats,
        )


# Global health checker instance
health_checker = HealthChecker()
