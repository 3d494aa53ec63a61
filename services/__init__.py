"""
Service entry points for the alert evaluation engine.

Each subdirectory contains a standalone, long-running service.

Services:
    alert-scanner: Periodic alert condition evaluation
"""
