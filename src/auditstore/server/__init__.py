"""
HTTP service for audit report storage.

Example:
    ```python
    from auditstore.server import create_app

    app = create_app()
    ```
"""

from auditstore.server.app import create_app, http_status_for
from auditstore.server.deployments import DeploymentLog, InMemoryDeploymentLog
from auditstore.server.orchestrator import DeploymentOrchestrator
from auditstore.server.services import Services

__all__ = [
    "create_app",
    "http_status_for",
    "DeploymentOrchestrator",
    "DeploymentLog",
    "InMemoryDeploymentLog",
    "Services",
]
