"""Deployment orchestration for the WordPress stack.

The deployer itself lives in ``stack_deployer``; it is not re-exported here
so that infrastructure modules can import ``errors`` and ``shell_commands``
without pulling in the whole deployer.
"""

from .errors import DeploymentError

__all__ = ["DeploymentError"]
