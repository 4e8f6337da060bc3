"""testnetgen.bootstrap

Orchestration: layout, the two-phase run, rollback.
"""

from testnetgen.bootstrap.layout import NodeLayout
from testnetgen.bootstrap.orchestrator import BootstrapResult, NetworkBootstrap, random_chain_id
from testnetgen.bootstrap.rollback import rollback

__all__ = ["BootstrapResult", "NetworkBootstrap", "NodeLayout", "random_chain_id", "rollback"]
