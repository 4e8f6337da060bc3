"""testnetgen.net

Peer addressing for generated nodes.
"""

from testnetgen.net.address import calculate_ip, external_ip, first_usable_ipv4, resolve_ip

__all__ = ["calculate_ip", "external_ip", "first_usable_ipv4", "resolve_ip"]
