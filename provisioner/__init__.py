"""Proxy Balancer Provisioner — build and install the SOCKS load balancer."""

__version__ = "0.1.0"
