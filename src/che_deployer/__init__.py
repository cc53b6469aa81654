"""Che Deployer - installs and upgrades Eclipse Che on Kubernetes via Helm."""

__version__ = "0.1.0"
