"""Helm Composer - turn Kubernetes manifests into Helm charts."""

__version__ = "0.1.0"
