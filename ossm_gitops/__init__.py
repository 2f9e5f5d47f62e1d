"""OSSM GitOps — manifest tree generator for a service-mesh + tracing GitOps repo."""

__version__ = "0.1.0"
