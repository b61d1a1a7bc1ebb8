"""
helm-inflator inflates a helm chart into kubernetes resource manifests.

It acts as a generator: given a declarative configuration naming a chart it
pulls the chart when it is not already present locally and renders it with
`helm template`, producing a stream of YAML resources.
"""

__all__ = [
    "command",
    "config",
    "exceptions",
    "generator",
    "helm",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
