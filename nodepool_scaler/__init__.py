"""
Node pool scaler: target-size reconciler for declaratively provisioned node pools
"""

__version__ = "1.0.0"
