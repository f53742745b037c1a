"""Provenance tracking for scenario outputs."""

from mpp_pipeline.persistence.provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
