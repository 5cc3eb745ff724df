"""artifactgraph: Dependency graph engine for build artifacts.

Builds the transitive dependency graph of an artifact with nearest-wins
version conflict resolution, honours path-scoped dependency exclusions, and
derives reduced graphs through a composable subgraph algebra.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
