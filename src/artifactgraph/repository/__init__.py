"""Host capabilities: where artifact metadata and backing files come from.

``StaticRepository`` answers metadata requests from a YAML description and
``LocalRepository`` finds backing files in a Maven 2 directory layout. Both
expose ``resolve_metadata`` / ``resolve_file`` methods matching the
callables ``GraphBuilder`` expects.
"""

from artifactgraph.repository.local import LocalRepository, extension_of, layout_path
from artifactgraph.repository.static import StaticRepository

__all__ = ["LocalRepository", "StaticRepository", "extension_of", "layout_path"]
