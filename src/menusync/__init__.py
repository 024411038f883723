"""menusync: keep a local menu tree in step with a remote JSON:API menu collection."""

__version__ = "0.1.0"
