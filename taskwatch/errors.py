"""Exception types raised across taskwatch."""


class TaskwatchError(Exception):
    """Base class for taskwatch errors."""


class TraversalError(TaskwatchError):
    """Listing the children of a traversal root failed."""

    def __init__(self, node_id: str, cause: Exception):
        self.node_id = node_id
        self.cause = cause
        super().__init__(f"Failed to list children of {node_id}: {cause}")


class CollectionReadError(TaskwatchError):
    """Querying a collection for its records failed."""

    def __init__(self, collection_id: str, cause: Exception):
        self.collection_id = collection_id
        self.cause = cause
        super().__init__(f"Failed to query collection {collection_id}: {cause}")
