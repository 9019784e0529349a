"""
Search error taxonomy. Each error carries a human-readable message and the HTTP status
the API layer reports it with; all of them end up in the {error} envelope.
"""


class SearchError(Exception):
    """Base for every failure the community search reports to its caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SearchValidationError(SearchError):
    """Caller supplied zero or both of query / similar_to."""

    status_code = 400


class ConfigurationError(SearchError):
    """Required vector store settings are missing."""

    status_code = 503

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Missing required vector store settings: {', '.join(missing)}. "
            "Set these to use the search_discourse_communities tool."
        )


class CommunityNotFoundError(SearchError):
    """similar_to input resolved to no stored community."""

    status_code = 404

    def __init__(self, target: str, *, by: str = "URL") -> None:
        self.target = target
        super().__init__(f"Community not found with {by}: {target}")


class EmbeddingUnavailableError(SearchError):
    """Community exists but has no stored embedding to seed a nearest-neighbor query."""

    status_code = 422

    def __init__(self, community_id: str, target: str) -> None:
        self.community_id = community_id
        self.target = target
        super().__init__(
            f"Could not retrieve embedding for community: {target} (id {community_id})"
        )


class StoreTransportError(SearchError):
    """Vector store call failed (connection, timeout, database error)."""

    status_code = 502
