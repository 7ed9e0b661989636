"""Data service access: GraphQL client, documents and response cache."""

from todoapp.graphql.cache import ResponseCache
from todoapp.graphql.client import GraphQLClient

__all__ = ["GraphQLClient", "ResponseCache"]
