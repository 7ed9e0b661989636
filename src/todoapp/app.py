"""Service wiring."""

from dataclasses import dataclass

import httpx

from todoapp.auth.identity import IdentityClient
from todoapp.auth.service import AuthService
from todoapp.auth.session_store import SessionStore
from todoapp.graphql.client import GraphQLClient
from todoapp.referral.service import ReferralService
from todoapp.settings import Settings, settings as default_settings
from todoapp.todos.service import TodoService


@dataclass
class Services:
    """Collaborators shared by the screens of one application run."""

    graphql: GraphQLClient
    identity: IdentityClient
    store: SessionStore
    auth: AuthService
    todos: TodoService
    referrals: ReferralService


def build_services(
    config: Settings | None = None,
    store: SessionStore | None = None,
    graphql_transport: httpx.AsyncBaseTransport | None = None,
    identity_transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    """Create the services from configuration.

    Args:
        config: Settings to use (the global settings by default)
        store: Session store (created from config by default)
        graphql_transport: Optional httpx transport for the data service
        identity_transport: Optional httpx transport for the identity provider

    Returns:
        Wired services
    """
    config = config or default_settings

    graphql = GraphQLClient(transport=graphql_transport, config=config)
    identity = IdentityClient(transport=identity_transport, config=config)
    store = store or SessionStore(config.resolved_session_database_url)
    referrals = ReferralService(graphql)

    return Services(
        graphql=graphql,
        identity=identity,
        store=store,
        auth=AuthService(identity, store, graphql, referrals),
        todos=TodoService(graphql),
        referrals=referrals,
    )
