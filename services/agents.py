"""Admin review of agent accounts."""
from security.rbac import authorize
from services.errors import NotFoundError, ValidationError
from services.store import EntityStore
from utils.audit import log_event


def list_pending_agents(store: EntityStore, identity):
    authorize(identity, {"admin"}).raise_for_denial("Admin access required" if identity else None)
    return store.pending_agents()


def verify_agent(store: EntityStore, identity, agent_id: str):
    """Idempotent: verifying an already verified agent changes nothing."""
    authorize(identity, {"admin"}).raise_for_denial("Admin access required" if identity else None)

    agent = store.get_user(agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    if agent.role != "agent":
        raise ValidationError("User is not an agent")

    if not agent.verified_status:
        agent.verified_status = True
        store.commit()
        log_event("AGENT_VERIFY", user_id=identity.id, entity="user", entity_id=agent.id)
    return agent
