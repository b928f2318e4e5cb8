# Import models here so Alembic can discover metadata.
from taskboard.models.tenant import Tenant  # noqa: F401
from taskboard.models.auth_identity import AuthIdentity  # noqa: F401
from taskboard.models.user_profile import UserProfile  # noqa: F401

# task workflow, join requests, chat
from taskboard.models.task import Task  # noqa: F401
from taskboard.models.join_request import JoinRequest  # noqa: F401
from taskboard.models.message import Message  # noqa: F401
