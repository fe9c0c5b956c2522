# SQLModel definitions, imported here to ensure metadata is populated.
from .user import UserRecord  # noqa: F401
