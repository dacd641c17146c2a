# Import every model so Base.metadata is complete (alembic / create_all)
from app.models.auth import AuthIdentity, User, UserRole  # noqa: F401
from app.models.content import ContentEntry, ContentModel  # noqa: F401
from app.models.media import Media  # noqa: F401
from app.models.pages import Page, Post  # noqa: F401
