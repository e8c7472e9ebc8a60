"""
ORM model package. Import all models here so Alembic autogenerate
can discover every table through the shared Base metadata.
"""
from carbonmeter.models.user import User  # noqa: F401
from carbonmeter.models.session import UserSession  # noqa: F401
from carbonmeter.models.activity import Activity  # noqa: F401
from carbonmeter.models.post import CommunityPost, PostLike  # noqa: F401
from carbonmeter.models.comment import PostComment  # noqa: F401
from carbonmeter.models.challenge import Challenge, ChallengeParticipant  # noqa: F401
