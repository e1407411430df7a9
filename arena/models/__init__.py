# arena/models/__init__.py
# Imported together so the mapper registry and Alembic see every table

from .contest import Contest, ContestStatus
from .artwork import Artwork
from .vote import Vote
from .cooldown import VoteCooldown
