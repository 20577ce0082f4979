"""Settings for the boxoffice project.

Split by concern; every module reads its values from the environment via decouple.
"""

from .base import *  # noqa: F401,F403
from .celery import *  # noqa: F401,F403
from .ninja import *  # noqa: F401,F403
from .observability import *  # noqa: F401,F403
from .ticketing import *  # noqa: F401,F403
