import logging

from mentordesk.core.config import Settings
from mentordesk.repositories.base import QuestionStore
from mentordesk.repositories.memory import MemoryQuestionStore
from mentordesk.repositories.sql import SqlQuestionStore

log = logging.getLogger(__name__)


def build_store(cfg: Settings) -> QuestionStore:
    if cfg.storage_backend == "memory":
        log.warning("storage_backend_memory", extra={"env": cfg.env})
        return MemoryQuestionStore()
    return SqlQuestionStore.from_url(cfg.database_url)
