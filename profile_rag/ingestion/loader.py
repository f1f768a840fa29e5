import json
from pathlib import Path

from profile_rag.exceptions import KnowledgeBaseError
from profile_rag.logger import get_logger
from profile_rag.models import JsonValue

log = get_logger()


def load_knowledge_base(path: str | Path) -> JsonValue:
    """
    Read the whole knowledge-base document (a professional profile as JSON).
    There is no incremental mode: changes mean a full re-flatten + upsert.
    """
    path = Path(path)
    if not path.is_file():
        raise KnowledgeBaseError("Knowledge base file not found", path=str(path))

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise KnowledgeBaseError(f"Could not read knowledge base: {exc}", path=str(path)) from exc

    log.info("Loaded knowledge base from %s (%s)", path, type(data).__name__)
    return data
