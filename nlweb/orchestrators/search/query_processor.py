"""Request validation, decontextualization and query id generation."""

import itertools
import logging
import re
import time
import zlib

from nlweb.contracts.nlweb_v1 import MAX_QUERY_LENGTH, NLWebRequest
from nlweb.orchestrators.search.constants import REFERENCE_PRONOUNS, REFERENCE_WORDS

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[a-z]+")
_REFERENTIAL = REFERENCE_PRONOUNS | REFERENCE_WORDS


def has_referential_language(query: str) -> bool:
    return any(w in _REFERENTIAL for w in _WORD_RE.findall(query.lower()))


class QueryProcessor:
    """Turns a request into the query string the pipeline searches with.

    Decontextualization is a heuristic: when a follow-up query uses referential
    language ("it", "those", "mentioned earlier"), the most recent prior query is
    prepended. This is best-effort, not coreference resolution.
    """

    def __init__(self, max_query_length: int = MAX_QUERY_LENGTH):
        self.max_query_length = max_query_length
        self._counter = itertools.count()

    def validate(self, request: object) -> bool:
        if not isinstance(request, NLWebRequest):
            return False
        query = request.query
        if not query or not query.strip():
            logger.debug("Rejected request: empty query")
            return False
        if len(query) > self.max_query_length:
            logger.debug(
                "Rejected request: query length %s > %s",
                len(query),
                self.max_query_length,
            )
            return False
        return True

    async def process(self, request: NLWebRequest) -> str:
        if request.decontextualized_query:
            return request.decontextualized_query
        if not request.prev:
            return request.query
        if not has_referential_language(request.query):
            return request.query
        most_recent = request.prev[-1].strip().rstrip(".")
        effective = f"{most_recent}. {request.query}"
        logger.debug("Decontextualized %r -> %r", request.query, effective)
        return effective

    def generate_query_id(self, request: NLWebRequest) -> str:
        if request.query_id:
            return request.query_id
        timestamp = int(time.time() * 1000)
        # Counter keeps ids unique for identical queries within one millisecond.
        seed = f"{request.query}\x00{next(self._counter)}".encode()
        return f"{timestamp}-{zlib.crc32(seed):08X}"
