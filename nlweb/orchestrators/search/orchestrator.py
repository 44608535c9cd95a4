"""NLWeb orchestrator: validate, route to a tool or run the standard pipeline, respond.

Request lifecycle:
  1. Validate (invalid -> error response, terminal)
  2. Assign query id and bind it to the log context
  3. Tool routing, when enabled: a tool response without error is returned as is;
     a tool exception or error response falls through to step 4
  4. Standard pipeline: decontextualize -> search -> mode-specific generation

Failures become a response with `error` set and no results. NoHandlerError
(a registration defect) and task cancellation are the only exceptions that
escape.
"""

import asyncio
import time
from collections.abc import AsyncIterator

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, QueryMode
from nlweb.core.config import NLWebSettings
from nlweb.core.logger import logger
from nlweb.observability import traceable
from nlweb.orchestrators.search.constants import Messages
from nlweb.orchestrators.search.dispatcher import ToolExecutor
from nlweb.orchestrators.search.errors import NoHandlerError
from nlweb.orchestrators.search.generator import ResultGenerator
from nlweb.orchestrators.search.interface import SearchService
from nlweb.orchestrators.search.query_processor import QueryProcessor
from nlweb.orchestrators.search.router import ToolSelector


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 1)


class NLWebOrchestrator:
    def __init__(
        self,
        search: SearchService,
        query_processor: QueryProcessor,
        generator: ResultGenerator,
        settings: NLWebSettings,
        tool_selector: ToolSelector | None = None,
        tool_executor: ToolExecutor | None = None,
    ):
        self._search = search
        self._query_processor = query_processor
        self._generator = generator
        self._settings = settings
        self._tool_selector = tool_selector
        self._tool_executor = tool_executor

    @property
    def search_service(self) -> SearchService:
        return self._search

    def _error(self, request: object, message: str, start: float) -> NLWebResponse:
        return NLWebResponse(
            query_id=getattr(request, "query_id", None) or "",
            query=getattr(request, "query", None) or "",
            mode=getattr(request, "mode", QueryMode.LIST),
            results=[],
            error=message,
            total_results=0,
            processing_time_ms=_elapsed_ms(start),
        )

    def _timeout_for(self, request: NLWebRequest) -> float:
        return request.timeout_seconds or self._settings.default_timeout_seconds

    # ------------------------------------------------------------------
    # Single-shot
    # ------------------------------------------------------------------

    @traceable(name="nlweb_process", run_type="chain")
    async def process(self, request: NLWebRequest) -> NLWebResponse:
        start = time.monotonic()
        if not self._query_processor.validate(request):
            logger.warning(f"Invalid request: {getattr(request, 'query', None)!r:.80}")
            return self._error(request, Messages.INVALID_REQUEST, start)

        query_id = self._query_processor.generate_query_id(request)
        request = request.model_copy(update={"query_id": query_id})
        token = logger.bind_query(query_id)
        try:
            logger.request_received(request.query, request.mode)
            try:
                async with asyncio.timeout(self._timeout_for(request)):
                    response = await self._run(request)
            except TimeoutError:
                logger.error(f"Request timed out after {self._timeout_for(request)}s")
                response = self._error(request, Messages.TIMEOUT, start)
            except NoHandlerError:
                raise
            except Exception as e:
                logger.error("Request failed", e)
                response = self._error(request, Messages.PROCESSING_ERROR, start)
            response.processing_time_ms = _elapsed_ms(start)
            logger.response_sent(len(response.results), response.error)
            return response
        finally:
            logger.unbind_query(token)

    async def _run(self, request: NLWebRequest) -> NLWebResponse:
        routed = await self._try_tool(request)
        if routed is not None:
            return routed
        return await self._standard_pipeline(request)

    async def _try_tool(self, request: NLWebRequest) -> NLWebResponse | None:
        """Tool response, or None to continue with the standard pipeline."""
        if self._tool_selector is None or self._tool_executor is None:
            return None
        tool = self._tool_selector.select_tool(request)
        if tool is None:
            return None
        try:
            response = await self._tool_executor.execute(request, tool)
        except NoHandlerError:
            raise
        except Exception as e:
            logger.tool_fallback(tool, f"{type(e).__name__}: {e}")
            return None
        if response.error:
            logger.tool_fallback(tool, response.error)
            return None
        logger.tool_routed(tool, len(response.results))
        response.query_id = request.query_id or ""
        return response

    async def _standard_pipeline(self, request: NLWebRequest) -> NLWebResponse:
        effective, results = await self._search_results(request)
        response = NLWebResponse(
            query_id=request.query_id or "",
            query=request.query,
            mode=request.mode,
            results=results,
            processed_query=effective,
            total_results=len(results),
        )
        if request.mode == QueryMode.SUMMARIZE:
            response.summary, _ = await self._generator.generate_summary(effective, results)
        elif request.mode == QueryMode.GENERATE:
            response.generated_response, _ = await self._generator.generate_response(
                effective, results
            )
        return response

    async def _search_results(self, request: NLWebRequest):
        effective = await self._query_processor.process(request)
        t0 = time.monotonic()
        results = await self._generator.generate_list(
            effective, request.site, request.max_results
        )
        logger.search_completed(effective, len(results), time.monotonic() - t0)
        return effective, results

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def process_stream(self, request: NLWebRequest) -> AsyncIterator[NLWebResponse]:
        """Yield the initial results chunk, cumulative text chunks, then a final chunk.

        The whole sequence (or a single error response) is produced by a separate
        task and buffered before the first chunk is yielded, so a failure can never
        leave the consumer with a half-written sequence.
        """
        start = time.monotonic()
        if not self._query_processor.validate(request):
            logger.warning(f"Invalid stream request: {getattr(request, 'query', None)!r:.80}")
            yield self._error(request, Messages.INVALID_REQUEST, start)
            return

        query_id = self._query_processor.generate_query_id(request)
        request = request.model_copy(update={"query_id": query_id})
        producer = asyncio.create_task(self._produce_stream(request, start))
        try:
            chunks = await producer
        finally:
            if not producer.done():
                producer.cancel()
        for chunk in chunks:
            yield chunk

    async def _produce_stream(self, request: NLWebRequest, start: float) -> list[NLWebResponse]:
        token = logger.bind_query(request.query_id or "")
        try:
            logger.request_received(request.query, request.mode, streaming=True)
            try:
                async with asyncio.timeout(self._timeout_for(request)):
                    chunks = await self._collect_stream(request, start)
            except TimeoutError:
                logger.error(f"Stream timed out after {self._timeout_for(request)}s")
                chunks = [self._error(request, Messages.TIMEOUT, start)]
            except NoHandlerError:
                raise
            except Exception as e:
                logger.error("Stream failed", e)
                chunks = [self._error(request, Messages.PROCESSING_ERROR, start)]
            final = chunks[-1]
            logger.response_sent(len(final.results), final.error)
            return chunks
        finally:
            logger.unbind_query(token)

    async def _collect_stream(self, request: NLWebRequest, start: float) -> list[NLWebResponse]:
        routed = await self._try_tool(request)
        if routed is not None:
            routed.is_streaming = False
            routed.is_complete = True
            routed.processing_time_ms = _elapsed_ms(start)
            return [routed]

        effective, results = await self._search_results(request)

        def chunk(**fields) -> NLWebResponse:
            return NLWebResponse(
                query_id=request.query_id or "",
                query=request.query,
                mode=request.mode,
                processed_query=effective,
                total_results=len(results),
                processing_time_ms=_elapsed_ms(start),
                **fields,
            )

        if request.mode == QueryMode.LIST:
            return [chunk(results=results, is_streaming=False, is_complete=True)]

        text_field = "summary" if request.mode == QueryMode.SUMMARIZE else "generated_response"
        chunks = [chunk(results=results, is_streaming=True, is_complete=False)]
        text = ""
        async for piece in self._generator.stream_response(effective, results, request.mode):
            text += piece
            chunks.append(chunk(is_streaming=True, is_complete=False, **{text_field: text}))
        chunks.append(
            chunk(results=results, is_streaming=False, is_complete=True, **{text_field: text})
        )
        return chunks
