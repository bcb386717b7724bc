"""Query lifecycle: resolve data, call the service, classify, record."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from nlq_console.config import LogConfig
from nlq_console.data.resolver import DatasetResolver
from nlq_console.errors import NoDatasetError, QueryError, TransportError
from nlq_console.history import HistoryStore
from nlq_console.obs.logs import ERROR_PREFIX, LogStream, Timer
from nlq_console.service.assembler import ResultAssembler
from nlq_console.service.client import QueryServiceClient, format_stack
from nlq_console.types import (
    Dataset,
    DatasetSummary,
    ErrorResult,
    LogEntry,
    QueryHistoryItem,
    QueryResult,
    ResultView,
    Severity,
    SuccessResult,
)

logger = logging.getLogger(__name__)

PROCESSING_STARTED_MESSAGE = "Processing started..."
NO_DATA_LOG_MESSAGE = "No data to analyze"
NO_DETAILS_MESSAGE = "No additional information"


class Phase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class OrchestratorState:
    """UI-facing state for the current session."""

    phase: Phase = Phase.IDLE
    loading: bool = False
    query: str = ""
    dataset: Dataset | None = None
    result: QueryResult | None = None
    view: ResultView | None = None


class QueryOrchestrator:
    """Runs one submission at a time through ``Idle -> Submitting -> Idle``.

    Every submission takes a generation number. When the service answers, the
    reply is applied only if no newer submission has started since; otherwise
    it is dropped without touching state, logs or history. ``loading`` is
    informational and is cleared by the latest submission on every exit path.
    """

    def __init__(
        self,
        *,
        service: QueryServiceClient,
        resolver: DatasetResolver,
        history: HistoryStore,
        assembler: ResultAssembler | None = None,
        log_config: LogConfig | None = None,
    ) -> None:
        self.service = service
        self.resolver = resolver
        self.history = history
        self.assembler = assembler or ResultAssembler()
        self.log_config = log_config or LogConfig()
        self.logs = LogStream()
        self.state = OrchestratorState()
        self._generation = 0
        self._observer: Callable[[Phase], None] | None = None

    @property
    def loading(self) -> bool:
        return self.state.loading

    def set_observer(self, observer: Callable[[Phase], None] | None) -> None:
        """Set an optional callback invoked on every phase transition."""
        self._observer = observer

    def load_dataset(
        self, dataset: Dataset, *, logs: list[LogEntry] | None = None
    ) -> DatasetSummary:
        """Install an uploaded dataset for this session."""
        self.state.dataset = dataset
        self.resolver.remember(dataset)
        if logs:
            self.logs.replace(logs)
        return self.resolver.summarize(dataset)

    def current_dataset(self) -> Dataset:
        return self.resolver.resolve(self.state.dataset)

    async def submit(self, query: str) -> QueryResult | None:
        """Run one query.

        Returns:
            The applied result, or None when the query was blank or its reply
            was superseded by a newer submission.
        """

        if not query.strip():
            return None

        self._generation += 1
        generation = self._generation
        self.state.query = query

        dataset = self.resolver.resolve(self.state.dataset)
        if dataset.is_empty:
            return self._reject_without_data(query)

        self.state.loading = True
        self._transition(Phase.SUBMITTING)
        self.logs.reset(PROCESSING_STARTED_MESSAGE)
        try:
            outcome = await self._call_service(query, dataset)
            if generation != self._generation:
                logger.debug("Dropping superseded reply for query %r", query)
                return None
            if isinstance(outcome, QueryError):
                return self._apply_failure(query, outcome)
            return self._apply_success(query, outcome)
        finally:
            if generation == self._generation:
                self.state.loading = False
                self._transition(Phase.IDLE)

    async def repeat(self, item: QueryHistoryItem) -> QueryResult | None:
        self.state.query = item.query
        return await self.history.repeat(item, self.submit)

    async def _call_service(
        self, query: str, dataset: Dataset
    ) -> SuccessResult | QueryError:
        try:
            with Timer() as timer:
                response = await self.service.query(query, dataset)
            logger.info(
                "Query service replied with %s in %.1f ms",
                response.status_code,
                timer.elapsed_ms,
            )
            if not response.ok:
                raise self.assembler.service_error(response)
            result = self.assembler.assemble(response)
        except QueryError as exc:
            logger.warning("Query failed: %s", exc.message)
            return exc
        except Exception as exc:
            logger.exception("Unexpected failure while querying")
            return TransportError(str(exc) or exc.__class__.__name__, stack=format_stack(exc))
        return result

    def _apply_success(self, query: str, result: SuccessResult) -> SuccessResult:
        if result.logs:
            self.logs.replace(result.logs)
        self._settle(Phase.SUCCEEDED, query, result)
        return result

    def _apply_failure(self, query: str, error: QueryError) -> ErrorResult:
        result = ErrorResult(
            message=error.message,
            details=getattr(error, "details", None),
            stack=error.stack,
            logs=self.logs.entries,
        )
        self.logs.error(error.message)
        limit = self.log_config.details_preview_chars
        self.logs.append(
            f"Details: {(error.stack or '')[:limit] or NO_DETAILS_MESSAGE}",
            Severity.ERROR,
        )
        self._settle(Phase.FAILED, query, result)
        return result

    def _reject_without_data(self, query: str) -> ErrorResult:
        error = NoDatasetError()
        logger.info("Rejected query %r: no dataset available", query)
        self.logs.reset(f"{ERROR_PREFIX}: {NO_DATA_LOG_MESSAGE}", Severity.ERROR)
        result = ErrorResult(message=error.message, logs=self.logs.entries)
        self._settle(Phase.FAILED, query, result)
        self.state.loading = False
        self._transition(Phase.IDLE)
        return result

    def _settle(self, phase: Phase, query: str, result: QueryResult) -> None:
        self.state.result = result
        self.state.view = self.assembler.view(result)
        self._transition(phase)
        self.history.record(query, result)

    def _transition(self, phase: Phase) -> None:
        self.state.phase = phase
        if self._observer is not None:
            self._observer(phase)
