"""
Interactive, step-by-step query builder.

Sessions walk entity -> action -> filter -> fields -> (orderBy -> limit)
-> confirm. Unrecognized input re-prompts without changing the step. An
unknown or expired session id is a normal outcome and gets a "not found"
reply rather than an exception.

Usage:
    assistant = QueryAssistant(executor, metadata)
    start = assistant.start()
    reply = assistant.process_input(start.session_id, "contas")
"""

import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from dynamics_assistant.config import AssistantConfig, settings
from dynamics_assistant.conversation import messages
from dynamics_assistant.conversation.phrase_matcher import (
    FilterMatch,
    OrderMatch,
    PhraseMatcher,
    default_filter_matcher,
    default_order_matcher,
)
from dynamics_assistant.conversation.session_store import SessionEntry, SessionStore, SessionSweeper
from dynamics_assistant.conversation.state_machine import AssistantStep, AssistantTrigger
from dynamics_assistant.errors import AssistantError, EntityNotFoundError, MetadataError
from dynamics_assistant.lexicon.actions import (
    AFFIRMATIVE_WORDS,
    ALL_FIELDS_WORDS,
    DEFAULT_WORDS,
    NEGATIVE_WORDS,
    NO_FILTER_WORDS,
    resolve_assistant_action,
)
from dynamics_assistant.lexicon.entities import normalize_collection
from dynamics_assistant.lexicon.fields import translate_field, translate_fields
from dynamics_assistant.logging_context import get_session_logger, set_session_id
from dynamics_assistant.metadata.cache import EntityDetailsOptions, MetadataCache
from dynamics_assistant.query.executor import QueryExecutor
from dynamics_assistant.query.filter_builder import build_filter
from dynamics_assistant.schemas.query_schema import FilterEntry, QueryOptions
from dynamics_assistant.schemas.session_schema import AssistantReply, QuerySession, SessionStart
from dynamics_assistant.utils import normalize_text, parse_positive_int

logger = get_session_logger(__name__)

_VALIDATION_OPTIONS = EntityDetailsOptions(include_attributes=False, include_option_sets=False)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueryAssistant:
    """Owns the session map, its expiry and the step handlers."""

    def __init__(
        self,
        executor: QueryExecutor,
        metadata: MetadataCache,
        config: Optional[AssistantConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        filter_matcher: Optional[PhraseMatcher[FilterMatch]] = None,
        order_matcher: Optional[PhraseMatcher[OrderMatch]] = None,
        auto_sweep: bool = False,
    ) -> None:
        self._executor = executor
        self._metadata = metadata
        self._config = config or settings.assistant
        self._clock = clock or _utcnow
        self._filter_matcher = filter_matcher or default_filter_matcher()
        self._order_matcher = order_matcher or default_order_matcher()
        self._store = SessionStore()
        self._sweeper: Optional[SessionSweeper] = None
        if auto_sweep:
            self._sweeper = SessionSweeper(self.sweep_expired, self._config.sweep_interval_sec)
            self._sweeper.start()

        self._handlers: dict[AssistantStep, Callable[[SessionEntry, str], AssistantReply]] = {
            AssistantStep.ENTITY: self._entity_step,
            AssistantStep.ACTION: self._action_step,
            AssistantStep.FILTER: self._filter_step,
            AssistantStep.FIELDS: self._fields_step,
            AssistantStep.ORDER_BY: self._order_step,
            AssistantStep.LIMIT: self._limit_step,
            AssistantStep.CONFIRM: self._confirm_step,
        }

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(minutes=self._config.session_ttl_minutes)

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> SessionStart:
        now = self._clock()
        session_id = f"query-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"
        self._store.add(QuerySession(id=session_id, started_at=now, last_activity=now))
        set_session_id(session_id)
        logger.info("Assistant session started")
        return SessionStart(session_id=session_id, message=messages.WELCOME)

    def get_session(self, session_id: str) -> Optional[QuerySession]:
        entry = self._store.get(session_id)
        return entry.session if entry else None

    def current_step(self, session_id: str) -> Optional[AssistantStep]:
        entry = self._store.get(session_id)
        return entry.machine.current_step if entry else None

    def end_session(self, session_id: str) -> bool:
        removed = self._store.remove(session_id)
        if removed:
            logger.info("Assistant session %s ended", session_id)
        return removed

    def sweep_expired(self) -> list[str]:
        return self._store.sweep_expired(self._clock(), self.session_ttl)

    def dispose(self) -> None:
        if self._sweeper is not None:
            self._sweeper.stop()
            self._sweeper = None
        self._store.clear()

    # ------------------------------------------------------------------ #
    # Input processing
    # ------------------------------------------------------------------ #

    def process_input(self, session_id: str, text: str) -> AssistantReply:
        entry = self._store.get(session_id)
        if entry is None:
            return AssistantReply(message=messages.SESSION_NOT_FOUND, completed=False)

        with entry.lock:
            set_session_id(session_id)
            entry.session.last_activity = self._clock()
            machine = entry.machine
            if machine.is_terminal():
                return AssistantReply(
                    message=messages.SESSION_FINISHED, completed=True,
                    step=machine.current_step.value,
                )

            logger.debug("Input at step %s: %r", machine.current_step.value, text)
            try:
                reply = self._handlers[machine.current_step](entry, text)
            except AssistantError as exc:
                logger.error("Failed to process input: %s", exc)
                reply = AssistantReply(message=f"Erro ao processar sua entrada: {exc}")
            reply.step = machine.current_step.value
            return reply

    def _entity_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        collection = normalize_collection(text)
        try:
            self._metadata.get_entity_details(collection, _VALIDATION_OPTIONS)
        except EntityNotFoundError:
            logger.info("Entity %r not found", collection)
            return AssistantReply(message=messages.entity_unknown(collection))
        except MetadataError as exc:
            logger.warning("Entity %r could not be validated: %s", collection, exc)
            return AssistantReply(message=messages.entity_unknown(collection))

        entry.session.entity = collection
        entry.machine.transition(AssistantTrigger.ENTITY_SELECTED)
        return AssistantReply(message=messages.entity_selected(collection))

    def _action_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        action = resolve_assistant_action(text)
        if action is None:
            return AssistantReply(message=messages.ACTION_UNKNOWN)

        entry.session.action = action
        entry.machine.transition(AssistantTrigger.ACTION_SELECTED)
        if action == "get":
            return AssistantReply(message=messages.ASK_RECORD_ID)
        return AssistantReply(message=messages.ask_filter(action))

    def _filter_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        session = entry.session
        if normalize_text(text.strip()) in NO_FILTER_WORDS:
            session.filters = {}
        elif session.action == "get":
            session.filters = {"id": FilterEntry(operator="eq", value=text.strip())}
        else:
            matched = self._filter_matcher.match(text)
            if matched is None:
                return AssistantReply(message=messages.FILTER_UNRECOGNIZED)
            field, filter_entry = matched
            session.filters = {translate_field(session.entity or "", field): filter_entry}

        entry.machine.transition(AssistantTrigger.FILTER_SET)
        return AssistantReply(message=messages.FILTER_SET)

    def _fields_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        session = entry.session
        if normalize_text(text.strip()) in ALL_FIELDS_WORDS:
            session.fields = None
        else:
            session.fields = translate_fields(session.entity or "", text.split(",")) or None

        if session.action == "list":
            entry.machine.transition(AssistantTrigger.FIELDS_SET)
            return AssistantReply(message=messages.ASK_ORDER)

        entry.machine.transition(AssistantTrigger.FIELDS_SET_NO_ORDERING)
        headline = "Campos definidos."
        if session.action == "count":
            headline = "Campos definidos (note que para contagem, os campos são ignorados)."
        return AssistantReply(message=messages.confirm_prompt(headline, session))

    def _order_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        session = entry.session
        if normalize_text(text.strip()) in DEFAULT_WORDS:
            session.order_by = self._executor.config.default_order_by
        else:
            matched = self._order_matcher.match(text)
            if matched is None:
                return AssistantReply(message=messages.ORDER_UNRECOGNIZED)
            field, direction = matched
            session.order_by = f"{translate_field(session.entity or '', field)} {direction}"

        entry.machine.transition(AssistantTrigger.ORDER_SET)
        return AssistantReply(message=messages.ask_limit(self._executor.config.default_top))

    def _limit_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        session = entry.session
        if normalize_text(text.strip()) in DEFAULT_WORDS:
            session.limit = self._executor.config.default_top
        else:
            limit = parse_positive_int(text)
            if limit is None:
                return AssistantReply(message=messages.LIMIT_INVALID)
            session.limit = limit

        entry.machine.transition(AssistantTrigger.LIMIT_SET)
        return AssistantReply(message=messages.confirm_prompt("Limite definido.", session))

    def _confirm_step(self, entry: SessionEntry, text: str) -> AssistantReply:
        answer = normalize_text(text.strip())
        session = entry.session

        if answer in AFFIRMATIVE_WORDS:
            try:
                result = self._execute(session)
            except AssistantError as exc:
                logger.error("Query execution failed: %s", exc)
                return AssistantReply(message=messages.execution_failed(exc))
            if result is None:
                return AssistantReply(message=messages.no_record_found())

            session.completed = True
            entry.machine.transition(AssistantTrigger.CONFIRMED)
            logger.info("Assistant query executed (%s %s)", session.action, session.entity)
            return AssistantReply(message=messages.EXECUTED, completed=True, result=result)

        if answer in NEGATIVE_WORDS:
            session.reset()
            entry.machine.transition(AssistantTrigger.CANCELLED)
            return AssistantReply(message=messages.CANCELLED)

        return AssistantReply(message=messages.CONFIRM_UNRECOGNIZED)

    def _execute(self, session: QuerySession) -> Optional[Any]:
        """Run the built query. Returns None when a get finds nothing."""
        if not session.entity or not session.action:
            raise AssistantError("Parâmetros de consulta incompletos")

        odata_filter = build_filter(session.entity, session.filters or {})
        if session.action == "list":
            return self._executor.list_records(
                session.entity,
                QueryOptions(
                    filter=odata_filter,
                    select=session.fields,
                    order_by=session.order_by,
                    top=session.limit,
                ),
            )
        if session.action == "get":
            return self._executor.get_record(session.entity, odata_filter, select=session.fields)
        if session.action == "count":
            count = self._executor.count_records(session.entity, odata_filter)
            return {"count": count, "entity": session.entity, "filter": odata_filter}
        raise AssistantError(f"Ação '{session.action}' não suportada.")
