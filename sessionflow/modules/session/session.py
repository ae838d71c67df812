import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Union

from ...config.provider import SessionConfig
from .clock import Clock, SystemClock
from .exceptions import (
    SessionDeserializationError,
    SessionError,
    SessionHandlerError,
    SessionIdAllocationError,
    SessionNotStartedError,
    SessionSerializationError,
)
from .flash import FlashDataTracker
from .identity import IdentityManager, IdentityState
from .serializer import RecordSerializer
from .store import MarkedKeys, SessionStore
from .temp import DEFAULT_TTL, TempDataTracker
from .transport import SessionTransport, StaticTransport

if TYPE_CHECKING:
    from ..handlers.interfaces import SessionHandler

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(
        self,
        handler: "SessionHandler",
        config: Optional[SessionConfig] = None,
        transport: Optional[SessionTransport] = None,
        clock: Optional[Clock] = None,
        serializer: Optional[RecordSerializer] = None,
    ):
        """
        Initialize session manager for one client.

        Args:
            handler: Persistence backend for this request cycle
            config: Session configuration (defaults apply if omitted)
            transport: Source and sink of the session identifier
            clock: Time source
            serializer: Record codec
        """
        self.handler = handler
        self.config = config or SessionConfig()
        self.transport = transport or StaticTransport()
        self.clock = clock or SystemClock()
        self.serializer = serializer or RecordSerializer()
        self.identity = IdentityManager(self.config, self.clock)

        self.did_regenerate = False
        self.is_available = True
        self.last_error: Optional[SessionError] = None

        self._session_id: Optional[str] = None
        self._started = False
        self._locked = False
        self._attach(SessionStore())

    async def __aenter__(self) -> "SessionManager":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def identity_state(self) -> IdentityState:
        return self.identity.state

    # Cycle lifecycle

    async def start(self) -> "SessionManager":
        """
        Begin a request cycle.

        Resolves the identifier, locks and loads the record, rotates the
        identifier when due, then ages flash data and sweeps expired temp
        data. Calling start() on an open cycle closes that cycle first.

        Returns:
            self, for chaining

        Raises:
            SessionIdAllocationError: If no identifier could be allocated
        """
        if self._started:
            await self.close()

        self.did_regenerate = False
        self.is_available = True
        self.last_error = None

        client_ip = self.transport.client_ip
        user_agent = self.transport.user_agent

        inbound = self.transport.get_session_id()
        if inbound is not None and not self.identity.is_valid_id(inbound):
            logger.debug("Discarding malformed inbound session id")
            inbound = None

        try:
            session_id, store = await self._resume(inbound, client_ip, user_agent)
            fresh = store is None
            if fresh:
                if session_id is None:
                    session_id = await self.identity.generate_id(self.handler)
                    await self._acquire(session_id)
                store = SessionStore()

            self._session_id = session_id
            self._attach(store)
            self._started = True

            if fresh:
                self.identity.activate(store)
            else:
                self.identity.state = IdentityState.ACTIVE
                if self.identity.needs_regeneration(store, self.transport.is_ajax):
                    await self.regenerate(destroy=self.config.regenerate_destroy)
        except SessionHandlerError as e:
            await self._degrade(e)
            return self
        except SessionIdAllocationError:
            self._started = False
            await self._release()
            raise

        self.identity.bind(self.store, client_ip, user_agent)
        self.flash.age()
        self.temp.sweep()
        self.transport.set_session_id(self._session_id)
        return self

    async def _resume(self, inbound: Optional[str], client_ip: Optional[str], user_agent: Optional[str]):
        """
        Try to continue the client's existing session.

        Returns:
            (session_id, store). store is None when the cycle must start
            fresh; session_id is None when a new identifier is needed.
        """
        if inbound is None:
            return None, None

        await self._acquire(inbound)
        payload = await self.handler.read(inbound)
        if payload is None:
            logger.debug("No record for inbound session id, issuing a new one")
            await self._release()
            return None, None

        try:
            store = self.serializer.loads(payload)
        except SessionDeserializationError as e:
            logger.warning(f"Session {inbound} could not be decoded, starting fresh: {e}")
            return inbound, None

        if not self.identity.matches(store, client_ip, user_agent):
            await self._release()
            return None, None
        return inbound, store

    async def close(self) -> None:
        """
        End the request cycle: persist the store and release the handler.

        The handler is released on every path, including write failures.
        """
        if not self._started:
            await self._release()
            return
        try:
            if self.is_available:
                await self._persist()
        except SessionHandlerError as e:
            self._mark_unavailable(e)
        finally:
            self._started = False
            await self._release()

    async def regenerate(self, destroy: bool = False) -> Optional[str]:
        """
        Rotate the session identifier, keeping the data.

        Args:
            destroy: Delete the old record now instead of letting it expire

        Returns:
            The new identifier, or None if the session is unavailable.
            A storage failure leaves the session unavailable under its old
            identifier.

        Raises:
            SessionNotStartedError: If no cycle is open
            SessionIdAllocationError: If no identifier could be allocated
        """
        self._require_started()
        if not self.is_available:
            return None

        old_id = self._session_id
        self.identity.begin_regeneration()
        try:
            new_id = await self.identity.generate_id(self.handler)
            if destroy:
                await self._destroy_record(old_id)
            await self._release()
            await self._acquire(new_id)

            self._session_id = new_id
            self.identity.finish_regeneration(self.store)
            await self._persist()
        except SessionHandlerError as e:
            self.identity.abort_regeneration()
            self._session_id = old_id
            self._mark_unavailable(e)
            await self._release()
            return None
        except SessionIdAllocationError:
            self.identity.abort_regeneration()
            raise

        self.did_regenerate = True
        self.transport.set_session_id(new_id)
        logger.info(f"Session {old_id} regenerated as {new_id} (destroy_old={destroy})")
        return new_id

    async def destroy(self) -> None:
        """
        Delete the session record and clear the in-process data.

        Failures are logged, never raised. The next start() issues a new
        identifier.
        """
        if self._session_id is not None and self.is_available:
            await self._destroy_record(self._session_id)

        self.store.clear()
        self._started = False
        await self._release()
        self._session_id = None
        self.identity.reset()
        self.transport.set_session_id(None)

    # Data API

    def set(self, data: Union[str, Mapping[str, Any]], value: Any = None) -> None:
        """Write permanent value(s); clears any flash/temp marker on each key."""
        self._require_started()
        if isinstance(data, Mapping):
            for key, item in data.items():
                self.store.put(key, item)
        else:
            self.store.put(data, value)

    def get(self, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Get a value, or a snapshot of all data when called without a key.

        Missing keys return default.
        """
        self._require_started()
        if key is None:
            return self.store.snapshot()
        return self.store.get(key, default)

    def has(self, key: str) -> bool:
        self._require_started()
        return self.store.has(key)

    def remove(self, keys: Union[str, Iterable[str]]) -> None:
        self._require_started()
        keys = [keys] if isinstance(keys, str) else list(keys)
        for key in keys:
            self.store.delete(key)

    def push(self, key: str, data: Mapping[str, Any]) -> bool:
        """
        Merge a mapping into an existing dict value.

        Returns:
            False if the current value is not a dict
        """
        self._require_started()
        current = self.store.get(key)
        if not isinstance(current, dict):
            return False
        self.set(key, {**current, **data})
        return True

    # Flash data

    def set_flashdata(self, data: Union[str, Mapping[str, Any]], value: Any = None) -> None:
        self._require_started()
        self.flash.set(data, value)

    def get_flashdata(self, key: Optional[str] = None) -> Any:
        self._require_started()
        return self.flash.get(key)

    def keep_flashdata(self, keys: Union[str, Iterable[str]]) -> bool:
        self._require_started()
        return self.flash.keep(keys)

    def mark_as_flashdata(self, keys: Union[str, Iterable[str]]) -> bool:
        self._require_started()
        return self.flash.mark(keys)

    def unmark_flashdata(self, keys: Union[str, Iterable[str]]) -> None:
        self._require_started()
        self.flash.unmark(keys)

    def get_flash_keys(self) -> MarkedKeys:
        self._require_started()
        return self.flash.keys()

    # Temp data

    def set_tempdata(
        self,
        data: Union[str, Mapping[str, Any], Iterable[str]],
        value: Any = None,
        ttl: int = DEFAULT_TTL,
    ) -> bool:
        self._require_started()
        return self.temp.set(data, value, ttl)

    def get_tempdata(self, key: Optional[str] = None) -> Any:
        self._require_started()
        return self.temp.get(key)

    def mark_as_tempdata(
        self, keys: Union[str, Mapping[str, int], Iterable[str]], ttl: int = DEFAULT_TTL
    ) -> bool:
        self._require_started()
        return self.temp.mark(keys, ttl)

    def remove_tempdata(self, keys: Union[str, Iterable[str]]) -> None:
        self._require_started()
        self.temp.remove(keys)

    def unmark_tempdata(self, keys: Union[str, Iterable[str]]) -> None:
        self._require_started()
        self.temp.unmark(keys)

    def get_temp_keys(self) -> MarkedKeys:
        self._require_started()
        return self.temp.keys()

    def get_temp_expiry(self, key: str) -> Optional[float]:
        self._require_started()
        return self.temp.expiry(key)

    def get_markers(self) -> Dict[str, Any]:
        """Snapshot of the metadata mapping (flash states and temp expiries)."""
        self._require_started()
        return dict(self.store.meta)

    # Internals

    def _attach(self, store: SessionStore) -> None:
        self.store = store
        self.flash = FlashDataTracker(store)
        self.temp = TempDataTracker(store, self.clock)

    def _require_started(self) -> None:
        if not self._started:
            raise SessionNotStartedError("Session cycle is not open, call start() first")

    async def _acquire(self, session_id: str) -> None:
        await self.handler.open(session_id)
        self._locked = True

    async def _release(self) -> None:
        if not self._locked:
            return
        try:
            await self.handler.close()
        except SessionHandlerError as e:
            logger.error(f"Failed to release session handler: {e}")
        finally:
            self._locked = False

    async def _persist(self) -> None:
        try:
            payload = self.serializer.dumps(self.store)
        except SessionSerializationError as e:
            logger.error(f"Session {self._session_id} not saved: {e}")
            self.last_error = e
            return
        await self.handler.write(self._session_id, payload)

    async def _destroy_record(self, session_id: str) -> None:
        try:
            await self.handler.destroy(session_id)
        except SessionHandlerError as e:
            logger.error(f"Failed to destroy session {session_id}: {e}")

    def _mark_unavailable(self, error: SessionHandlerError) -> None:
        logger.error(f"Session storage unavailable: {error}")
        self.is_available = False
        self.last_error = error

    async def _degrade(self, error: SessionHandlerError) -> None:
        """Continue the cycle with an empty, non-persistent session."""
        self._mark_unavailable(error)
        await self._release()
        self._attach(SessionStore())
        self._started = True
