"""
Messaging API client
Explicit session object plus interval pollers that keep a chat view fresh
"""
import os
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

CONVERSATIONS_POLL_SECONDS = float(os.getenv('CONVERSATIONS_POLL_SECONDS', '10'))
THREAD_POLL_SECONDS = float(os.getenv('THREAD_POLL_SECONDS', '3'))


class ApiError(Exception):
    """Non-2xx response; `message` is the server's detail string, shown to the user as-is."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ClientSession:
    """Who is calling and with which token. Passed around instead of global state."""

    def __init__(self, base_url: str, token: Optional[str] = None, user: Optional[Dict[str, Any]] = None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.user = user

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> Optional[int]:
        return self.user.get('id') if self.user else None

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {'Authorization': f'Bearer {self.token}'}


class MessagingClient:
    """Thin async wrapper over the /api endpoints"""

    def __init__(self, session: ClientSession, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = 10.0):
        self.session = session
        self._http = httpx.AsyncClient(base_url=session.base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        resp = await self._http.request(method, f'/api{path}', headers=self.session.headers(), **kwargs)
        if resp.status_code >= 400:
            try:
                detail = resp.json().get('detail', resp.text)
            except ValueError:
                detail = resp.text
            if not isinstance(detail, str):
                detail = str(detail)
            raise ApiError(resp.status_code, detail)
        return resp.json()

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request('POST', '/users/login', json={'email': email, 'password': password})
        self.session.token = data['accessToken']
        self.session.user = data['user']
        return data

    def logout(self):
        self.session.token = None
        self.session.user = None

    async def contacts(self, user_type: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'userType': user_type} if user_type else None
        return await self._request('GET', '/users/contacts', params=params)

    async def list_conversations(self) -> List[Dict[str, Any]]:
        return await self._request('GET', '/conversations')

    async def get_thread(self, user_id: int) -> List[Dict[str, Any]]:
        return await self._request('GET', f'/messages/{user_id}')

    async def send_message(self, receiver_id: int, content: str) -> Dict[str, Any]:
        return await self._request('POST', '/messages', json={'receiverId': receiver_id, 'content': content})

    async def mark_read(self, sender_id: int) -> Dict[str, Any]:
        return await self._request('PUT', f'/messages/read/{sender_id}')

    async def mark_delivered(self, sender_id: int) -> Dict[str, Any]:
        return await self._request('PUT', f'/messages/deliver/{sender_id}')


class Poller:
    """Re-run `fetch` every `interval` seconds and hand the result to `on_result`.

    Failures are counted and logged; the next tick retries.
    """

    def __init__(self, fetch: Callable[[], Awaitable[Any]], on_result: Callable[[Any], Any],
                 interval: float, name: str = 'poller'):
        self.fetch = fetch
        self.on_result = on_result
        self.interval = interval
        self.name = name
        self.running = False
        self.tick_count = 0
        self.error_count = 0
        self.last_error: Optional[Exception] = None
        self._task: Optional[asyncio.Task] = None

    async def tick(self):
        try:
            result = await self.fetch()
            outcome = self.on_result(result)
            if asyncio.iscoroutine(outcome):
                await outcome
        except Exception as e:
            self.error_count += 1
            self.last_error = e
            logger.error(f"{self.name} tick failed: {str(e)}")
            return None
        self.tick_count += 1
        return result

    async def run(self):
        self.running = True
        logger.info(f"Starting {self.name} every {self.interval}s")
        while self.running:
            await self.tick()
            if not self.running:
                break
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        self.running = False
        logger.info(f"Stopping {self.name}")
        if self._task is asyncio.current_task():
            # stopped from inside on_result; run() exits after this tick
            return
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None


class ChatPoller:
    """Conversation list on a slow interval, the open thread on a faster one."""

    def __init__(self, client: MessagingClient,
                 on_conversations: Callable[[List[Dict[str, Any]]], Any],
                 on_thread: Callable[[List[Dict[str, Any]]], Any],
                 conversations_interval: float = CONVERSATIONS_POLL_SECONDS,
                 thread_interval: float = THREAD_POLL_SECONDS):
        self.client = client
        self.on_thread = on_thread
        self.thread_interval = thread_interval
        self.active_user_id: Optional[int] = None
        self.conversations = Poller(client.list_conversations, on_conversations,
                                    conversations_interval, name='conversations-poller')
        self.thread: Optional[Poller] = None

    def start(self):
        self.conversations.start()

    async def open_thread(self, user_id: int):
        """Switch the fast poller to another counterpart."""
        if self.thread is not None:
            await self.thread.stop()
        self.active_user_id = user_id
        self.thread = Poller(lambda: self.client.get_thread(user_id), self.on_thread,
                             self.thread_interval, name=f'thread-poller-{user_id}')
        self.thread.start()

    async def close_thread(self):
        if self.thread is not None:
            await self.thread.stop()
        self.thread = None
        self.active_user_id = None

    async def stop(self):
        await self.close_thread()
        await self.conversations.stop()
