"""
스트림 클라이언트 추상 기본 클래스
연결 상태 관리, 이벤트 전달, 재연결 루프를 담당합니다.
실제 스트림 열기/읽기는 하위 클래스(ntfy 등)가 구현합니다.
"""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from .models import Command

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 2.0  # 초, 고정 간격 (증가 없음, 횟수 제한 없음)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class FeedEventType(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    COMMAND = "command"


@dataclass
class FeedEvent:
    """리스너에게 전달되는 이벤트"""
    type: FeedEventType
    command: Optional[Command] = None
    error: Optional[BaseException] = None


FeedListener = Callable[[FeedEvent], Any]


class FeedConnectionError(ConnectionError):
    """연결 실패 (비정상 응답 코드, 핸드셰이크 중 전송 오류)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FeedClient(ABC):
    """
    스트림 클라이언트 추상 기본 클래스

    연결이 (disconnect 없이) 끊기면 Disconnected 를 알리고 reconnect_delay 만큼
    기다린 뒤 같은 엔드포인트로 다시 연결합니다. 무한 반복.

    이벤트는 내부 큐를 통해 별도 태스크에서 등록 순서대로 리스너에 전달되므로
    리스너가 느려도 프레임 수신은 막히지 않습니다.
    """

    def __init__(
        self,
        on_event: Optional[FeedListener] = None,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
    ):
        """
        Args:
            on_event: 이벤트 수신 시 호출할 콜백 (sync 또는 async)
            reconnect_delay: 재연결 대기 시간 (초)
        """
        self.reconnect_delay = reconnect_delay
        self.state = ConnectionState.DISCONNECTED
        self.endpoint: Optional[str] = None
        self.reconnect_attempts = 0

        self._listeners: List[FeedListener] = []
        if on_event is not None:
            self._listeners.append(on_event)

        self._session_active = False
        self._handshake_task: Optional[asyncio.Task] = None
        self._listen_task: Optional[asyncio.Task] = None
        self._events: Optional[asyncio.Queue] = None
        self._dispatch_task: Optional[asyncio.Task] = None

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """플랫폼 이름 반환 (예: 'ntfy')"""
        pass

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @abstractmethod
    async def _open_stream(self, endpoint: str) -> None:
        """
        스트림 열기 (응답 헤더까지)

        Raises:
            FeedConnectionError: 연결 실패
        """
        pass

    @abstractmethod
    async def _read_frames(self) -> None:
        """
        스트림 끝까지 프레임을 읽어 명령을 _emit_command 로 넘김.
        스트림 종료 시 정상 반환, 전송 오류는 예외로 전파.
        """
        pass

    @abstractmethod
    async def _close_stream(self) -> None:
        """열린 스트림 정리 (여러 번 호출돼도 안전해야 함)"""
        pass

    # 리스너 ---------------------------------------------------------------

    def add_listener(self, listener: FeedListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FeedListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    def _emit(self, event: FeedEvent) -> None:
        if self._events is None:
            logger.debug(f"[{self.platform_name}] 디스패처 없음, 이벤트 버림: {event.type.value}")
            return
        self._events.put_nowait(event)

    def _emit_command(self, command: Command) -> None:
        self._emit(FeedEvent(FeedEventType.COMMAND, command=command))

    def _start_dispatcher(self) -> None:
        if self._dispatch_task is not None and not self._dispatch_task.done():
            return
        self._events = asyncio.Queue()
        self._dispatch_task = asyncio.create_task(self._dispatch(self._events))

    async def _stop_dispatcher(self) -> None:
        """남은 이벤트를 모두 전달한 뒤 디스패처 종료"""
        task = self._dispatch_task
        events = self._events
        self._dispatch_task = None
        self._events = None
        if task is None or events is None:
            return
        events.put_nowait(None)
        if task is not asyncio.current_task():
            await task

    async def _dispatch(self, events: asyncio.Queue) -> None:
        while True:
            event = await events.get()
            if event is None:
                return
            for listener in list(self._listeners):
                try:
                    result = listener(event)
                    if asyncio.iscoroutine(result):
                        await result
                except Exception as e:
                    logger.error(
                        f"[{self.platform_name}] 리스너 처리 오류 ({event.type.value}): {e}",
                        exc_info=True,
                    )

    # 연결 ----------------------------------------------------------------

    async def connect(self, endpoint: str) -> None:
        """
        스트림 연결 후 백그라운드 수신 루프 시작

        연결 도중 disconnect() 가 호출되면 연결을 포기하고 조용히 반환합니다.

        Raises:
            RuntimeError: 이미 연결(또는 연결/재연결 대기) 중인 경우
            FeedConnectionError: 첫 연결 실패
        """
        if self._session_active:
            raise RuntimeError(f"[{self.platform_name}] 이미 연결되어 있습니다")

        self._session_active = True
        self.endpoint = endpoint
        self.reconnect_attempts = 0
        self._start_dispatcher()

        handshake = asyncio.create_task(self._handshake(endpoint))
        self._handshake_task = handshake
        try:
            await asyncio.wait({handshake})
        except asyncio.CancelledError:
            handshake.cancel()
            await asyncio.wait({handshake})
            if not handshake.cancelled():
                handshake.exception()
            if self._handshake_task is handshake:
                await self._abort_session()
            raise

        if self._handshake_task is not handshake:
            # 연결 도중 disconnect() 가 세션을 정리함
            logger.info(f"[{self.platform_name}] 연결 중 종료 요청, 연결 취소")
            return
        self._handshake_task = None

        error = None if handshake.cancelled() else handshake.exception()
        if handshake.cancelled() or error is not None:
            await self._abort_session()
            if error is not None:
                raise error
            raise asyncio.CancelledError()

        self._listen_task = asyncio.create_task(self._listen())

    async def _abort_session(self) -> None:
        """첫 연결 실패 시 정리"""
        self._handshake_task = None
        await self._close_stream()
        self._mark_disconnected()
        await self._stop_dispatcher()
        self._session_active = False

    async def _handshake(self, endpoint: str) -> None:
        self.state = ConnectionState.CONNECTING
        logger.info(f"[{self.platform_name}] 연결 시도: {endpoint}")
        try:
            await self._open_stream(endpoint)
        except asyncio.CancelledError:
            self.state = ConnectionState.DISCONNECTED
            raise
        except Exception as e:
            self.state = ConnectionState.DISCONNECTED
            logger.error(f"[{self.platform_name}] 연결 실패: {e}")
            self._emit(FeedEvent(FeedEventType.ERROR, error=e))
            raise

        self.state = ConnectionState.CONNECTED
        self.reconnect_attempts = 0
        logger.info(f"[{self.platform_name}] 연결 성공")
        self._emit(FeedEvent(FeedEventType.CONNECTED))

    async def _listen(self) -> None:
        """수신 루프 + 재연결 루프 (disconnect 로 취소될 때까지)"""
        try:
            while True:
                if self.is_connected:
                    try:
                        await self._read_frames()
                        logger.warning(f"[{self.platform_name}] 스트림 종료 (서버가 연결을 닫음)")
                    except asyncio.CancelledError:
                        raise
                    except Exception as e:
                        logger.warning(f"[{self.platform_name}] 수신 오류: {e}")
                        self._emit(FeedEvent(FeedEventType.ERROR, error=e))
                    finally:
                        await self._close_stream()
                    self._mark_disconnected()

                if not await self._reconnect():
                    return
        finally:
            await self._close_stream()

    def _mark_disconnected(self) -> None:
        if self.state == ConnectionState.DISCONNECTED:
            return
        self.state = ConnectionState.DISCONNECTED
        self._emit(FeedEvent(FeedEventType.DISCONNECTED))

    async def _reconnect(self) -> bool:
        """
        재연결 시도 (고정 간격) - 공통 로직

        Returns:
            False: 세션이 종료된 경우 (루프 중단)
        """
        if not self._session_active or self.endpoint is None:
            return False

        self.reconnect_attempts += 1
        logger.info(
            f"[{self.platform_name}] 재연결 시도 {self.reconnect_attempts}회차 "
            f"({self.reconnect_delay}초 후)"
        )
        await asyncio.sleep(self.reconnect_delay)

        try:
            await self._handshake(self.endpoint)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[{self.platform_name}] 재연결 실패: {e}")
            await self._close_stream()
        return True

    async def disconnect(self) -> None:
        """
        연결 종료. 진행 중인 수신/대기를 취소하며 재연결하지 않음.
        이미 끊긴 상태면 아무것도 하지 않음.
        """
        if not self._session_active:
            return
        self._session_active = False

        handshake = self._handshake_task
        self._handshake_task = None
        if handshake is not None:
            handshake.cancel()
            await asyncio.wait({handshake})
            if not handshake.cancelled() and handshake.exception() is not None:
                logger.debug(f"[{self.platform_name}] 종료 중 연결 실패 무시: {handshake.exception()}")

        task = self._listen_task
        self._listen_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        await self._close_stream()
        self._mark_disconnected()
        logger.info(f"[{self.platform_name}] 연결 종료")
        await self._stop_dispatcher()

    async def wait_closed(self) -> None:
        """disconnect() 될 때까지 대기"""
        task = self._listen_task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def start(self, endpoint: str) -> None:
        """클라이언트 시작 (연결 후 종료될 때까지 대기)"""
        await self.connect(endpoint)
        await self.wait_closed()

    async def stop(self) -> None:
        """클라이언트 중지"""
        await self.disconnect()
