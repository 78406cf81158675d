"""
ntfy 스트림 클라이언트
토픽의 JSON 스트림(한 줄에 봉투 하나)을 구독하여 위젯 명령을 수신합니다.

참고: https://docs.ntfy.sh/subscribe/api/
"""

import logging
from typing import Optional

import httpx

from .base_client import DEFAULT_RECONNECT_DELAY, FeedClient, FeedConnectionError, FeedListener
from .frame_parser import FrameDecoder

logger = logging.getLogger(__name__)

# 읽기 타임아웃 없음 (keepalive 만 오가는 긴 유휴 구간 허용)
STREAM_TIMEOUT = httpx.Timeout(10.0, read=None)


def stream_url(endpoint: str) -> str:
    """토픽 URL → JSON 스트림 URL (끝의 / 제거 후 /json 추가)"""
    url = endpoint.strip().rstrip("/")
    if url.endswith("/json"):
        return url
    return url + "/json"


class NtfyStreamClient(FeedClient):
    """ntfy 토픽 구독 클라이언트

    httpx 스트리밍 응답을 줄 단위로 읽어 FrameDecoder 에 넘기고,
    통과한 명령만 COMMAND 이벤트로 내보냅니다.
    """

    @property
    def platform_name(self) -> str:
        """플랫폼 이름"""
        return "ntfy"

    def __init__(
        self,
        on_event: Optional[FeedListener] = None,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        decoder: Optional[FrameDecoder] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            on_event: 이벤트 수신 시 호출할 콜백 함수
            reconnect_delay: 재연결 대기 시간 (초)
            decoder: 프레임 디코더 (None이면 기본 디코더)
            transport: httpx 전송 계층 (테스트에서 MockTransport 주입용)
        """
        super().__init__(on_event, reconnect_delay)
        self.decoder = decoder or FrameDecoder()
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self._response: Optional[httpx.Response] = None

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=STREAM_TIMEOUT, transport=self._transport)
        return self._http

    async def _open_stream(self, endpoint: str):
        url = stream_url(endpoint)
        headers = {
            "Accept": "text/event-stream",
            "Connection": "keep-alive",
        }
        client = self._get_http()
        request = client.build_request("GET", url, headers=headers)
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise FeedConnectionError(f"Connection error: {e}") from e

        if not response.is_success:
            await response.aclose()
            raise FeedConnectionError(
                f"Connection error: {response.status_code}",
                status_code=response.status_code,
            )
        self._response = response

    async def _read_frames(self):
        response = self._response
        if response is None:
            return
        async for line in response.aiter_lines():
            # 빈 줄은 프로토콜 수준 keepalive
            if not line.strip():
                continue
            logger.debug(f"[{self.platform_name}] 수신: {line[:200]}")
            command = self.decoder.decode(line)
            if command is not None:
                self._emit_command(command)

    async def _close_stream(self):
        response = self._response
        self._response = None
        if response is not None:
            try:
                await response.aclose()
            except httpx.HTTPError as e:
                logger.debug(f"[{self.platform_name}] 응답 닫기 오류: {e}")

    async def _close_http(self):
        http = self._http
        self._http = None
        if http is not None:
            await http.aclose()

    async def _abort_session(self):
        """첫 연결 실패 시 HTTP 클라이언트까지 정리 (재시도 시 새로 생성)"""
        await self._close_stream()
        await self._close_http()
        await super()._abort_session()

    async def disconnect(self):
        """ntfy 연결 종료 (HTTP 클라이언트까지 정리)"""
        await super().disconnect()
        if not self._session_active:
            await self._close_http()
