"""
ntfy 위젯 오버레이 실행

.env에 NTFY_URL (예: https://ntfy.sh/my-widget-topic) 설정 후 실행.
OBS 브라우저 소스에 http://127.0.0.1:8765/ 추가 (?status=1 붙이면 연결 상태 표시).

실행: python examples/ntfy_overlay_example.py  (프로젝트 루트에서)
"""

import sys
from pathlib import Path

# 프로젝트 루트를 path에 넣어서 'import src' 가능하게 함
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from dotenv import load_dotenv

from src.app import main
from src.utils import load_settings, setup_logging

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
LOG_DIR = setup_logging()


if __name__ == "__main__":
    print(f"로그 저장 경로: {LOG_DIR}")
    try:
        asyncio.run(main(load_settings()))
    except KeyboardInterrupt:
        pass
