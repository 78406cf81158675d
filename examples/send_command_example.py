"""
ntfy 토픽에 위젯 명령 발행 (테스트용)

실행 (프로젝트 루트에서):
  python examples/send_command_example.py show https://example.com/widget --duration 5000
  python examples/send_command_example.py hide

NTFY_URL 은 .env 에서 읽습니다.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse
import json
import os
import time

import httpx
from dotenv import load_dotenv

from src.feed.models import HIDE_ID, SHOW_ID

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def build_command(action: str, args: argparse.Namespace) -> dict:
    if action == "hide":
        return {"id": HIDE_ID, "createdAt": int(time.time() * 1000)}
    extra = {
        "url": args.url,
        "setupX": args.x,
        "setupY": args.y,
        "opacity": args.opacity,
        "scale": args.scale,
        "durationMs": args.duration,
        "clickThrough": args.click_through,
    }
    return {"id": SHOW_ID, "createdAt": int(time.time() * 1000), "extra": extra}


def main():
    parser = argparse.ArgumentParser(description="ntfy 위젯 명령 발행")
    parser.add_argument("action", choices=["show", "hide"])
    parser.add_argument("url", nargs="?", default="")
    parser.add_argument("--x", type=int, default=0)
    parser.add_argument("--y", type=int, default=0)
    parser.add_argument("--opacity", default="100")
    parser.add_argument("--scale", default="1.0")
    parser.add_argument("--duration", type=int, default=0)
    parser.add_argument("--click-through", action="store_true")
    parser.add_argument("--as-array", action="store_true", help="[{...}] 형식으로 발행")
    args = parser.parse_args()

    topic_url = (os.getenv("NTFY_URL") or "").strip().rstrip("/")
    if not topic_url:
        print("❌ .env에 NTFY_URL을 설정해주세요.")
        return 1
    if args.action == "show" and not args.url:
        print("❌ show 에는 url 이 필요합니다.")
        return 1

    command = build_command(args.action, args)
    body = json.dumps([command] if args.as_array else command)
    response = httpx.post(topic_url, content=body.encode("utf-8"), timeout=10.0)
    response.raise_for_status()
    print(f"발행 완료: {body}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
