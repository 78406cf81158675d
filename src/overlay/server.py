"""
위젯 오버레이용 로컬 HTTP 서버. /api/state JSON, / 오버레이 HTML.
반드시 src/app.py 안에서 실행 (같은 프로세스에서 state 공유).
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from src.overlay.state import overlay_state

app = FastAPI(title="ntfy Widget Overlay", docs_url=None, redoc_url=None)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
)


@app.get("/api/state")
def get_state():
    """현재 위젯(없으면 null)과 연결 상태 반환."""
    widget = overlay_state.get("widget")
    connection = overlay_state.get("connection") or {}
    return JSONResponse({
        "widget": dict(widget) if widget else None,
        "connection": dict(connection),
    })


OVERLAY_HTML = """<!DOCTYPE html>
<html lang="ko">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Widget Overlay</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    ::-webkit-scrollbar { display: none; }
    html, body { width: 100vw; height: 100vh; overflow: hidden; background: transparent; }

    #widget {
      position: absolute;
      overflow: hidden;
      border: 0;
      display: none;
    }
    #widget iframe {
      border: 0;
      background: transparent;
      transform-origin: 0 0;
    }
    #widget.click-through { pointer-events: none; }

    /* 연결 상태 (?status=1 일 때만 표시) */
    #status {
      position: fixed;
      top: 10px;
      right: 10px;
      padding: 6px 12px;
      border-radius: 8px;
      font: 13px sans-serif;
      color: #f1f5f9;
      background: rgba(0, 0, 0, 0.7);
      display: none;
    }
    #status.connected { border-left: 4px solid #22c55e; }
    #status.disconnected { border-left: 4px solid #ef4444; }
  </style>
</head>
<body>
  <div id="widget"></div>
  <div id="status"></div>

  <script>
    var urlParams = new URLSearchParams(window.location.search);
    var showStatus = urlParams.has('status');
    var currentId = null;
    var expiredId = null;  // durationMs 로 닫힌 위젯은 다시 띄우지 않음
    var hideTimer = null;

    function clearWidget() {
      var box = document.getElementById("widget");
      box.innerHTML = "";
      box.style.display = "none";
      currentId = null;
      if (hideTimer) { clearTimeout(hideTimer); hideTimer = null; }
    }

    function showWidget(w) {
      var box = document.getElementById("widget");
      // 기준 해상도 → 현재 화면 크기로 위치 환산
      var scaleX = window.innerWidth / (w.setup_resolution_x || 2560);
      var scaleY = window.innerHeight / (w.setup_resolution_y || 1440);
      var zoom = w.content_zoom || w.scale || 1;

      box.style.left = (w.setup_x * scaleX) + "px";
      box.style.top = (w.setup_y * scaleY) + "px";
      box.style.width = (w.width * zoom) + "px";
      box.style.height = (w.height * zoom) + "px";
      box.style.opacity = String((w.opacity || 0) / 100);
      box.className = w.click_through ? "click-through" : "";

      var frame = document.createElement("iframe");
      frame.src = w.url;
      frame.width = w.width;
      frame.height = w.height;
      frame.allow = "autoplay";
      frame.style.transform = "scale(" + zoom + ")";
      box.innerHTML = "";
      box.appendChild(frame);
      box.style.display = "block";
      currentId = w.id;

      // durationMs > 0 이면 표시 후 자동 숨김
      if (w.duration_ms > 0) {
        var left = w.duration_ms - (Date.now() - w.shown_at * 1000);
        var shownId = w.id;
        hideTimer = setTimeout(function() { clearWidget(); expiredId = shownId; }, Math.max(0, left));
      }
    }

    function render() {
      var base = window.location.origin || (window.location.protocol + "//" + window.location.host);
      fetch(base + "/api/state")
        .then(function(r) { return r.json(); })
        .then(function(data) {
          var w = data.widget;
          if (!w) {
            if (currentId !== null) clearWidget();
          } else if (w.id !== currentId && w.id !== expiredId) {
            clearWidget();
            showWidget(w);
          }

          var st = document.getElementById("status");
          if (showStatus) {
            var conn = data.connection || {};
            st.innerText = conn.text || "";
            st.className = conn.state === "connected" ? "connected" : "disconnected";
            st.style.display = "block";
          }
        })
        .catch(function(err) { console.error(err); });
    }

    setInterval(render, 500);
    render();
  </script>
</body>
</html>
"""


@app.get("/", response_class=HTMLResponse)
def overlay_page():
    """OBS 브라우저 소스에 넣을 URL. 위젯 상태를 폴링해 표시."""
    return HTMLResponse(OVERLAY_HTML)
