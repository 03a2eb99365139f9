# playtime/services/sse.py
import json
import logging
import queue
from typing import Any, Callable, Dict, List

from flask import Response, current_app, stream_with_context

from playtime.services.live_query import LiveQuery


def format_event(event: str, payload: Any) -> str:
    """Server-Sent Events 형식의 메시지 한 건을 만듭니다."""
    data = json.dumps(payload, ensure_ascii=False, default=str)
    return f"event: {event}\ndata: {data}\n\n"


def stream_live_query(build_live_query: Callable[..., LiveQuery],
                      serialize: Callable[[List[Dict[str, Any]]], Any]) -> Response:
    """
    LiveQuery를 text/event-stream 응답으로 연결합니다.
    클라이언트 연결이 끊기면(제너레이터 종료) 구독을 해제합니다.

    :param build_live_query: (on_update, on_error)를 받아 시작되지 않은 LiveQuery를 반환하는 함수
    :param serialize: 정렬된 항목 목록을 JSON 직렬화 가능한 값으로 변환하는 함수
    """
    events: "queue.Queue[tuple]" = queue.Queue()
    keepalive = current_app.config.get('SSE_KEEPALIVE_SECONDS', 15)

    live = build_live_query(
        on_update=lambda items: events.put(('snapshot', serialize(items))),
        on_error=lambda message: events.put(('error', {"message": message})),
    )

    def generate():
        live.start()
        try:
            while True:
                try:
                    event, payload = events.get(timeout=keepalive)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                yield format_event(event, payload)
        finally:
            live.unsubscribe()
            logging.info("SSE 스트림 종료, 실시간 구독 해제")

    response = Response(stream_with_context(generate()), mimetype='text/event-stream')
    response.headers['Cache-Control'] = 'no-cache'
    response.headers['X-Accel-Buffering'] = 'no'
    return response
