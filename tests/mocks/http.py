import json
from typing import Any, Dict, List, Optional, Tuple


def sse_lines(payloads: List[Dict[str, Any]]) -> List[bytes]:
    lines: List[bytes] = [b": keep-alive\n"]
    for payload in payloads:
        lines.append(f"data: {json.dumps(payload)}\n".encode("utf-8"))
        lines.append(b"\n")
    return lines


class _LineStream:
    def __init__(self, lines: List[bytes]):
        self._lines = lines

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for line in self._lines:
            yield line


class MockHTTPResponse:
    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        lines: Optional[List[bytes]] = None,
    ):
        self.status = status
        self._body = body if isinstance(body, str) else json.dumps(body or {})
        self.content = _LineStream(lines or [])

    async def text(self) -> str:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class MockHTTPSession:
    def __init__(self, response: MockHTTPResponse):
        self.response = response
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def post(self, url: str, json: Optional[Dict[str, Any]] = None):
        self.calls.append((url, json or {}))
        return self.response
