"""
Test Fixtures

Shared test data and helpers for the RelayBot test suite.
Contains sample messages categorized by expected intent, canned upstream
payloads, and the stub upstream / fake clock used by the executor tests.
"""

from collections.abc import Callable

import httpx

# Sample inputs for testing intent classification
COMMAND_SAMPLES = [
    "/help",
    "/translate es Hello world",
    "  /weather London",
    "/MODEL gemini",
]

YOUTUBE_SAMPLES = [
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "https://youtu.be/dQw4w9WgXcQ",
    "youtube.com/watch?v=abcdefghijk",
    "https://youtu.be/12345678901",  # also passes the lax phone check
]

PHONE_SAMPLES = [
    "+14155552671",
    "+44 20 7946 0958",
    "(415) 555-2671 1",
    "14155552671",
]

TRANSLATION_SAMPLES = [
    ("translate good morning to spanish", "good morning", "es"),
    ("How do you say thank you in French", "thank you", "fr"),
    ("what is cat in german", "cat", "de"),
    ("Translate 'see you soon' to ja", "see you soon", "ja"),
]

CHAT_SAMPLES = [
    "Hello there!",
    "What is the weather in Paris",  # "Paris" is not a language
    "translate this to klingon",
    "Call me at 555",
    "Remind me: meeting at 10:30 on 2024-05-06",
    "Order 12345678901 shipped",
    "https://example.com/watch?v=dQw4w9WgXcQ",
]

# Canned upstream payloads
SEARCH_PAYLOAD = {
    "results": [
        {
            "title": "Breaking: Python 4 released",
            "url": "https://www.reuters.com/tech/python",
            "snippet": "The latest release of Python...",
        },
        {
            "title": "Asyncio tutorial",
            "link": "https://docs.python.org/3/library/asyncio.html",
            "description": "Asynchronous I/O reference",
        },
        {"name": "Untitled page"},
    ]
}

CITY_PAYLOAD = {
    "result": [
        {"name": "London", "country": "GB", "lat": 51.5072, "lon": -0.1276},
        {"name": "London", "country": "CA", "lat": 42.98, "lon": -81.24},
    ]
}

WEATHER_PAYLOAD = {
    "result": {
        "temperature": "18°C",
        "condition": "Cloudy",
        "humidity": "72%",
        "windSpeed": "11 km/h",
    }
}

PHONE_PAYLOAD = {
    "data": {
        "name": "Jane Doe",
        "carrier": "Example Mobile",
        "location": "San Francisco",
        "countryCode": "US",
        "type": "mobile",
        "spamScore": 12,
        "tags": ["verified"],
    }
}

PHONE_SPECS_PAYLOAD = {
    "data": {
        "model": "Galaxy S24",
        "brand": "Samsung",
        "price": "$799",
        "specs": {
            "screen": "6.2 inch AMOLED",
            "chipset": "Snapdragon 8 Gen 3",
            "ram": "8 GB",
            "battery": "4000 mAh",
        },
    }
}


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubUpstream:
    """
    Records every outbound request and answers through `handler`.

    The handler receives the httpx.Request and returns an httpx.Response
    or raises (e.g. httpx.ConnectError) to simulate transport failures.
    Backoff sleeps requested by the executor are recorded, not slept.
    """

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None):
        self.handler = handler or (lambda request: httpx.Response(200, json={}))
        self.requests: list[httpx.Request] = []
        self.sleeps: list[float] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def calls_to(self, fragment: str) -> int:
        return sum(1 for r in self.requests if fragment in str(r.url))

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def by_url(routes: dict[str, httpx.Response | Callable], default_status: int = 404):
    """
    Handler answering by the first URL fragment found in the request URL.

    Values are either a ready httpx.Response or a callable taking the request.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        for fragment, answer in routes.items():
            if fragment in url:
                return answer(request) if callable(answer) else answer
        return httpx.Response(default_status, text="no route")

    return handler


def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)
