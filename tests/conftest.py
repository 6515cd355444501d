"""Shared pytest configuration, fixtures, and sample documents for validator testing."""

import copy
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from td_validator.validation.config import ValidationConfig
from td_validator.validation.loader import load_thing
from td_validator.validation.models import Thing

TD_CONTEXT = "https://www.w3.org/2022/wot/td/v1.1"

MINIMAL_TD: Dict[str, Any] = {
    "id": "urn:minimal",
    "@context": TD_CONTEXT,
    "title": "MyLampThing",
    "description": "Valid TD with minimum information possible",
    "securityDefinitions": {"basic_sc": {"scheme": "basic", "in": "header"}},
    "security": ["basic_sc"],
}

# Schema-valid, but states none of the affordance terms that carry defaults
LAMP_TD: Dict[str, Any] = {
    "id": "urn:simple",
    "@context": TD_CONTEXT,
    "title": "MyLampThing",
    "description": "Lamp from the first example of the TD recommendation",
    "securityDefinitions": {"basic_sc": {"scheme": "basic", "in": "header"}},
    "security": ["basic_sc"],
    "properties": {
        "status": {
            "type": "string",
            "forms": [{"href": "https://mylamp.example.com/status"}],
        }
    },
    "actions": {"toggle": {"forms": [{"href": "https://mylamp.example.com/toggle"}]}},
    "events": {
        "overheating": {
            "data": {"type": "string"},
            "forms": [{"href": "https://mylamp.example.com/oh", "subprotocol": "longpoll"}],
        }
    },
}

# Same lamp with every default-bearing term stated
FULL_LAMP_TD: Dict[str, Any] = {
    "id": "urn:full",
    "@context": TD_CONTEXT,
    "title": "MyLampThing",
    "securityDefinitions": {"basic_sc": {"scheme": "basic", "in": "header"}},
    "security": "basic_sc",
    "properties": {
        "status": {
            "type": "string",
            "readOnly": False,
            "writeOnly": False,
            "observable": False,
            "forms": [
                {
                    "href": "https://mylamp.example.com/status",
                    "contentType": "application/json",
                    "op": ["readproperty", "writeproperty"],
                }
            ],
        }
    },
    "actions": {
        "toggle": {
            "safe": False,
            "idempotent": False,
            "forms": [
                {
                    "href": "https://mylamp.example.com/toggle",
                    "contentType": "application/json",
                    "op": "invokeaction",
                }
            ],
        }
    },
    "events": {
        "overheating": {
            "data": {"type": "string"},
            "forms": [
                {
                    "href": "https://mylamp.example.com/oh",
                    "contentType": "application/json",
                    "op": "subscribeevent",
                    "subprotocol": "longpoll",
                }
            ],
        }
    },
}

# Missing the mandatory title and security terms
INVALID_TD: Dict[str, Any] = {
    "@context": TD_CONTEXT,
    "securityDefinitions": {"nosec_sc": {"scheme": "nosec"}},
}

# Would fail the TD schema (no security), passes the TM schema
VALID_TM: Dict[str, Any] = {
    "@context": [TD_CONTEXT],
    "@type": "tm:ThingModel",
    "title": "Lamp Thing Model",
    "properties": {"status": {"type": "string"}},
}

# Term definition that is neither a string nor an object
BAD_CONTEXT_TD: Dict[str, Any] = {
    **MINIMAL_TD,
    "id": "urn:bad-context",
    "@context": [TD_CONTEXT, {"ex": 42}],
}

NOT_JSON = '{\n    "title": "MyLampThing",\n    "security": [\n'


class StubProcessor:
    """Deterministic JSON-LD processor for tests.

    Args:
        error: Raised from every conversion when set.
        delay: Seconds to block before answering.
    """

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay
        self.calls: List[Any] = []

    def to_rdf(self, document: Any) -> str:
        self.calls.append(document)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ""


class ContextCheckingProcessor(StubProcessor):
    """Fails on documents whose @context contains a non-string term value."""

    def to_rdf(self, document: Any) -> str:
        self.calls.append(document)
        context = document.get("@context") if isinstance(document, dict) else None
        entries = context if isinstance(context, list) else [context]
        for entry in entries:
            if isinstance(entry, dict):
                for term, value in entry.items():
                    if not isinstance(value, (str, dict)):
                        raise ValueError(
                            f"Invalid JSON-LD syntax; term definition for '{term}' must be a string or object."
                        )
        return ""


@pytest.fixture
def documents() -> Dict[str, Any]:
    """Sample documents keyed by name (deep copies, safe to mutate)."""
    return copy.deepcopy(
        {
            "minimal_td": MINIMAL_TD,
            "lamp_td": LAMP_TD,
            "full_lamp_td": FULL_LAMP_TD,
            "invalid_td": INVALID_TD,
            "valid_tm": VALID_TM,
            "bad_context_td": BAD_CONTEXT_TD,
        }
    )


@pytest.fixture
def write_document(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a document to tmp_path.

    Dicts and lists are serialized as JSON; strings are written verbatim.
    """

    def _write(name: str, content: Any, directory: Optional[Path] = None) -> Path:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        text = content if isinstance(content, str) else json.dumps(content, indent=4)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_thing(write_document) -> Callable[[str, Any], Thing]:  # pylint: disable=redefined-outer-name
    """Factory writing a document and loading it as a Thing."""

    def _make(name: str, content: Any) -> Thing:
        return load_thing(write_document(name, content))

    return _make


@pytest.fixture
def stub_processor() -> StubProcessor:
    return StubProcessor()


@pytest.fixture
def context_processor() -> ContextCheckingProcessor:
    return ContextCheckingProcessor()


@pytest.fixture
def failing_processor() -> StubProcessor:
    return StubProcessor(error=RuntimeError("Dereferencing a URL did not result in a valid JSON-LD object."))


@pytest.fixture
def online_config() -> ValidationConfig:
    return ValidationConfig(offline=False, show_progress=False)


@pytest.fixture
def offline_config() -> ValidationConfig:
    return ValidationConfig(offline=True, show_progress=False)


@pytest.fixture
def processor_factory() -> Callable[..., StubProcessor]:
    """Factory for stub processors with a custom error or delay."""
    return StubProcessor


@pytest.fixture
def not_json() -> str:
    return NOT_JSON
