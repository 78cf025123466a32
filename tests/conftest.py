"""Shared fixtures for mflx tests."""

import json
import logging

import httpx
import pytest

from mflx.cache import clear_memory_cache
from mflx.client import MFLClient
from mflx.schemas import ClientConfig


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture(autouse=True)
def reset_memory_cache():
    """Every test starts and ends with an empty memory tier."""
    clear_memory_cache()
    yield
    clear_memory_cache()


@pytest.fixture(autouse=True)
def restore_mflx_logger():
    """Undo handlers and levels attached by setup_logging."""
    loggers = [logging.getLogger(name) for name in ('mflx', 'httpx', 'httpcore')]
    saved = [(logger.handlers[:], logger.level) for logger in loggers]
    yield
    for logger, (handlers, level) in zip(loggers, saved):
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)


@pytest.fixture
def config():
    return ClientConfig(year=2025)


@pytest.fixture
def make_client(config):
    """Build an MFLClient whose requests are answered by a handler function."""
    def _make(handler, session=None):
        return MFLClient(config=config, session=session, transport=httpx.MockTransport(handler))

    return _make


def json_response(payload, status_code=200):
    return httpx.Response(status_code, json=payload)


def xml_response(text, status_code=200):
    return httpx.Response(status_code, text=text, headers={'Content-Type': 'text/xml; charset=utf-8'})


def write_envelope(path, data, last_updated=1_735_689_600, **metadata):
    """Write a cache file in the envelope format."""
    envelope = {
        'metadata': {'lastUpdated': last_updated, 'version': '1.0.0', 'source': 'test', **metadata},
        'data': data,
    }
    path.write_text(json.dumps(envelope, indent=2), encoding='utf-8')
    return path


def redirect_to_self(request):
    """Answer every request with a redirect back to itself."""
    return httpx.Response(302, headers={'Location': str(request.url)})


def corrupt_gzip_response(content_type='application/json'):
    """A 200 whose body claims gzip encoding but is not compressed."""
    return httpx.Response(
        200,
        headers={'Content-Type': content_type, 'Content-Encoding': 'gzip'},
        stream=httpx.ByteStream(b'not gzip'),
    )
