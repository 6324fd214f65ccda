"""Test fixtures: sample catalog, oracle, validator, story texts, mock preview server.

All tests should use these fixtures for consistency.
"""

import httpx
import pytest

from showcase.catalog import NameOracle
from showcase.runtime import RuntimeVerifier
from showcase.types import ComponentCategory, ComponentOrigin, ComponentRecord, Dialect
from showcase.validation import StoryValidator


def make_record(name, origin=ComponentOrigin.INSTALLED_PACKAGE, import_path="antd", **kwargs):
    return ComponentRecord(name=name, origin=origin, import_path=import_path, **kwargs)


@pytest.fixture
def records():
    """Four antd components as an installed-package scan would report them."""
    return [
        make_record("Card", category=ComponentCategory.CONTENT, props=["title", "extra"]),
        make_record("Text", category=ComponentCategory.CONTENT),
        make_record("Button", category=ComponentCategory.FORM, props=["type", "onClick"]),
        make_record("Badge", category=ComponentCategory.CONTENT, props=["count"]),
    ]


@pytest.fixture
def oracle(records):
    return NameOracle(records, primary_import_path="antd")


@pytest.fixture
def validator(oracle):
    return StoryValidator(oracle, Dialect.REACT, max_passes=3)


@pytest.fixture
def valid_story():
    """A clean React CSF3 story that uses Card and Text from antd."""
    return (
        "import React from 'react';\n"
        "import type { Meta, StoryObj } from '@storybook/react';\n"
        "import { Card, Text } from 'antd';\n"
        "\n"
        "const meta: Meta<typeof Card> = {\n"
        "  title: 'Generated/Product Card',\n"
        "  component: Card,\n"
        "};\n"
        "export default meta;\n"
        "\n"
        "type Story = StoryObj<typeof Card>;\n"
        "\n"
        "export const Default: Story = {\n"
        "  render: () => (\n"
        "    <Card title=\"Product\">\n"
        "      <Text>Hello</Text>\n"
        "    </Card>\n"
        "  ),\n"
        "};\n"
    )


@pytest.fixture
def dangling_story():
    """A story followed by closing tags that were never opened and a surplus brace."""
    return (
        "import React from 'react';\n"
        "import { Card } from 'antd';\n"
        "\n"
        "export default { title: 'Generated/Card', component: Card };\n"
        "\n"
        "export const Default = {\n"
        "  render: () => <Card>Hi</Card>,\n"
        "};\n"
        "      </div>\n"
        "    </div>\n"
        "  </div>\n"
        "}\n"
    )


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def preview_server():
    """Factory: RuntimeVerifier wired to an in-process mock preview server.

    ``index`` is a list of index.json payloads (or exceptions) served in turn;
    the last one repeats. ``frame`` is the iframe HTML (or an httpx.Response).
    """
    def factory(index, frame="<html><body><div id='root'>ok</div></body></html>", sleep=None, **kwargs):
        served = {"index": 0, "frame": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/index.json":
                item = index[min(served["index"], len(index) - 1)]
                served["index"] += 1
                if isinstance(item, Exception):
                    raise item
                return httpx.Response(200, json=item)
            if request.url.path == "/iframe.html":
                served["frame"] += 1
                if isinstance(frame, Exception):
                    raise frame
                if isinstance(frame, httpx.Response):
                    return frame
                return httpx.Response(200, text=frame)
            return httpx.Response(404)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        options = dict(propagation_delay=3.0, retry_attempts=3, retry_delay=1.0, story_prefix="Generated/")
        options.update(kwargs)
        verifier = RuntimeVerifier(
            "http://preview.test", client=client, sleep=sleep or FakeSleep(), **options,
        )
        return verifier, served

    return factory
