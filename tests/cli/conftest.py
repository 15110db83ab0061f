"""Pytest configuration and fixtures for CLI tests."""

import json

import pytest
from click.testing import CliRunner


@pytest.fixture
def data_file(tmp_path, bookmark_tree, tabs_payload):
    """A JSON snapshot of the sample bookmarks and tabs."""
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps({"bookmarks": bookmark_tree, "tabs": tabs_payload, "history": []})
    )
    return path


@pytest.fixture
def read_tree(data_file):
    """Read the bookmark tree back from the snapshot."""

    def read():
        return json.loads(data_file.read_text())["bookmarks"]

    return read


@pytest.fixture
def cli_runner(data_file):
    """Click CLI test runner bound to the sample snapshot."""

    class MarkSearchCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            """Invoke the CLI with the snapshot as data file."""
            from marksearch.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, ["--data", str(data_file), *args], **kwargs)
            return super().invoke(args, **kwargs)

    return MarkSearchCliRunner()
