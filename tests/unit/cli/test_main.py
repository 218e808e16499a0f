"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner with the client mocked out.
"""

import logging

import pytest
from unittest.mock import MagicMock, patch
from typer.testing import CliRunner

from src.cli.main import app, _configure_logging, _exit_code_for, _read_content
from src.cli.errors import ContentSourceError
from src.cli.models import ExitCode
from src.confluence_rest.errors import (
    APIUnreachableError,
    ConfigurationError,
    ContentNotFoundError,
    HomePageNotFoundError,
    HTTPStatusError,
    InvalidCredentialsError,
    VersionConflictError,
)
from src.confluence_rest.response_handler import OperationResult
from tests.helpers.fake_responses import make_response, page_payload


runner = CliRunner()


@pytest.fixture
def mock_output():
    with patch('src.cli.main.OutputHandler') as mock_output_class:
        yield mock_output_class


@pytest.fixture
def client():
    """Client instance returned by ConfluenceClient.from_env()."""
    with patch('src.cli.main.ConfluenceClient') as mock_client_class:
        instance = MagicMock()
        mock_client_class.from_env.return_value = instance
        yield instance


def resolves_to(operation, result):
    """Make a mocked client operation return a future resolving to result."""
    operation.return_value.result.return_value = result


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    @pytest.mark.parametrize("verbosity,level", [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (3, logging.DEBUG),
    ])
    def test_verbosity_sets_level(self, verbosity, level):
        with patch('logging.getLogger') as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(verbosity)

            mock_get_logger.assert_called_with("src")
            mock_logger.setLevel.assert_called_with(level)

    def test_logdir_creates_log_file(self, tmp_path):
        app_logger = logging.getLogger("src")
        before = list(app_logger.handlers)
        try:
            _configure_logging(1, str(tmp_path / "logs"))
            assert any((tmp_path / "logs").glob("confluence-rest_*.log"))
        finally:
            for handler in app_logger.handlers[len(before):]:
                handler.close()
            app_logger.handlers = before


class TestExitCodes:
    """Test cases for error to exit code mapping."""

    @pytest.mark.parametrize("error,code", [
        (InvalidCredentialsError("u", "https://x"), ExitCode.AUTH_ERROR),
        (ConfigurationError("missing"), ExitCode.AUTH_ERROR),
        (APIUnreachableError("https://x"), ExitCode.NETWORK_ERROR),
        (VersionConflictError("PUT https://x"), ExitCode.CONFLICT),
        (ContentNotFoundError("GET https://x"), ExitCode.NOT_FOUND),
        (HomePageNotFoundError("TEST", "No link."), ExitCode.NOT_FOUND),
        (HTTPStatusError(500, "GET https://x"), ExitCode.GENERAL_ERROR),
    ])
    def test_exit_code_for(self, error, code):
        assert _exit_code_for(error) == code


class TestReadContent:
    """Test cases for _read_content helper."""

    def test_body_option(self):
        assert _read_content("<p>x</p>", None) == "<p>x</p>"

    def test_file_option(self, tmp_path):
        source = tmp_path / "page.xhtml"
        source.write_text("<p>from file</p>", encoding="utf-8")
        assert _read_content(None, str(source)) == "<p>from file</p>"

    def test_both_rejected(self):
        with pytest.raises(ContentSourceError, match="not both"):
            _read_content("<p>x</p>", "page.xhtml")

    def test_neither_rejected(self):
        with pytest.raises(ContentSourceError, match="required"):
            _read_content(None, None)

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(ContentSourceError) as exc_info:
            _read_content(None, str(tmp_path / "missing.xhtml"))
        assert exc_info.value.file_path.endswith("missing.xhtml")


class TestCommands:
    """Test cases for CLI commands."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "Usage" in result.output

    def test_space_prints_result(self, client, mock_output):
        payload = {"results": [{"key": "TEST"}]}
        resolves_to(client.get_space, OperationResult.success(payload))

        result = runner.invoke(app, ["space", "TEST"])

        assert result.exit_code == ExitCode.SUCCESS
        client.get_space.assert_called_once_with("TEST")
        mock_output.return_value.print_result.assert_called_once_with(payload)

    def test_missing_credentials(self, mock_output):
        with patch('src.cli.main.ConfluenceClient') as mock_client_class:
            mock_client_class.from_env.side_effect = InvalidCredentialsError("unknown", "unknown")

            result = runner.invoke(app, ["space", "TEST"])

        assert result.exit_code == ExitCode.AUTH_ERROR
        mock_output.return_value.error.assert_called_once()

    def test_env_file_and_verbosity_passed_through(self, client, mock_output):
        resolves_to(client.get_labels, OperationResult.success({"results": []}))

        with patch('src.cli.main.ConfluenceClient') as mock_client_class:
            mock_client_class.from_env.return_value = client
            result = runner.invoke(app, ["-v", "1", "--no-color", "--env-file", ".env.test", "labels", "999"])
            mock_client_class.from_env.assert_called_once_with(".env.test")

        assert result.exit_code == ExitCode.SUCCESS
        mock_output.assert_called_once_with(verbosity=1, no_color=True)

    def test_home_page_not_found(self, client, mock_output):
        error = HomePageNotFoundError("TEST", "Space has no home page link.")
        resolves_to(client.get_space_home_page, OperationResult.failure(error))

        result = runner.invoke(app, ["home-page", "TEST"])

        assert result.exit_code == ExitCode.NOT_FOUND
        mock_output.return_value.error.assert_called_once_with(str(error))

    def test_network_failure(self, client, mock_output):
        resolves_to(client.get_content_by_id, OperationResult.failure(APIUnreachableError("https://x")))

        result = runner.invoke(app, ["get", "123"])

        assert result.exit_code == ExitCode.NETWORK_ERROR

    def test_get_with_expand_uses_custom_content(self, client, mock_output):
        resolves_to(client.get_custom_content_by_id, OperationResult.success(page_payload()))

        result = runner.invoke(app, ["get", "123", "--expand", "metadata"])

        assert result.exit_code == ExitCode.SUCCESS
        content_id, expanders = client.get_custom_content_by_id.call_args.args
        assert content_id == "123"
        assert list(expanders) == ["metadata"]
        client.get_content_by_id.assert_not_called()

    def test_get_by_title(self, client, mock_output):
        resolves_to(client.get_content_by_page_title, OperationResult.success({"results": []}))

        result = runner.invoke(app, ["get-by-title", "TEST", "Release Notes"])

        assert result.exit_code == ExitCode.SUCCESS
        client.get_content_by_page_title.assert_called_once_with("TEST", "Release Notes")

    def test_create_with_body_and_parent(self, client, mock_output):
        resolves_to(client.post_content, OperationResult.success(page_payload("999")))

        result = runner.invoke(app, ["create", "TEST", "T1", "--body", "<p>x</p>", "--parent", "42"])

        assert result.exit_code == ExitCode.SUCCESS
        client.post_content.assert_called_once_with("TEST", "T1", "<p>x</p>", "42", "storage")

    def test_create_from_file_under_home_page(self, client, mock_output, tmp_path):
        source = tmp_path / "page.xhtml"
        source.write_text("<p>file</p>", encoding="utf-8")
        resolves_to(client.post_content, OperationResult.success(page_payload("999")))

        result = runner.invoke(app, ["create", "TEST", "T1", "--file", str(source)])

        assert result.exit_code == ExitCode.SUCCESS
        client.post_content.assert_called_once_with("TEST", "T1", "<p>file</p>", None, "storage")

    def test_create_without_content(self, client, mock_output):
        result = runner.invoke(app, ["create", "TEST", "T1"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        client.post_content.assert_not_called()

    def test_update(self, client, mock_output):
        resolves_to(client.put_content, OperationResult.success(page_payload("999", version=3)))

        result = runner.invoke(app, ["update", "TEST", "999", "3", "Title", "--body", "<p>y</p>", "--minor-edit"])

        assert result.exit_code == ExitCode.SUCCESS
        client.put_content.assert_called_once_with("TEST", "999", 3, "Title", "<p>y</p>", True, "storage")

    def test_update_conflict(self, client, mock_output):
        resolves_to(client.put_content, OperationResult.failure(VersionConflictError("PUT https://x")))

        result = runner.invoke(app, ["update", "TEST", "999", "2", "Title", "--body", "<p>y</p>"])

        assert result.exit_code == ExitCode.CONFLICT

    def test_delete_prints_status(self, client, mock_output):
        response = make_response(204)
        resolves_to(client.delete_content, OperationResult.success(response))

        result = runner.invoke(app, ["delete", "999"])

        assert result.exit_code == ExitCode.SUCCESS
        mock_output.return_value.print_result.assert_called_once_with(response)

    def test_attachments(self, client, mock_output):
        resolves_to(client.get_attachments, OperationResult.success({"results": []}))

        result = runner.invoke(app, ["attachments", "TEST", "999"])

        assert result.exit_code == ExitCode.SUCCESS
        client.get_attachments.assert_called_once_with("TEST", "999")

    def test_attach(self, client, mock_output):
        resolves_to(client.create_attachment, OperationResult.success({"results": []}))

        result = runner.invoke(app, ["attach", "TEST", "999", "diagram.png"])

        assert result.exit_code == ExitCode.SUCCESS
        client.create_attachment.assert_called_once_with("TEST", "999", "diagram.png")

    def test_update_attachment(self, client, mock_output):
        resolves_to(client.update_attachment_data, OperationResult.success({"id": "att1"}))

        result = runner.invoke(app, ["update-attachment", "TEST", "999", "att1", "diagram.png"])

        assert result.exit_code == ExitCode.SUCCESS
        client.update_attachment_data.assert_called_once_with("TEST", "999", "att1", "diagram.png")

    def test_add_labels(self, client, mock_output):
        resolves_to(client.post_labels, OperationResult.success({"results": []}))

        result = runner.invoke(app, ["add-labels", "999", "docs", "todo"])

        assert result.exit_code == ExitCode.SUCCESS
        content_id, labels = client.post_labels.call_args.args
        assert content_id == "999"
        assert list(labels) == ["docs", "todo"]

    def test_delete_label(self, client, mock_output):
        resolves_to(client.delete_label, OperationResult.success(make_response(204)))

        result = runner.invoke(app, ["delete-label", "999", "docs"])

        assert result.exit_code == ExitCode.SUCCESS
        client.delete_label.assert_called_once_with("999", "docs")

    def test_search(self, client, mock_output):
        resolves_to(client.search, OperationResult.success({"results": []}))

        result = runner.invoke(app, ["search", "cql=type=page&limit=10"])

        assert result.exit_code == ExitCode.SUCCESS
        client.search.assert_called_once_with("cql=type=page&limit=10")
