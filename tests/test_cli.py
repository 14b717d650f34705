import json
from unittest.mock import patch

from sitemeta.cli import main
from sitemeta.models import MetadataRecord


@patch("sitemeta.cli.WebsiteParser")
def test_cli_prints_json(mock_parser, capsys):
    resolver = mock_parser.return_value
    resolver.resolve_many.return_value = [MetadataRecord(url="https://example.org", title="Example")]

    assert main(["example.org", "--policy", "api", "--retries", "0"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output == [{"url": "https://example.org", "title": "Example"}]
    args, kwargs = resolver.resolve_many.call_args
    assert args == (["example.org"],)
    assert kwargs["policy"] == "api"
    assert kwargs["retry_budget"] == 0
    assert kwargs["known_site_shortcut"] is None


@patch("sitemeta.cli.WebsiteParser")
def test_cli_writes_output_file(mock_parser, tmp_path):
    resolver = mock_parser.return_value
    resolver.resolve_many.return_value = [MetadataRecord(url="https://github.com", title="GitHub")]
    output_file = tmp_path / "metadata.json"

    assert main(["https://github.com", "-o", str(output_file), "--no-shortcut"]) == 0

    assert json.loads(output_file.read_text(encoding="utf-8"))[0]["title"] == "GitHub"
    assert resolver.resolve_many.call_args[1]["known_site_shortcut"] is False


@patch("sitemeta.cli.WebsiteParser")
def test_cli_exit_code_reports_failures(mock_parser, capsys):
    resolver = mock_parser.return_value
    resolver.resolve_many.return_value = [
        MetadataRecord(url="https://ok.example", title="OK"),
        MetadataRecord(url="https://down.example", title="down.example", icon="🌐", error="All parsing methods failed"),
    ]

    assert main(["ok.example", "down.example"]) == 1
    assert "All parsing methods failed" in capsys.readouterr().out
