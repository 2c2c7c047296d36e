from __future__ import annotations

from pathlib import Path
from unittest import mock

import pytest
import yaml

from autolinker.engine import ConfigurationError, Keyword, KeywordLinkProcessor, ProcessingConfig
from autolinker.engine import loader as loader_module
from autolinker.engine.config import load_keyword_file
from autolinker.engine.loader import KeywordConfiguration

from .conftest import FakeRepository, write_keyword_file

WIDGETS = {
    "caseSensitive": False,
    "wholeWordsOnly": True,
    "replacements": [
        {"link": "https://one.example", "keywords": ["Widget"]},
    ],
}


@pytest.fixture()
def keyword_file(tmp_path) -> Path:
    return write_keyword_file(tmp_path / "keyword_links.yaml", WIDGETS)


def test_load_keyword_file_reads_entries(tmp_path):
    path = write_keyword_file(
        tmp_path / "links.yaml",
        {
            "caseSensitive": True,
            "wholeWordsOnly": False,
            "excludeTags": ["NAV", "a"],
            "replacements": [
                {
                    "link": "https://test.com",
                    "keywords": ["Java", "JVM"],
                    "attributes": {"class": "external", "target": "_blank"},
                },
            ],
        },
    )

    parsed = load_keyword_file(path)

    assert parsed.case_sensitive is True
    assert parsed.whole_words_only is False
    assert parsed.excluded_tags == ["nav", "a"]
    assert parsed.keywords == [
        Keyword.create("https://test.com", ["Java", "JVM"], {"class": "external", "target": "_blank"}),
    ]


def test_missing_fields_fall_back_to_defaults(tmp_path):
    path = write_keyword_file(tmp_path / "links.yaml", "replacements: []\n")

    parsed = load_keyword_file(path)

    assert parsed.case_sensitive is True
    assert parsed.whole_words_only is True
    assert set(parsed.excluded_tags) == {"a", "script", "style", "code", "pre"}
    assert parsed.keywords == []


def test_empty_file_is_an_empty_configuration(tmp_path):
    path = write_keyword_file(tmp_path / "links.yaml", "")

    assert load_keyword_file(path).keywords == []


def test_malformed_yaml_raises_configuration_error(tmp_path):
    path = write_keyword_file(tmp_path / "links.yaml", "replacements: [\n  - link: x\n")

    with pytest.raises(ConfigurationError) as excinfo:
        load_keyword_file(path)

    assert excinfo.value.path == path
    assert isinstance(excinfo.value.__cause__, yaml.YAMLError)


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "caseSensitive: maybe\n",
        "excludeTags: code\n",
        "replacements: nope\n",
        "replacements:\n  - keywords: [Widget]\n",
        "replacements:\n  - link: /x\n    keywords: Widget\n",
        "replacements:\n  - link: /x\n    keywords: [Widget]\n    attributes: [rel]\n",
        "replacements:\n  - just a string\n",
    ],
)
def test_structural_errors_raise_configuration_error(tmp_path, content):
    path = write_keyword_file(tmp_path / "links.yaml", content)

    with pytest.raises(ConfigurationError) as excinfo:
        load_keyword_file(path)

    assert excinfo.value.path == path


def test_update_is_not_necessary_without_a_file(tmp_path):
    configuration = KeywordConfiguration(tmp_path / "missing.yaml", lambda keyword: None, ProcessingConfig())

    assert configuration.is_update_necessary() is False
    assert configuration.update() == 0


def test_update_tracks_modification_time(keyword_file):
    received = []
    configuration = KeywordConfiguration(keyword_file, received.append, ProcessingConfig())

    assert configuration.is_update_necessary() is True
    assert configuration.update() == 1
    assert configuration.is_update_necessary() is False

    write_keyword_file(keyword_file, WIDGETS, bump=10)

    assert configuration.is_update_necessary() is True
    assert [keyword.url for keyword in received] == ["https://one.example"]


def test_stat_failures_are_not_treated_as_changes(keyword_file):
    configuration = KeywordConfiguration(keyword_file, lambda keyword: None, ProcessingConfig())

    with mock.patch.object(type(keyword_file), "stat", side_effect=PermissionError("denied")):
        assert configuration.is_update_necessary() is False


def test_update_applies_file_options(tmp_path):
    path = write_keyword_file(
        tmp_path / "links.yaml",
        {"caseSensitive": True, "wholeWordsOnly": False, "excludeTags": ["nav"]},
    )
    config = ProcessingConfig()
    configuration = KeywordConfiguration(path, lambda keyword: None, config)

    configuration.update()

    assert config.case_sensitive is True
    assert config.whole_words_only is False
    assert config.excluded_tags == {"nav"}
    assert config.version == 1


def test_repository_declarations_are_validated():
    received = []
    repository = FakeRepository(
        [
            ("/pages/widgets/", ["Widget", "widgets"]),
            ("/pages/broken/", "Gizmo"),
            ("/pages/mixed/", ["ok", 3]),
            ("/pages/empty/", None),
            ("/pages/tuple/", ("Gadget",)),
        ]
    )
    configuration = KeywordConfiguration(None, received.append, ProcessingConfig(), repository=repository)

    with mock.patch.object(loader_module.logger, "warning") as warning:
        count = configuration.update()

    assert count == 2
    assert received == [
        Keyword.create("/pages/widgets/", ["Widget", "widgets"]),
        Keyword.create("/pages/tuple/", ["Gadget"]),
    ]
    assert warning.call_count == 3


def test_processor_loads_sources_on_first_use(keyword_file):
    repository = FakeRepository([("/pages/gadgets/", ["Gadget"])])
    processor = KeywordLinkProcessor(config_file=keyword_file, repository=repository)

    result = processor.process("<p>Widget and Gadget</p>")

    assert result == (
        '<p><a href="https://one.example">Widget</a> and '
        '<a href="/pages/gadgets/">Gadget</a></p>'
    )


def test_processor_reloads_a_changed_file(keyword_file):
    processor = KeywordLinkProcessor(config_file=keyword_file)
    assert "one.example" in processor.process("<p>Widget</p>")

    changed = dict(WIDGETS, replacements=[{"link": "https://two.example", "keywords": ["Widget"]}])
    write_keyword_file(keyword_file, changed, bump=10)

    assert processor.process("<p>Widget</p>") == '<p><a href="https://two.example">Widget</a></p>'


def test_processor_picks_up_a_file_created_later(tmp_path):
    path = tmp_path / "keyword_links.yaml"
    processor = KeywordLinkProcessor(config_file=path, repository=FakeRepository())
    assert processor.process("<p>Widget</p>") == "<p>Widget</p>"

    write_keyword_file(path, WIDGETS)

    assert processor.process("<p>Widget</p>") == '<p><a href="https://one.example">Widget</a></p>'


def test_file_options_apply_to_processing(tmp_path):
    path = write_keyword_file(
        tmp_path / "links.yaml",
        {
            "caseSensitive": True,
            "excludeTags": ["nav", "a"],
            "replacements": [{"link": "https://a.example", "keywords": ["Widget"]}],
        },
    )
    processor = KeywordLinkProcessor(config_file=path)

    result = processor.process("<nav>Widget</nav><p>Widget widget</p>")

    assert result == '<nav>Widget</nav><p><a href="https://a.example">Widget</a> widget</p>'


def test_mark_stale_rereads_the_repository():
    repository = FakeRepository()
    processor = KeywordLinkProcessor(repository=repository)
    assert processor.process("<p>Widget</p>") == "<p>Widget</p>"

    repository.declarations.append(("/pages/widgets/", ["Widget"]))
    assert processor.process("<p>Widget</p>") == "<p>Widget</p>"

    processor.mark_stale()

    assert processor.process("<p>Widget</p>") == '<p><a href="/pages/widgets/">Widget</a></p>'


def test_invalid_file_leaves_the_store_empty(keyword_file):
    processor = KeywordLinkProcessor(config_file=keyword_file)
    processor.process("<p>Widget</p>")
    assert processor.keyword_count == 1

    write_keyword_file(keyword_file, "replacements: [\n", bump=10)

    with pytest.raises(ConfigurationError):
        processor.process("<p>Widget</p>")
    assert processor.keyword_count == 0
    assert processor.is_stale() is True


def test_refresh_without_sources_does_nothing(processor):
    processor.add_keywords("https://a.example", "Widget")

    assert processor.refresh() is False
    assert processor.keyword_count == 1


def test_refresh_only_when_stale_unless_forced(keyword_file):
    processor = KeywordLinkProcessor(config_file=keyword_file)

    assert processor.refresh(force=False) is True
    assert processor.refresh(force=False) is False
    assert processor.refresh() is True
