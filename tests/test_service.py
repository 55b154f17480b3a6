import logging

import pytest

from autoi18n.service import MISSING_TRANSLATION, TranslateService

from conftest import FakeProvider, make_config, read_json, write_json


@pytest.mark.asyncio
async def test_fills_missing_key_in_single_file_mode(tmp_path):
    write_json(tmp_path / "en.json", {"Title": "Hello"})
    write_json(tmp_path / "fr.json", {})
    provider = FakeProvider(answers={("Hello", "fr"): "Bonjour"})

    report = await TranslateService(make_config(tmp_path, tmp_path / "en.json"), provider).run()

    assert provider.calls == [("Hello", "fr")]
    assert read_json(tmp_path / "fr.json") == {"Title": "Bonjour"}
    assert report.files_written == 1
    assert report.strings_translated == 1


@pytest.mark.asyncio
async def test_existing_translations_are_preserved(tmp_path):
    write_json(tmp_path / "en.json", {"Title": "Hello", "Nested": {"Sub": "World"}})
    write_json(tmp_path / "fr.json", {"Title": "Bonjour"})
    provider = FakeProvider()

    await TranslateService(make_config(tmp_path, tmp_path / "en.json"), provider).run()

    assert provider.calls == [("World", "fr")]
    assert read_json(tmp_path / "fr.json") == {"Title": "Bonjour", "Nested": {"Sub": "fr:World"}}


@pytest.mark.asyncio
async def test_deeply_nested_content_is_written(tmp_path):
    base = {"a": {"b": {"c": "Deep", "d": "Keep"}}, "n": 5}
    write_json(tmp_path / "en.json", base)
    write_json(tmp_path / "de.json", {"a": {"b": {"d": "Behalten"}}})

    await TranslateService(make_config(tmp_path, tmp_path / "en.json"), FakeProvider()).run()

    assert read_json(tmp_path / "de.json") == {"a": {"b": {"c": "de:Deep", "d": "Behalten"}}, "n": 5}


@pytest.mark.asyncio
async def test_second_run_is_a_no_op(tmp_path):
    write_json(tmp_path / "en.json", {"Title": "Hello", "Nested": {"Sub": "World"}})
    write_json(tmp_path / "fr.json", {})
    config = make_config(tmp_path, tmp_path / "en.json")

    await TranslateService(config, FakeProvider()).run()
    first = read_json(tmp_path / "fr.json")
    provider = FakeProvider()
    report = await TranslateService(config, provider).run()

    assert provider.calls == []
    assert report.files_written == 0
    assert read_json(tmp_path / "fr.json") == first


@pytest.mark.asyncio
async def test_directory_mode_creates_missing_folders_and_files(tmp_path):
    root = tmp_path / "i18n"
    write_json(root / "en" / "common.json", {"Ok": "OK"})
    write_json(root / "en" / "settings.json", {"Save": "Save"})
    write_json(root / "fr" / "common.json", {"Ok": "D'accord"})
    config = make_config(tmp_path, root / "en", languages=("fr", "es"))
    provider = FakeProvider()

    await TranslateService(config, provider).run()

    assert read_json(root / "fr" / "common.json") == {"Ok": "D'accord"}
    assert read_json(root / "fr" / "settings.json") == {"Save": "fr:Save"}
    assert read_json(root / "es" / "common.json") == {"Ok": "es:OK"}
    assert read_json(root / "es" / "settings.json") == {"Save": "es:Save"}
    assert sorted(provider.calls) == [("OK", "es"), ("Save", "es"), ("Save", "fr")]


@pytest.mark.asyncio
async def test_languages_default_to_those_on_disk(tmp_path):
    write_json(tmp_path / "en.json", {"Hi": "Hi there"})
    write_json(tmp_path / "it.json", {})
    write_json(tmp_path / "nl.json", {})
    provider = FakeProvider()

    await TranslateService(make_config(tmp_path, tmp_path / "en.json"), provider).run()

    assert sorted(provider.calls) == [("Hi there", "it"), ("Hi there", "nl")]
    assert read_json(tmp_path / "en.json") == {"Hi": "Hi there"}


@pytest.mark.asyncio
async def test_over_length_strings_never_reach_the_provider(tmp_path):
    long_text = "x" * 250
    write_json(tmp_path / "en.json", {"Long": long_text, "Short": "Hi"})
    write_json(tmp_path / "fr.json", {})
    provider = FakeProvider()
    config = make_config(tmp_path, tmp_path / "en.json", max_length=200)

    report = await TranslateService(config, provider).run()

    assert provider.calls == [("Hi", "fr")]
    assert read_json(tmp_path / "fr.json") == {"Long": MISSING_TRANSLATION, "Short": "fr:Hi"}
    assert report.strings_too_long == 1


@pytest.mark.asyncio
async def test_over_length_flag_follows_retranslate(tmp_path, provider):
    tree = {"Long": "x" * 250}
    for retranslate in (True, False):
        config = make_config(tmp_path, max_length=200, retranslate=retranslate)
        result = await TranslateService(config, provider).get_translations(tree, "fr")
        assert result.content == {"Long": MISSING_TRANSLATION}
        assert result.translated is retranslate
    assert provider.calls == []


@pytest.mark.asyncio
async def test_nested_results_keep_their_content(tmp_path, provider):
    config = make_config(tmp_path)
    result = await TranslateService(config, provider).get_translations(
        {"a": {"b": "Deep"}, "flag": True}, "fr"
    )
    assert result.content == {"a": {"b": "fr:Deep"}, "flag": True}
    assert result.translated


@pytest.mark.asyncio
async def test_marker_is_not_retried_without_retranslate(tmp_path):
    write_json(tmp_path / "en.json", {"Long": "x" * 50})
    write_json(tmp_path / "fr.json", {"Long": MISSING_TRANSLATION})
    provider = FakeProvider()

    await TranslateService(make_config(tmp_path, tmp_path / "en.json"), provider).run()

    assert provider.calls == []
    assert read_json(tmp_path / "fr.json") == {"Long": MISSING_TRANSLATION}


@pytest.mark.asyncio
async def test_marker_is_retried_with_retranslate(tmp_path):
    write_json(tmp_path / "en.json", {"Long": "x" * 50})
    write_json(tmp_path / "fr.json", {"Long": MISSING_TRANSLATION})
    provider = FakeProvider()
    config = make_config(tmp_path, tmp_path / "en.json", retranslate=True)

    await TranslateService(config, provider).run()

    assert provider.calls == [("x" * 50, "fr")]
    assert read_json(tmp_path / "fr.json") == {"Long": "fr:" + "x" * 50}


@pytest.mark.asyncio
async def test_provider_failure_only_affects_one_file(tmp_path, caplog):
    write_json(tmp_path / "en.json", {"Title": "Hello"})
    write_json(tmp_path / "fr.json", {"Other": "Autre"})
    write_json(tmp_path / "de.json", {})
    provider = FakeProvider(fail_on=lambda text, lang: lang == "fr")

    with caplog.at_level(logging.ERROR, logger="autoi18n"):
        report = await TranslateService(make_config(tmp_path, tmp_path / "en.json"), provider).run()

    assert read_json(tmp_path / "fr.json") == {"Other": "Autre"}
    assert read_json(tmp_path / "de.json") == {"Title": "de:Hello"}
    assert report.failures == 1
    assert "provider down for fr" in caplog.text


@pytest.mark.asyncio
async def test_bad_reference_does_not_stop_the_others(tmp_path):
    write_json(tmp_path / "ok" / "en.json", {"Title": "Hello"})
    write_json(tmp_path / "ok" / "fr.json", {})
    config = make_config(tmp_path, tmp_path / "missing" / "en", tmp_path / "ok" / "en.json")

    report = await TranslateService(config, FakeProvider()).run()

    assert report.skipped_references == [tmp_path / "missing" / "en"]
    assert read_json(tmp_path / "ok" / "fr.json") == {"Title": "fr:Hello"}


@pytest.mark.asyncio
async def test_invalid_target_json_is_left_alone(tmp_path):
    write_json(tmp_path / "en.json", {"Title": "Hello"})
    (tmp_path / "fr.json").write_text("{not json", encoding="utf-8")

    report = await TranslateService(make_config(tmp_path, tmp_path / "en.json"), FakeProvider()).run()

    assert (tmp_path / "fr.json").read_text(encoding="utf-8") == "{not json"
    assert report.failures == 1


@pytest.mark.asyncio
async def test_dry_run_writes_nothing(tmp_path):
    root = tmp_path / "i18n"
    write_json(root / "en" / "common.json", {"Ok": "OK"})
    config = make_config(tmp_path, root / "en", languages=("fr",), dry_run=True)
    provider = FakeProvider()

    report = await TranslateService(config, provider).run()

    assert not (root / "fr").exists()
    assert provider.calls == [("OK", "fr")]
    assert report.files_written == 0


@pytest.mark.asyncio
async def test_injected_logger_receives_messages(tmp_path, caplog):
    write_json(tmp_path / "en.json", {"Title": "Hello"})
    write_json(tmp_path / "fr.json", {})
    logger = logging.getLogger("custom.translate")

    with caplog.at_level(logging.INFO, logger="custom.translate"):
        await TranslateService(make_config(tmp_path, tmp_path / "en.json"), FakeProvider(), logger).run()

    assert 'Translating "Hello" to fr' in caplog.text


@pytest.mark.asyncio
async def test_empty_target_values_are_filled(tmp_path):
    write_json(tmp_path / "en.json", {"Title": "Hello", "Sub": {"Body": "Text"}})
    write_json(tmp_path / "fr.json", {"Title": "", "Sub": {"Body": None}})
    config = make_config(tmp_path, tmp_path / "en.json")

    await TranslateService(config, FakeProvider()).run()
    assert read_json(tmp_path / "fr.json") == {"Title": "fr:Hello", "Sub": {"Body": "fr:Text"}}

    provider = FakeProvider()
    report = await TranslateService(config, provider).run()
    assert provider.calls == []
    assert report.files_written == 0


@pytest.mark.parametrize("content", [
    b'{"Title": "\xff\xfe"}',
    b'{"Title": ',
    b'["not", "an", "object"]',
])
@pytest.mark.asyncio
async def test_broken_base_file_does_not_stop_other_references(tmp_path, content):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "en.json").write_bytes(content)
    write_json(tmp_path / "a" / "fr.json", {})
    write_json(tmp_path / "b" / "en.json", {"Title": "Hello"})
    write_json(tmp_path / "b" / "fr.json", {})
    config = make_config(tmp_path, tmp_path / "a" / "en.json", tmp_path / "b" / "en.json")

    report = await TranslateService(config, FakeProvider()).run()

    assert read_json(tmp_path / "b" / "fr.json") == {"Title": "fr:Hello"}
    assert read_json(tmp_path / "a" / "fr.json") == {}
    assert report.failures == 1


@pytest.mark.asyncio
async def test_non_utf8_target_is_left_alone(tmp_path):
    write_json(tmp_path / "en.json", {"Title": "Hello"})
    (tmp_path / "fr.json").write_bytes(b'{"Title": "\xff"}')
    write_json(tmp_path / "de.json", {})

    report = await TranslateService(make_config(tmp_path, tmp_path / "en.json"), FakeProvider()).run()

    assert (tmp_path / "fr.json").read_bytes() == b'{"Title": "\xff"}'
    assert read_json(tmp_path / "de.json") == {"Title": "de:Hello"}
    assert report.failures == 1


@pytest.mark.asyncio
async def test_report_only_counts_strings_that_were_written(tmp_path):
    write_json(tmp_path / "en.json", {"A": "First", "B": "Second", "C": "x" * 250})
    write_json(tmp_path / "fr.json", {})
    write_json(tmp_path / "de.json", {})
    provider = FakeProvider(fail_on=lambda text, lang: lang == "fr" and text == "Second")
    config = make_config(tmp_path, tmp_path / "en.json", max_length=200)

    report = await TranslateService(config, provider).run()

    assert read_json(tmp_path / "fr.json") == {}
    assert report.files_written == 1
    assert report.strings_translated == 2
    assert report.strings_too_long == 1
    assert report.failures == 1
