from pagecraft.config import ConfigManager


def test_singleton_and_reset():
    first = ConfigManager()
    assert ConfigManager() is first
    ConfigManager.reset()
    assert ConfigManager() is not first


def test_packaged_sections_present():
    config = ConfigManager()
    editor = config.get_editor_config()
    assert editor["history"]["max_history"] is None
    assert editor["drag"]["palette_fallback_to_root"] is True
    assert editor["pages"]["new_page_base_name"] == "New Page"
    assert "section" in config.get_component_registry()["components"]
    assert config.get_logging_config()["version"] == 1
    assert config.get("unknown") == {}


def test_user_overrides_are_deep_merged(isolated_config):
    (isolated_config / "editor.yml").write_text("history:\n  max_history: 5\n", encoding="utf-8")
    editor = ConfigManager().get_editor_config()
    assert editor["history"]["max_history"] == 5
    assert editor["drag"]["palette_fallback_to_root"] is True


def test_invalid_user_override_is_ignored(isolated_config):
    (isolated_config / "editor.yml").write_text("history: [unclosed\n", encoding="utf-8")
    (isolated_config / "logging.yml").write_text("- just\n- a list\n", encoding="utf-8")
    config = ConfigManager()
    assert config.get_editor_config()["history"]["max_history"] is None
    assert config.get_logging_config()["version"] == 1
