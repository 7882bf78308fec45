from multichat.config import AppConfig, LLMConfig, _split_models


def test_model_list_parsing_skips_blanks():
    assert _split_models("gpt-4, ,gpt-3.5-turbo,") == ["gpt-4", "gpt-3.5-turbo"]


def test_default_model_falls_back_when_list_is_empty():
    assert LLMConfig(models=[]).default_model == "gpt-3.5-turbo"
    assert LLMConfig(models=["gpt-4"]).default_model == "gpt-4"


def test_app_config_bundles_sections():
    cfg = AppConfig()
    assert isinstance(cfg.llm.temperature, float)
    assert cfg.storage.database_path
