import logging

import pytest

from smart_collection import (
    Collection,
    CollectionConfig,
    ConfigNamespace,
    ConfigurationError,
    load_collection_config,
    load_config_mapping,
)


def test_load_config_mapping_base_only(tmp_path):
    path = tmp_path / "collection.yaml"
    path.write_text("collection:\n  name: todo\n", encoding="utf-8")

    cfg, meta = load_config_mapping(path)

    assert cfg == {"collection": {"name": "todo"}}
    assert meta["mode"] == "base"
    assert len(meta["paths"]) == 1


def test_load_config_mapping_merges_local_overlay(tmp_path):
    (tmp_path / "collection.yaml").write_text(
        "collection:\n  name: todo\n  features: [filter]\n", encoding="utf-8"
    )
    (tmp_path / "collection.local.yaml").write_text(
        "collection:\n  features: [pluck, size]\n  log_level: DEBUG\n", encoding="utf-8"
    )

    cfg, meta = load_config_mapping(tmp_path / "collection.yaml")

    assert cfg == {
        "collection": {"name": "todo", "features": ["pluck", "size"], "log_level": "DEBUG"}
    }
    assert meta["mode"] == "base+local"

    cfg_no_overlay, _ = load_config_mapping(tmp_path / "collection.yaml", local_overlay=False)
    assert cfg_no_overlay["collection"]["features"] == ["filter"]


def test_load_config_mapping_rejects_invalid_yaml_and_non_mappings(tmp_path):
    broken = tmp_path / "broken.yaml"
    broken.write_text("collection: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match=r"Invalid YAML"):
        load_config_mapping(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match=r"must contain a YAML mapping"):
        load_config_mapping(listing)


def test_overlay_type_mismatch_raises(tmp_path):
    (tmp_path / "c.yaml").write_text("collection:\n  name: a\n", encoding="utf-8")
    (tmp_path / "c.local.yaml").write_text("collection: [1]\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match=r"Invalid config overlay merge at collection"):
        load_config_mapping(tmp_path / "c.yaml")


def test_collection_config_defaults_and_parsing():
    assert CollectionConfig.from_dict({}) == CollectionConfig()

    cfg = CollectionConfig.from_dict(
        {"collection": {"name": " todo ", "features": "filter", "all_features": False}}
    )
    assert cfg.name == "todo"
    assert cfg.features == ("filter",)
    assert cfg.log_level_value == logging.WARNING


def test_collection_config_is_strict():
    with pytest.raises(ConfigurationError, match=r"Unknown config keys under collection: featurez"):
        CollectionConfig.from_dict({"collection": {"featurez": ["filter"]}})
    with pytest.raises(ConfigurationError, match=r"Unknown config keys under <root>: extra"):
        CollectionConfig.from_dict({"collection": {}, "extra": 1})
    with pytest.raises(ConfigurationError, match=r"collection.all_features must be a boolean"):
        CollectionConfig.from_dict({"collection": {"all_features": "yes"}})
    with pytest.raises(ConfigurationError, match=r"collection.log_level must be one of"):
        CollectionConfig.from_dict({"collection": {"log_level": "LOUD"}})
    with pytest.raises(ConfigurationError, match=r"collection.features\[1\] must be a string"):
        CollectionConfig.from_dict({"collection": {"features": ["filter", 3]}})
    with pytest.raises(ConfigurationError, match=r"Config must be a mapping"):
        CollectionConfig.from_dict(["collection"])


def test_load_collection_config_from_env_var(tmp_path, monkeypatch):
    path = tmp_path / "collection.yaml"
    path.write_text("collection:\n  name: from-env\n  all_features: true\n", encoding="utf-8")
    monkeypatch.setenv("TEST_SMART_COLLECTION_CONFIG", str(path))

    cfg = load_collection_config(env_var="TEST_SMART_COLLECTION_CONFIG")

    assert cfg.name == "from-env"
    assert cfg.all_features is True


def test_load_collection_config_without_path_or_env_fails(monkeypatch):
    monkeypatch.delenv("TEST_SMART_COLLECTION_CONFIG", raising=False)
    with pytest.raises(ConfigurationError, match=r"TEST_SMART_COLLECTION_CONFIG is not set"):
        load_collection_config(env_var="TEST_SMART_COLLECTION_CONFIG")


def test_collection_from_config_registers_features_and_logger_level(tmp_path):
    path = tmp_path / "collection.yaml"
    path.write_text(
        "collection:\n  name: people\n  features: [pluck, size]\n  log_level: DEBUG\n",
        encoding="utf-8",
    )

    coll = Collection.from_config(load_collection_config(path))
    coll.add([{"name": "Sam"}, {"name": "Pat"}])

    assert coll.name == "people"
    assert coll.pluck("name") == ["Sam", "Pat"]
    assert coll.size() == 2
    assert coll.logger.name == "smart_collection.collection.people"
    assert coll.logger.level == logging.DEBUG


def test_config_namespace_tracks_consumed_keys():
    ns = ConfigNamespace({"known": True, "typo": 1}, path="collection")
    assert ns.get_bool("known") is True
    assert ns.unconsumed_keys() == ("typo",)
    with pytest.raises(ConfigurationError, match=r"Unknown config keys under collection: typo \(consumed: known\)"):
        ns.assert_consumed()

    with pytest.raises(ConfigurationError, match=r"Missing required config key: collection.name"):
        ConfigNamespace({}, path="collection").get_str("name")
    with pytest.raises(ConfigurationError, match=r"Missing required config namespace: collection"):
        ConfigNamespace({}, path="").namespace("collection")
