import json

import numpy as np
import pytest

from annealnet.config import config_hash, load_config_file, merge
from annealnet.data import available_batches, get_batch, make_batch


def test_config_hash_is_order_independent():
    a = {"train": {"seed": 1, "iterations": 5}, "data": {"name": "xor"}}
    b = {"data": {"name": "xor"}, "train": {"iterations": 5, "seed": 1}}
    assert config_hash(a) == config_hash(b)
    assert len(config_hash(a)) == 12
    b["train"]["seed"] = 2
    assert config_hash(a) != config_hash(b)


def test_merge_is_recursive():
    base = {"train": {"seed": 1, "iterations": 5}, "data": {"name": "xor"}}
    merged = merge(base, {"train": {"seed": 9}})
    assert merged["train"] == {"seed": 9, "iterations": 5}
    assert merged["data"] == {"name": "xor"}


def test_load_config_file_formats(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"train": {"seed": 3}}))
    assert load_config_file(path) == {"train": {"seed": 3}}

    with pytest.raises(ValueError):
        load_config_file(tmp_path / "cfg.toml")

    pytest.importorskip("yaml")
    yaml_path = tmp_path / "cfg.yaml"
    yaml_path.write_text("train:\n  seed: 4\n")
    assert load_config_file(yaml_path) == {"train": {"seed": 4}}


def test_registered_truth_tables():
    assert {"and", "and-not", "or", "xor"} <= set(available_batches())
    spec = get_batch("and-not")
    assert spec.d_in == 2 and spec.d_out == 1
    assert np.array_equal(spec.batch.inputs, [[1, 0], [0, 1], [0, 1], [1, 1]])
    assert np.array_equal(spec.batch.targets, [[1], [0], [0], [0]])
    assert len(spec.batch) == 4


def test_make_batch_validates_shapes():
    with pytest.raises(ValueError):
        make_batch([[1, 0], [0, 1]], [[1]])
    with pytest.raises(ValueError):
        make_batch([1, 0], [[1]])
