import logging

import numpy as np
import pytest

from gmultigrid.config import loads_config
from gmultigrid.problem import PolylineDomain, ConstraintStack, BarycenterConstraint, PinConstraint
from gmultigrid.run import (
    build_domain_from_config,
    build_hierarchy_from_config,
    correct_constraints_on_coarsest,
    measure_constraint_violation,
    run_from_config,
    run_sweep,
)
from gmultigrid.runtime.logging import logging_to_file


TOML = """
[domain]
shape = "helix"
nb_vertices = 65
radius = 1.0
pitch = 0.4
nb_turns = 2.0
values = "random"
seed = 3

[[constraints]]
type = "barycenter"

[[constraints]]
type = "pin"
indices = [0, -1]

[hierarchy]
min_vertices = 9

[solve]
seed = 0
"""


def test_build_domain_from_config():
    config = loads_config(TOML)
    domain = build_domain_from_config(config)

    assert isinstance(domain, PolylineDomain)
    assert domain.num_vertices() == 65
    assert domain.num_rows() == 68
    assert isinstance(domain.constraints, ConstraintStack)
    [barycenter, pin] = domain.constraints.parts
    assert isinstance(barycenter, BarycenterConstraint)
    assert isinstance(pin, PinConstraint)
    assert np.array_equal(pin.indices, [0, 64])


def test_single_constraint_is_not_stacked():
    config = loads_config(TOML)
    config.constraints = [{"type": "sum", "target": 2.0}]
    domain = build_domain_from_config(config)
    assert domain.num_rows() == 66
    assert not isinstance(domain.constraints, ConstraintStack)


def test_unknown_names():
    config = loads_config(TOML)
    config.constraints = [{"type": "length"}]
    with pytest.raises(ValueError, match="Unknown constraint type"):
        build_domain_from_config(config)

    config = loads_config(TOML)
    config.domain["values"] = "sinusoid"
    with pytest.raises(ValueError, match="Unknown initial values"):
        build_domain_from_config(config)

    config = loads_config(TOML)
    config.constraints = []
    with pytest.raises(ValueError):
        build_domain_from_config(config)

    config = loads_config(TOML)
    config.constraints = [{"type": "pin"}]
    with pytest.raises(ValueError, match="indices"):
        build_domain_from_config(config)


def test_coarsest_correction_satisfies_constraints():
    config = loads_config(TOML)
    config.constraints.append({"type": "sum", "target": 4.0, "indices": list(range(10, 30))})
    finest = build_domain_from_config(config)
    hierarchy = build_hierarchy_from_config(config, finest)
    assert hierarchy.nb_levels == 4

    assert measure_constraint_violation(finest) > 1e-3
    finest.set_values(correct_constraints_on_coarsest(hierarchy))
    assert measure_constraint_violation(finest) < 1e-10


def test_run_from_config():
    config = loads_config(TOML)
    summary = run_from_config(config)

    assert summary.level_sizes == [65, 33, 17, 9]
    assert summary.nb_levels == 4
    # barycenter and pins are taken from the initial values
    assert summary.constraint_violation < 1e-12
    assert summary.corrected_violation < 1e-10
    assert summary.coarsest_error < 1e-8
    assert summary.time > 0


def test_run_sweep_writes_one_log_per_run(tmp_path):
    config = loads_config(TOML + """
[[sweep]]
path = "domain.nb_vertices"
values = [17, 33]
""")
    summaries = run_sweep(config, tmp_path / "logs")

    assert [s.level_sizes[0] for s in summaries] == [17, 33]
    for index in range(2):
        log_text = (tmp_path / "logs" / f"run-{index}.log").read_text(encoding="utf-8")
        assert f"Run #{index + 1} of 2 runs." in log_text
        assert "Constraints: barycenter, pin" in log_text


def test_logging_to_file(tmp_path):
    logger = logging.getLogger("gmultigrid.test")
    logger.setLevel(logging.INFO)
    log_file = tmp_path / "one.log"

    with logging_to_file(log_file):
        logger.info("inside")
    logger.info("outside")

    text = log_file.read_text(encoding="utf-8")
    assert "inside" in text
    assert "outside" not in text


def test_logging_to_file_with_quiet_root_logger(tmp_path):
    root_logger = logging.getLogger()
    old_level = root_logger.level
    root_logger.setLevel(logging.WARNING)
    log_file = tmp_path / "quiet.log"

    try:
        with logging_to_file(log_file):
            logging.getLogger("gmultigrid.run").info("recorded")
        assert root_logger.level == logging.WARNING
    finally:
        root_logger.setLevel(old_level)

    assert "recorded" in log_file.read_text(encoding="utf-8")


def test_negative_sum_indices_count_from_the_end():
    config = loads_config(TOML)
    config.constraints = [{"type": "sum", "target": 1.0, "indices": [0, -1]}]
    domain = build_domain_from_config(config)

    assert np.array_equal(domain.constraints.indices, [0, 64])
    B = domain.constraints.fill_constraint_matrix().toarray()
    assert np.array_equal(np.flatnonzero(B[0]), [0, 64])
