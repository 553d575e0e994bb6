import logging
import os
import sys

from gmultigrid.config import load_config
from gmultigrid.run import run_sweep
from gmultigrid.runtime.logging import reset_logging


reset_logging()
logger = logging.getLogger(__name__)


def main():
    case_dir = os.path.dirname(os.path.abspath(__file__))
    config_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(case_dir, "config.toml")
    log_dir = os.path.join(case_dir, "logs")

    config = load_config(config_file)
    summaries = run_sweep(config, log_dir)

    logger.info("=" * 80)
    for [index, summary] in enumerate(summaries):
        levels = " > ".join(str(n) for n in summary.level_sizes)
        logger.info(f"Run #{index + 1}: levels {levels}; violation {summary.constraint_violation:.1e} "
                    f"-> {summary.corrected_violation:.1e}; coarsest error {summary.coarsest_error:.1e}")


if __name__ == "__main__":
    main()
