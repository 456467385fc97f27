"""Allow running the admin API as: python -m crm_metrics.api [--config path]."""

import argparse

from crm_metrics.api.runner import main

parser = argparse.ArgumentParser(description="Metrics cache admin API")
parser.add_argument("--config", default=None, help="Path to config.yaml")
args = parser.parse_args()
main(config_path=args.config)
