"""Main entry point for the XO Prometheus HTTP SD service."""
import argparse
import logging
import sys

from xo_sd.config import load_config
from xo_sd.discovery import TargetDiscovery
from xo_sd.sd_api import SdAPI
from xo_sd.self_metrics import SelfMetrics
from xo_sd.xo_client import XoClient


def setup_logging(log_level: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Reduce noise from some libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def main():
    """Main function."""
    parser = argparse.ArgumentParser(
        description="Prometheus HTTP service discovery from Xen Orchestra VM tags"
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to configuration YAML file (environment variables are used otherwise)"
    )

    args = parser.parse_args()

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config.global_.log_level)
    logger = logging.getLogger(__name__)

    logger.info("XO Prometheus HTTP SD")
    if args.config:
        logger.info(f"Configuration loaded from: {args.config}")
    logger.info(f"XOA URL: {config.xo.url}")
    logger.info(f"Tag prefix: {config.discovery.tag_prefix}:")

    self_metrics = SelfMetrics(prefix=config.discovery.metrics_prefix)
    discovery = TargetDiscovery(
        XoClient(config.xo),
        tag_prefix=config.discovery.tag_prefix,
        self_metrics=self_metrics
    )
    sd_api = SdAPI(discovery)

    # Run SD API (blocking)
    logger.info(
        f"Starting SD API on {config.global_.bind_address}:{config.global_.port}"
    )
    try:
        sd_api.run(host=config.global_.bind_address, port=config.global_.port)
    except Exception as e:
        logger.error(f"SD API error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
