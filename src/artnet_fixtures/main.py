"""
Main entry point for artnet-fixtures.
"""
import argparse
import os

from .config_schema import ConfigValidator, validate_config_file
from .constants import DEFAULT_API_HOST, DEFAULT_API_PORT, DEFAULT_LOG_DIR
from .instance import FixtureInstance
from .logger import FixtureLogger, get_logger, install_exception_hooks, parse_log_level

logger = get_logger(__name__)


def load_config(config_path):
    """Load and validate config.json, falling back to the defaults on errors."""
    is_valid, errors, config = validate_config_file(config_path)

    if not is_valid:
        logger.warning(f"Config validation failed for {config_path}:")
        for error in errors:
            logger.warning(f"    - {error}")
        logger.warning("Using default configuration")
        config = ConfigValidator().get_default_config()
    else:
        logger.info("Configuration loaded and validated")

    return config


def main(argv=None):
    """Start the fixture instance and its REST API."""
    parser = argparse.ArgumentParser(description="Art-Net fixture control surface")
    parser.add_argument(
        "-c", "--config",
        default=os.path.join(os.getcwd(), "config.json"),
        help="Path to config.json (defaults are used if missing or invalid)"
    )
    parser.add_argument("--host", help="REST API host (overrides config)")
    parser.add_argument("--port", type=int, help="REST API port (overrides config)")
    args = parser.parse_args(argv)

    fixture_logger = FixtureLogger()
    fixture_logger.setup_logging(log_dir=None)
    install_exception_hooks()

    config = load_config(args.config)

    app_config = config.get('app', {})
    fixture_logger.setup_logging(
        log_dir=app_config.get('log_dir', DEFAULT_LOG_DIR),
        log_level=parse_log_level(app_config.get('log_level'), default=parse_log_level('INFO')),
        console_level=parse_log_level(app_config.get('console_log_level')),
        max_log_files=app_config.get('max_log_files', 10)
    )
    logger.debug("artnet-fixtures starting...")

    instance = FixtureInstance()
    instance.init(config.get('instance', {}))
    logger.info(f"Instance status: {instance.status.value}"
                + (f" ({instance.status_message})" if instance.status_message else ""))

    # Imported here so the Flask stack is only loaded for the server process
    from .rest_api import RestAPI

    api_config = config.get('api', {})
    rest_api = RestAPI(instance, config)
    try:
        rest_api.run(
            host=args.host or api_config.get('host', DEFAULT_API_HOST),
            port=args.port or api_config.get('port', DEFAULT_API_PORT)
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        instance.destroy()


if __name__ == "__main__":
    main()
