import logging
import logging.config
import yaml
from pathlib import Path
from ..config.settings import settings # Use relative import from config within the same package

DEFAULT_LOGGING_CONFIG_PATH = Path(settings.LOGGING_CONFIG_PATH)

def setup_logging(config_path: Path = DEFAULT_LOGGING_CONFIG_PATH) -> None:
    """
    Set up logging configuration from a YAML file.

    Args:
        config_path (Path): Path to the logging configuration YAML file.
    """
    config_path = Path(config_path)
    if config_path.exists():
        try:
            with open(config_path, 'rt', encoding='utf-8') as f:
                log_config = yaml.safe_load(f.read())
            logging.config.dictConfig(log_config)
            logging.getLogger(__name__).info("Logging configured successfully from %s", config_path)
        except Exception as e:
            logging.basicConfig(level=logging.INFO) # Basic config as fallback
            logging.error(f"Error loading logging configuration from {config_path}: {e}. Using basicConfig.")
    else:
        logging.basicConfig(level=logging.INFO) # Basic config if no file found
        logging.warning(f"Logging configuration file not found at {config_path}. Using basicConfig.")

# Not called on import; applications call setup_logging() during startup.
