import logging
import logging.config

def configure_logging(app_config=None) -> logging.Logger:
    """Apply the app's dictConfig; file output follows LOG_TO_FILE."""
    if app_config is None:
        from sahaayak.config import config as app_config

    if app_config.log_to_file:
        app_config.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(app_config.get_logging_config())
    return logging.getLogger("sahaayak")
