import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from gigz_scraper.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def init_sentry(app_settings: Optional[Settings] = None) -> bool:
    """
    Initializes the Sentry SDK if a DSN is configured.
    Returns True when the SDK was initialized.
    """
    app_settings = app_settings or default_settings
    sentry_settings = app_settings.sentry

    if not sentry_settings.dsn:
        logger.info("Sentry DSN not found in settings. Sentry SDK will not be initialized.")
        return False

    effective_environment = sentry_settings.environment or app_settings.environment
    logger.info(f"Sentry DSN found. Initializing Sentry SDK for environment: '{effective_environment}'.")

    integrations = [
        LoggingIntegration(
            level=logging.INFO,        # breadcrumbs
            event_level=logging.ERROR
        ),
    ]

    try:
        sentry_sdk.init(
            dsn=str(sentry_settings.dsn),
            environment=effective_environment,
            traces_sample_rate=sentry_settings.traces_sample_rate,
            integrations=integrations,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Sentry SDK: {e}", exc_info=True)
        return False

    logger.info("Sentry SDK initialized successfully.")
    return True
