# Core module exports
from core.config import settings, get_settings, Settings
from core.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    unbind_context,
    generate_correlation_id,
    api_logger,
    intake_logger,
    gateway_logger,
)
