"""Factory pattern for creating dispatcher instances."""

from app.adapters.dispatcher.base import AbstractDispatcher
from app.adapters.dispatcher.qstash import QStashDispatcher
from app.core.config import DispatchSettings, settings
from app.core.errors import ValidationAppError


def build_callback_url(dispatch_settings: DispatchSettings | None = None) -> str:
    """Absolute URL of the callback entry point handed to the dispatcher.

    Raises:
        ValidationAppError: If no public base URL is configured.
    """
    cfg = dispatch_settings or settings.dispatch
    if not cfg.callback_base_url:
        raise ValidationAppError(
            code="dispatch_missing_callback_url",
            message="Dispatcher requires DISPATCH_CALLBACK_BASE_URL environment variable",
        )
    return f"{cfg.callback_base_url.rstrip('/')}/{cfg.callback_path.lstrip('/')}"


def create_dispatcher(dispatch_settings: DispatchSettings | None = None) -> AbstractDispatcher:
    """Instantiate the configured dispatcher.

    Validates provider-specific requirements before building the client.

    Returns:
        AbstractDispatcher: Configured dispatcher instance.

    Raises:
        ValidationAppError: If provider-specific requirements are not met.
    """
    cfg = dispatch_settings or settings.dispatch
    provider = cfg.provider.lower()

    if provider == "qstash":
        if not cfg.qstash_token:
            raise ValidationAppError(
                code="dispatch_missing_token",
                message="QStash dispatcher requires DISPATCH_QSTASH_TOKEN environment variable",
            )
        if not cfg.target_api_key:
            raise ValidationAppError(
                code="dispatch_missing_target_key",
                message="QStash dispatcher requires DISPATCH_TARGET_API_KEY environment variable",
            )
        return QStashDispatcher(
            token=cfg.qstash_token,
            target_url=cfg.target_url,
            target_api_key=cfg.target_api_key,
            publish_url=cfg.qstash_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ValidationAppError(
        code="dispatch_unknown_provider",
        message=f"Unknown dispatcher provider: '{provider}'. Supported providers: qstash",
    )
