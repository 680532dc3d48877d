"""Transport provider loading."""

import importlib
import logging
from typing import Any

from chatfleet.config import ConfigValidationError
from chatfleet.domain.services import TransportProvider

logger = logging.getLogger(__name__)


def load_transport_provider(
    factory: str,
    options: dict[str, Any] | None = None,
) -> TransportProvider:
    """Build the transport provider named in the configuration.

    Args:
        factory: "package.module:callable" path. The callable receives the
            options as keyword arguments and returns a TransportProvider.
        options: Provider-specific options.

    Returns:
        Transport provider instance.

    Raises:
        ConfigValidationError: The path is malformed or cannot be imported.
    """
    module_name, sep, attr_name = factory.partition(":")
    if not sep or not module_name or not attr_name:
        raise ConfigValidationError(
            f"transport.factory must look like 'package.module:callable', got {factory!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigValidationError(
            f"Cannot import transport module {module_name!r}: {e}"
        ) from e

    target = getattr(module, attr_name, None)
    if target is None or not callable(target):
        raise ConfigValidationError(
            f"Transport factory {attr_name!r} not found in {module_name!r}"
        )

    provider = target(**(options or {}))
    logger.info("Loaded transport provider from %s", factory)
    return provider
