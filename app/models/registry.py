"""Idempotent access to the mapped entity classes.

Entity modules may be executed more than once in a single process (auto
reload, repeated imports from different entry points). Defining a mapped
class twice against the same metadata fails with "Table ... is already
defined", so every caller resolves models through this registry, which
returns the class already mapped under a name instead of defining it again.
"""

import importlib
import logging
import threading
from typing import Any

from sqlalchemy.exc import InvalidRequestError

from app.database import Base

logger = logging.getLogger(__name__)

# Entity name -> module that defines it
MODEL_MODULES: dict[str, str] = {
    "User": "app.models.user",
    "Tour": "app.models.tour",
    "Booking": "app.models.booking",
}

_resolved: dict[str, type[Base]] = {}
_lock = threading.Lock()


class ModelRegistrationError(RuntimeError):
    """Raised when an entity cannot be resolved to a mapped class."""


def _find_mapped_class(name: str) -> type[Base] | None:
    for mapper in Base.registry.mappers:
        if mapper.class_.__name__ == name:
            return mapper.class_
    return None


def _is_already_defined(exc: InvalidRequestError) -> bool:
    message = str(exc)
    return "already defined" in message or "already contains a class" in message


def get_model(name: str) -> type[Base]:
    """Return the mapped class for ``name``, defining it at most once."""
    model = _resolved.get(name)
    if model is not None:
        return model

    if name not in MODEL_MODULES:
        raise ModelRegistrationError(f"Unknown model '{name}'")

    with _lock:
        model = _resolved.get(name) or _find_mapped_class(name)
        if model is None:
            try:
                module = importlib.import_module(MODEL_MODULES[name])
                model = getattr(module, name, None)
            except InvalidRequestError as exc:
                if not _is_already_defined(exc):
                    raise
                logger.warning(f"Model {name} was already defined; reusing existing mapping")
                model = _find_mapped_class(name)

        if model is None:
            raise ModelRegistrationError(f"Model '{name}' could not be registered")

        _resolved[name] = model
    return model


def get_user_model() -> type[Base]:
    return get_model("User")


def get_tour_model() -> type[Base]:
    return get_model("Tour")


def get_booking_model() -> type[Base]:
    return get_model("Booking")


def register_models() -> dict[str, type[Base] | None]:
    """Make sure every entity is registered and return them by name.

    Resolution failures are logged and reported as ``None``; this is called
    on every connection check and must never take the process down.
    """
    models: dict[str, type[Base] | None] = {}
    for name in MODEL_MODULES:
        try:
            models[name] = get_model(name)
        except (ModelRegistrationError, InvalidRequestError, ImportError) as exc:
            logger.warning(f"{name} model not registered: {exc}")
            models[name] = None

    registered = [name for name, model in models.items() if model is not None]
    logger.debug(f"Models registered: {', '.join(registered)}")
    return models


async def preload_models() -> dict[str, Any]:
    """Connect to the database, then register every model.

    Returns ``{"success": True, "models": [...]}`` or
    ``{"success": False, "error": "..."}``; never raises.
    """
    from app.database import connect_db

    try:
        logger.info("Preloading models...")
        await connect_db()
        models = register_models()
        return {
            "success": True,
            "models": sorted(name for name, model in models.items() if model is not None),
        }
    except Exception as e:
        logger.error(f"Error preloading models: {e}")
        return {"success": False, "error": str(e) or e.__class__.__name__}


def reset_registry() -> None:
    """Forget cached resolutions (mapped classes stay mapped)."""
    with _lock:
        _resolved.clear()
