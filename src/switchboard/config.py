"""Service configuration.

ServiceConfig is a frozen dataclass. Settings are typed attributes that
cannot change once the service is built.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Service configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServiceConfig(root="/blobstore", strict_handlers=True)
    """

    # Path prefix prepended to every registered template
    root: str = ""

    # Include exception text in 500 envelopes
    debug: bool = False

    # Binding policy
    strict_handlers: bool = False  # arity/type mistakes raise at registration
    fallthrough_on_coercion_error: bool = True  # False = coercion failure goes straight to fallback

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Request bodies at least this large are decoded in a worker thread
    offload_threshold: int = 256 * 1024
