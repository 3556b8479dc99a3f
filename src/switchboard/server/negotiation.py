"""Content negotiation — picks the response codec and encodes envelopes.

Selection rule, in order:

1. the request's ``Accept`` header, when present and non-empty;
2. otherwise its ``Content-Type`` header.

The chosen value must name a registered codec. An unregistered
``Accept`` does not fall back to ``Content-Type``.
"""

from switchboard.errors import UnsupportedContentTypeError
from switchboard.http.headers import Headers
from switchboard.http.response import Response, plain_text
from switchboard.serialization.envelope import Envelope
from switchboard.serialization.registry import CodecRegistry


def select_content_type(headers: Headers, registry: CodecRegistry) -> str:
    """Return the content type to encode the response with.

    Raises ``UnsupportedContentTypeError`` if it has no codec.
    """
    content_type = headers.get("accept") or headers.get("content-type")
    if not content_type or content_type not in registry:
        raise UnsupportedContentTypeError(content_type)
    return content_type


def encode_envelope(
    envelope: Envelope,
    headers: Headers,
    registry: CodecRegistry,
) -> Response:
    """Encode *envelope* for the negotiated content type.

    Raises ``UnsupportedContentTypeError`` when negotiation fails and
    ``EncodeError`` when the payload cannot be encoded.
    """
    content_type = select_content_type(headers, registry)
    body = registry.encode(content_type, envelope.to_wire())
    return Response(body=body, status=envelope.status, content_type=content_type)


def encode_error(
    status: int,
    error: str,
    headers: Headers,
    registry: CodecRegistry,
) -> Response:
    """Encode an error envelope, keeping *status* even without a codec.

    When no codec can be negotiated the error text goes out as plain
    text; the status code is never replaced.
    """
    try:
        return encode_envelope(Envelope.failure(status, error), headers, registry)
    except UnsupportedContentTypeError:
        return plain_text(error, status)
