"""defusedxml parsing for FDX documents and XML text hygiene.

``parse_xml_safe`` reads documents back with entity expansion and DTD
retrieval disabled and an optional size cap.  ``strip_illegal_xml_chars``
removes characters that XML 1.0 cannot represent.
"""

import logging
import re
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as SafeET
from defusedxml.common import DefusedXmlException

from core.exceptions import EncodingError

logger = logging.getLogger(__name__)

MAX_XML_SIZE = 10 * 1024 * 1024

# Characters outside the XML 1.0 ``Char`` production.
_ILLEGAL_XML_CHARS = re.compile(
    "[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def strip_illegal_xml_chars(text: str) -> str:
    """Remove characters that cannot appear in an XML 1.0 document."""
    return _ILLEGAL_XML_CHARS.sub("", text)


def parse_xml_safe(content: bytes | str, *, max_size: int = MAX_XML_SIZE) -> Element:
    """Parse XML securely using defusedxml.

    Raises ``EncodingError`` on any XML security violation or malformed input.
    """
    if len(content) > max_size:
        raise EncodingError(
            f"XML payload exceeds size limit ({len(content)} > {max_size})",
            details={"size": len(content), "max_size": max_size},
        )

    try:
        return SafeET.fromstring(content)
    except DefusedXmlException as exc:
        raise EncodingError(
            f"XML contains forbidden constructs: {exc}",
            details={"reason": exc.__class__.__name__},
        ) from exc
    except SafeET.ParseError as exc:
        logger.error("Generated XML is malformed: %s", exc)
        raise EncodingError(
            f"Malformed XML: {exc}",
            details={"reason": "parse_error"},
        ) from exc
