"""Final Draft XML (.fdx) encoder.

Serializes a ``Screenplay`` plus title page text into an FDX document::

    <FinalDraft DocumentType="Script" Template="No" Version="5">
      <TitlePage>
        <Content>
          <Paragraph Alignment="Center"><Text>Title</Text></Paragraph>
          <Paragraph Alignment="Center"><Text>Written by</Text></Paragraph>
          <Paragraph Alignment="Center"><Text>Author</Text></Paragraph>
        </Content>
      </TitlePage>
      <Content>
        <Paragraph Type="Scene Heading"><Text>INT. BAR - NIGHT</Text></Paragraph>
        <Paragraph Type="Action"><Text>A man enters.</Text></Paragraph>
      </Content>
    </FinalDraft>

The tree is built with ``ElementTree`` so every string is escaped exactly
once, then pretty-printed through ``defusedxml.minidom``.
"""

import logging
from xml.etree import ElementTree as ET

from defusedxml import minidom

from core.exceptions import EncodingError
from core.models import SCENE_HEADING_TYPE, Screenplay, TitlePageInfo
from fdx.secure_xml import parse_xml_safe, strip_illegal_xml_chars

logger = logging.getLogger(__name__)

# Root attributes expected by Final Draft compatible readers.
FDX_DOCUMENT_TYPE = "Script"
FDX_TEMPLATE = "No"
FDX_VERSION = "5"

WRITTEN_BY = "Written by"


def _paragraph(parent: ET.Element, text: str, **attrs: str) -> ET.Element:
    """Append ``<Paragraph ...><Text>text</Text></Paragraph>`` to *parent*."""
    para = ET.SubElement(parent, "Paragraph", attrs)
    text_el = ET.SubElement(para, "Text")
    text_el.text = strip_illegal_xml_chars(text)
    return para


class FDXEncoder:
    """Builds FDX documents from ``Screenplay`` values.

    Encoding is deterministic: identical input gives byte-identical output.
    """

    def __init__(self, indent: str = "  ") -> None:
        self.indent = indent

    def build_tree(self, screenplay: Screenplay, title_page: TitlePageInfo) -> ET.Element:
        """Return the ``<FinalDraft>`` root element for *screenplay*."""
        root = ET.Element(
            "FinalDraft",
            {
                "DocumentType": FDX_DOCUMENT_TYPE,
                "Template": FDX_TEMPLATE,
                "Version": FDX_VERSION,
            },
        )

        title_content = ET.SubElement(ET.SubElement(root, "TitlePage"), "Content")
        for line in (title_page.title, WRITTEN_BY, title_page.author):
            _paragraph(title_content, line, Alignment="Center")

        content = ET.SubElement(root, "Content")
        for scene in screenplay.scenes:
            _paragraph(content, scene.heading, Type=SCENE_HEADING_TYPE)
            for element in scene.elements:
                _paragraph(content, element.content, Type=element.kind.value)

        return root

    def encode_bytes(
        self,
        screenplay: Screenplay,
        title: str | None = None,
        author: str | None = None,
    ) -> bytes:
        """Encode *screenplay* as UTF-8 FDX bytes."""
        title_page = TitlePageInfo(title=title, author=author)
        root = self.build_tree(screenplay, title_page)

        raw = ET.tostring(root, encoding="unicode")
        document = minidom.parseString(raw).toprettyxml(indent=self.indent, encoding="UTF-8")

        self._verify(document, screenplay)
        logger.debug(
            "Encoded FDX: %d scenes, %d elements, %d bytes",
            len(screenplay.scenes),
            screenplay.element_count,
            len(document),
        )
        return document

    def encode(
        self,
        screenplay: Screenplay,
        title: str | None = None,
        author: str | None = None,
    ) -> str:
        """Encode *screenplay* as FDX text."""
        return self.encode_bytes(screenplay, title, author).decode("utf-8")

    @staticmethod
    def _verify(document: bytes, screenplay: Screenplay) -> None:
        """Read the document back and check its paragraph counts."""
        # Own output, so no size cap: the document is as large as the screenplay.
        root = parse_xml_safe(document, max_size=len(document))
        expected = len(screenplay.scenes) + screenplay.element_count
        found = len(root.findall("Content/Paragraph"))
        title_lines = len(root.findall("TitlePage/Content/Paragraph"))
        if found != expected or title_lines != 3:
            raise EncodingError(
                "Encoded document does not match the screenplay structure",
                details={
                    "expected_paragraphs": expected,
                    "found_paragraphs": found,
                    "title_page_paragraphs": title_lines,
                },
            )


def encode(screenplay: Screenplay, title: str | None = None, author: str | None = None) -> str:
    """Encode *screenplay* as FDX text with default formatting."""
    return FDXEncoder().encode(screenplay, title, author)
